#!/usr/bin/env python3
"""
Tests for the EventKit backing store.

Native objects are replaced with MagicMock doubles so these run anywhere;
the live checks at the bottom are marked @pytest.mark.macos and are skipped
off Darwin.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from reminders_bridge.core.exceptions import (
    AuthorizationError,
    EventKitImportError,
    StoreOperationError,
)
from reminders_bridge.core.models import DueDate, ReminderItem, ReminderList
from reminders_bridge.reminders.gateway import NS_DATE_COMPONENT_UNDEFINED, EventKitStore


def _calendar(identifier, title="Groceries", source_id="S1"):
    cal = MagicMock()
    cal.calendarIdentifier.return_value = identifier
    cal.title.return_value = title
    cal.source.return_value.sourceIdentifier.return_value = source_id
    return cal


def _components(year, month, day):
    comps = MagicMock()
    comps.year.return_value = year
    comps.month.return_value = month
    comps.day.return_value = day
    return comps


def _native_reminder(identifier, calendar, title="Milk", components=None):
    rem = MagicMock()
    rem.calendarItemIdentifier.return_value = identifier
    rem.title.return_value = title
    rem.notes.return_value = None
    rem.priority.return_value = 0
    rem.isCompleted.return_value = False
    rem.calendar.return_value = calendar
    rem.dueDateComponents.return_value = components
    rem.isKindOfClass_.return_value = True
    return rem


@pytest.fixture
def gateway():
    """EventKitStore wired to mock EventKit classes and a mock EKEventStore."""
    store = EventKitStore()
    store._EKCalendar = MagicMock()
    store._EKEventStore = MagicMock()
    store._EKEntityTypeReminder = 1
    store._EKReminder = MagicMock()
    store._NSDate = MagicMock()
    store._NSDateComponents = MagicMock()
    store._NSRunLoop = MagicMock()
    store._store = MagicMock()
    yield store
    store.close()


@pytest.fixture
def calendars(gateway):
    cals = {"L1": _calendar("L1"), "L2": _calendar("L2", title="Work")}
    native = gateway._store
    native.calendarWithIdentifier_.side_effect = cals.get
    native.calendarsForEntityType_.return_value = list(cals.values())
    native.defaultCalendarForNewReminders.return_value = cals["L1"]
    return cals


class TestImport:
    def test_missing_pyobjc(self):
        store = EventKitStore()
        try:
            with patch.dict(sys.modules, {"EventKit": None}):
                with pytest.raises(EventKitImportError):
                    store.current_authorization()
        finally:
            store.close()


class TestAuthorization:
    def test_reads_raw_status(self, gateway):
        gateway._EKEventStore.authorizationStatusForEntityType_.return_value = 3

        assert gateway.current_authorization() == 3
        gateway._EKEventStore.authorizationStatusForEntityType_.assert_called_once_with(1)

    def test_status_failure(self, gateway):
        gateway._EKEventStore.authorizationStatusForEntityType_.side_effect = RuntimeError("x")

        with pytest.raises(AuthorizationError):
            gateway.current_authorization()

    def test_capability_model(self, gateway):
        assert gateway.tiered_access is True

        gateway._EKEventStore = MagicMock(spec=["alloc", "authorizationStatusForEntityType_"])
        assert gateway.tiered_access is False

    @pytest.mark.asyncio
    async def test_request_full_access(self, gateway):
        gateway._store.requestFullAccessToRemindersWithCompletion_.side_effect = (
            lambda completion: completion(True, None)
        )

        assert await gateway.request_authorization() is True

    @pytest.mark.asyncio
    async def test_request_on_binary_model(self, gateway):
        gateway._EKEventStore = MagicMock(spec=["alloc", "authorizationStatusForEntityType_"])
        gateway._store.requestAccessToEntityType_completion_.side_effect = (
            lambda entity, completion: completion(False, None)
        )

        assert await gateway.request_authorization() is False
        gateway._store.requestAccessToEntityType_completion_.assert_called_once()

    @pytest.mark.asyncio
    async def test_request_error(self, gateway):
        error = MagicMock()
        error.localizedDescription.return_value = "prompt unavailable"
        gateway._store.requestFullAccessToRemindersWithCompletion_.side_effect = (
            lambda completion: completion(False, error)
        )

        with pytest.raises(AuthorizationError, match="prompt unavailable"):
            await gateway.request_authorization()

    @pytest.mark.asyncio
    async def test_completion_resolves_once(self, gateway):
        def answer_twice(completion):
            completion(True, None)
            completion(False, None)

        gateway._store.requestFullAccessToRemindersWithCompletion_.side_effect = answer_twice

        assert await gateway.request_authorization() is True


class TestLists:
    @pytest.mark.asyncio
    async def test_enumerate_lists(self, gateway, calendars):
        lists = await gateway.enumerate_lists()

        assert lists == [
            ReminderList(title="Groceries", id="L1", source_id="S1"),
            ReminderList(title="Work", id="L2", source_id="S1"),
        ]

    @pytest.mark.asyncio
    async def test_resolve_list_ignores_event_calendars(self, gateway, calendars):
        event_calendar = _calendar("E1", title="Birthdays")
        gateway._store.calendarWithIdentifier_.side_effect = (
            lambda i: event_calendar if i == "E1" else calendars.get(i)
        )

        assert await gateway.resolve_list("E1") is None
        assert (await gateway.resolve_list("L2")).title == "Work"

    @pytest.mark.asyncio
    async def test_default_list(self, gateway, calendars):
        assert (await gateway.default_list()).id == "L1"

    @pytest.mark.asyncio
    async def test_create_list_on_source(self, gateway, calendars):
        source = MagicMock()
        source.sourceIdentifier.return_value = "S1"
        gateway._store.sources.return_value = [source]
        new_calendar = _calendar("L3", title="")
        gateway._EKCalendar.calendarForEntityType_eventStore_.return_value = new_calendar
        gateway._store.saveCalendar_commit_error_.return_value = (True, None)

        new_id = await gateway.persist_list(ReminderList(title="Shopping", source_id="S1"))

        assert new_id == "L3"
        new_calendar.setSource_.assert_called_once_with(source)
        new_calendar.setTitle_.assert_called_once_with("Shopping")
        gateway._store.saveCalendar_commit_error_.assert_called_once_with(new_calendar, True, None)

    @pytest.mark.asyncio
    async def test_create_list_unknown_source(self, gateway, calendars):
        gateway._store.sources.return_value = []

        with pytest.raises(StoreOperationError):
            await gateway.persist_list(ReminderList(title="Shopping", source_id="nope"))

    @pytest.mark.asyncio
    async def test_remove_list_failure(self, gateway, calendars):
        error = MagicMock()
        error.localizedDescription.return_value = "Calendar is read only"
        gateway._store.removeCalendar_commit_error_.return_value = (False, error)

        with pytest.raises(StoreOperationError, match="read only"):
            await gateway.remove_list(ReminderList(title="Groceries", id="L1"))


class TestReminders:
    @pytest.mark.asyncio
    async def test_enumerate_items_converts_native_reminders(self, gateway, calendars):
        native = [
            _native_reminder("R1", calendars["L1"], components=_components(2024, 5, 1)),
            _native_reminder(
                "R2", calendars["L1"], title="Bread",
                components=_components(2024, NS_DATE_COMPONENT_UNDEFINED, 1),
            ),
        ]
        gateway._store.fetchRemindersMatchingPredicate_completion_.side_effect = (
            lambda predicate, completion: completion(native)
        )

        items = await gateway.enumerate_items(["L1"])

        assert items[0] == ReminderItem(list_id="L1", title="Milk", id="R1", due_date=DueDate(2024, 5, 1))
        assert items[1].due_date is None
        gateway._store.predicateForRemindersInCalendars_.assert_called_once_with([calendars["L1"]])

    @pytest.mark.asyncio
    async def test_unresolved_lists_fetch_nothing(self, gateway, calendars):
        assert await gateway.enumerate_items(["missing"]) == []
        gateway._store.fetchRemindersMatchingPredicate_completion_.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_lists_uses_nil_predicate(self, gateway, calendars):
        gateway._store.fetchRemindersMatchingPredicate_completion_.side_effect = (
            lambda predicate, completion: completion(None)
        )

        assert await gateway.enumerate_items(None) == []
        gateway._store.predicateForRemindersInCalendars_.assert_called_once_with(None)

    @pytest.mark.asyncio
    async def test_resolve_item_rejects_events(self, gateway, calendars):
        event = _native_reminder("E1", calendars["L1"])
        event.isKindOfClass_.return_value = False
        gateway._store.calendarItemWithIdentifier_.return_value = event

        assert await gateway.resolve_item("E1") is None

    @pytest.mark.asyncio
    async def test_persist_new_reminder(self, gateway, calendars):
        native = _native_reminder("NEW", calendars["L1"])
        gateway._EKReminder.reminderWithEventStore_.return_value = native
        gateway._store.saveReminder_commit_error_.return_value = (True, None)

        new_id = await gateway.persist(
            ReminderItem(list_id="L1", title="Milk", priority=1, due_date=DueDate(2024, 5, 1))
        )

        assert new_id == "NEW"
        native.setCalendar_.assert_called_once_with(calendars["L1"])
        native.setTitle_.assert_called_once_with("Milk")
        native.setPriority_.assert_called_once_with(1)
        components = gateway._NSDateComponents.alloc.return_value.init.return_value
        components.setYear_.assert_called_once_with(2024)
        native.setDueDateComponents_.assert_called_once_with(components)

    @pytest.mark.asyncio
    async def test_persist_clears_due_date(self, gateway, calendars):
        native = _native_reminder("R1", calendars["L1"])
        gateway._store.calendarItemWithIdentifier_.return_value = native
        gateway._store.saveReminder_commit_error_.return_value = (True, None)

        await gateway.persist(ReminderItem(list_id="L1", title="Milk", id="R1"))

        native.setDueDateComponents_.assert_called_once_with(None)
        native.setNotes_.assert_called_once_with(None)

    @pytest.mark.asyncio
    async def test_persist_save_failure(self, gateway, calendars):
        gateway._EKReminder.reminderWithEventStore_.return_value = _native_reminder("X", calendars["L1"])
        error = MagicMock()
        error.localizedDescription.return_value = "Disk full"
        gateway._store.saveReminder_commit_error_.return_value = (False, error)

        with pytest.raises(StoreOperationError, match="Disk full"):
            await gateway.persist(ReminderItem(list_id="L1", title="Milk"))

    @pytest.mark.asyncio
    async def test_remove_missing_reminder(self, gateway, calendars):
        gateway._store.calendarItemWithIdentifier_.return_value = None

        with pytest.raises(StoreOperationError):
            await gateway.remove(ReminderItem(list_id="L1", title="Milk", id="gone"))


@pytest.mark.macos
@pytest.mark.eventkit
class TestLiveEventKit:
    """Read-only checks against the real EventKit framework."""

    def test_status_is_a_known_code(self):
        store = EventKitStore()
        try:
            assert store.current_authorization() in range(0, 5)
        finally:
            store.close()
