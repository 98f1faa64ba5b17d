"""Apple Reminders backing store using EventKit."""

import asyncio
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence
import logging

from ..core.exceptions import (
    AuthorizationError,
    EventKitImportError,
    InvalidDateComponentsError,
    StoreOperationError,
)
from ..core.models import DueDate, ReminderItem, ReminderList
from .store import BackingStore


FETCH_TIMEOUT_SECONDS = 30
NS_DATE_COMPONENT_UNDEFINED = 9223372036854775807


def _describe(error: Any) -> str:
    """Best-effort text for an NSError (or anything else)."""
    if error is None:
        return "unknown error"
    if hasattr(error, "localizedDescription"):
        try:
            return str(error.localizedDescription())
        except Exception:  # pragma: no cover - depends on PyObjC runtime
            pass
    return str(error)


class EventKitStore(BackingStore):
    """Backing store for Apple Reminders via EventKit.

    All native calls run on one dedicated worker thread, so the EKEventStore
    is never touched concurrently and the event loop never blocks on it.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._store = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="eventkit")

    def _ensure_eventkit(self):
        """Import EventKit with specific error handling."""
        if getattr(self, "_EKEventStore", None) is not None:
            return
        try:
            from EventKit import (
                EKCalendar, EKEventStore, EKEntityTypeReminder, EKReminder
            )
            from Foundation import NSDate, NSDateComponents, NSRunLoop

            self._EKCalendar = EKCalendar
            self._EKEventStore = EKEventStore
            self._EKEntityTypeReminder = EKEntityTypeReminder
            self._EKReminder = EKReminder
            self._NSDate = NSDate
            self._NSDateComponents = NSDateComponents
            self._NSRunLoop = NSRunLoop

        except ImportError as e:
            self.logger.error(f"EventKit import failed: {e}")
            raise EventKitImportError(
                "EventKit not available. Please install PyObjC framework:\n"
                "  pip install 'reminders-bridge[macos]'\n"
                f"Import error details: {e}"
            )

    def _get_store(self):
        """Get or create the EventKit store."""
        if self._store is not None:
            return self._store

        self._ensure_eventkit()
        try:
            self._store = self._EKEventStore.alloc().init()
            self.logger.debug("EventKit store created successfully")
        except Exception as e:
            self.logger.error(f"Failed to create EventKit store: {e}")
            raise StoreOperationError(f"Failed to initialize EventKit store: {e}")
        return self._store

    async def _run(self, func: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    @property
    def tiered_access(self) -> bool:
        """macOS 14 / iOS 17 introduced full-access and write-only tiers."""
        self._ensure_eventkit()
        return hasattr(self._EKEventStore, "requestFullAccessToRemindersWithCompletion_")

    def current_authorization(self) -> int:
        self._ensure_eventkit()
        try:
            status = self._EKEventStore.authorizationStatusForEntityType_(
                self._EKEntityTypeReminder
            )
            return int(status)
        except Exception as e:
            self.logger.error(f"Failed to check authorization status: {e}")
            raise AuthorizationError(f"Failed to check EventKit authorization status: {e}")

    async def request_authorization(self) -> bool:
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def deliver(granted, error):
            # completion handlers may fire on any thread; resolve exactly once
            if future.done():
                return
            if error is not None and not granted:
                future.set_exception(AuthorizationError(_describe(error)))
            else:
                future.set_result(bool(granted))

        def completion(granted, error):
            loop.call_soon_threadsafe(deliver, granted, error)

        def request():
            store = self._get_store()
            self.logger.info("Requesting EventKit authorization for reminders...")
            if self.tiered_access:
                store.requestFullAccessToRemindersWithCompletion_(completion)
            else:
                store.requestAccessToEntityType_completion_(
                    self._EKEntityTypeReminder, completion
                )

        await self._run(request)
        return await future

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    @staticmethod
    def _to_list(calendar) -> ReminderList:
        source_id = None
        source = calendar.source()
        if source is not None:
            source_id = str(source.sourceIdentifier())
        return ReminderList(
            title=str(calendar.title() or ''),
            id=str(calendar.calendarIdentifier()),
            source_id=source_id,
        )

    def _to_item(self, rem) -> ReminderItem:
        due_date = None
        components = rem.dueDateComponents()
        if components is not None:
            parts = (components.year(), components.month(), components.day())
            if all(p not in (None, NS_DATE_COMPONENT_UNDEFINED) for p in parts):
                try:
                    due_date = DueDate(int(parts[0]), int(parts[1]), int(parts[2]))
                except InvalidDateComponentsError:
                    self.logger.warning(
                        f"Ignoring invalid due date on reminder {rem.calendarItemIdentifier()}"
                    )

        notes = rem.notes()
        calendar = rem.calendar()
        return ReminderItem(
            id=str(rem.calendarItemIdentifier()),
            list_id=str(calendar.calendarIdentifier()) if calendar is not None else "",
            title=str(rem.title() or ''),
            notes=str(notes) if notes is not None else None,
            priority=int(rem.priority()),
            is_completed=bool(rem.isCompleted()),
            due_date=due_date,
        )

    def _due_components(self, due_date: Optional[DueDate]):
        if due_date is None:
            return None
        components = self._NSDateComponents.alloc().init()
        components.setYear_(due_date.year)
        components.setMonth_(due_date.month)
        components.setDay_(due_date.day)
        return components

    # ------------------------------------------------------------------
    # Native lookups (worker thread only)
    # ------------------------------------------------------------------
    def _calendar(self, list_id: str):
        store = self._get_store()
        calendar = store.calendarWithIdentifier_(list_id)
        if calendar is None:
            return None
        # calendarWithIdentifier_ also finds event calendars
        reminder_ids = {
            str(cal.calendarIdentifier())
            for cal in store.calendarsForEntityType_(self._EKEntityTypeReminder) or []
        }
        return calendar if str(calendar.calendarIdentifier()) in reminder_ids else None

    def _reminder(self, item_id: str):
        store = self._get_store()
        item = store.calendarItemWithIdentifier_(item_id)
        if item is None or not item.isKindOfClass_(self._EKReminder):
            return None
        return item

    def _source(self, source_id: Optional[str]):
        store = self._get_store()
        for source in store.sources() or []:
            if str(source.sourceIdentifier()) == source_id:
                return source
        return None

    def _fetch(self, calendars) -> List[Any]:
        store = self._get_store()
        predicate = store.predicateForRemindersInCalendars_(calendars)

        reminders = []
        done = threading.Event()

        def completion(fetched):
            if fetched:
                reminders.extend(list(fetched))
            done.set()

        store.fetchRemindersMatchingPredicate_completion_(predicate, completion)

        start_time = time.time()
        while not done.is_set():
            if time.time() - start_time > FETCH_TIMEOUT_SECONDS:
                raise StoreOperationError(
                    f"Reminder fetch timed out after {FETCH_TIMEOUT_SECONDS} seconds."
                )
            self._NSRunLoop.currentRunLoop().runUntilDate_(
                self._NSDate.dateWithTimeIntervalSinceNow_(0.1)
            )
        return reminders

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    async def enumerate_lists(self) -> List[ReminderList]:
        def work():
            store = self._get_store()
            calendars = store.calendarsForEntityType_(self._EKEntityTypeReminder) or []
            return [self._to_list(cal) for cal in calendars]

        return await self._run(work)

    async def resolve_list(self, list_id: str) -> Optional[ReminderList]:
        def work():
            calendar = self._calendar(list_id)
            return self._to_list(calendar) if calendar is not None else None

        return await self._run(work)

    async def default_list(self) -> Optional[ReminderList]:
        def work():
            calendar = self._get_store().defaultCalendarForNewReminders()
            return self._to_list(calendar) if calendar is not None else None

        return await self._run(work)

    async def persist_list(self, reminder_list: ReminderList) -> str:
        def work():
            store = self._get_store()
            if reminder_list.id is None:
                calendar = self._EKCalendar.calendarForEntityType_eventStore_(
                    self._EKEntityTypeReminder, store
                )
                source = self._source(reminder_list.source_id)
                if source is None:
                    raise StoreOperationError(
                        f"No source with identifier {reminder_list.source_id}"
                    )
                calendar.setSource_(source)
            else:
                calendar = self._calendar(reminder_list.id)
                if calendar is None:
                    raise StoreOperationError(f"No list with identifier {reminder_list.id}")

            calendar.setTitle_(reminder_list.title)
            success, error = store.saveCalendar_commit_error_(calendar, True, None)
            if not success:
                raise StoreOperationError(_describe(error))
            return str(calendar.calendarIdentifier())

        return await self._run(work)

    async def remove_list(self, reminder_list: ReminderList) -> None:
        def work():
            calendar = self._calendar(reminder_list.id)
            if calendar is None:
                raise StoreOperationError(f"No list with identifier {reminder_list.id}")
            success, error = self._get_store().removeCalendar_commit_error_(calendar, True, None)
            if not success:
                raise StoreOperationError(_describe(error))

        await self._run(work)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    async def enumerate_items(self, list_ids: Optional[Sequence[str]] = None) -> List[ReminderItem]:
        def work():
            calendars = None
            if list_ids is not None:
                calendars = [c for c in (self._calendar(i) for i in list_ids) if c is not None]
                if not calendars:
                    # a nil calendar list would mean "every list"
                    return []
            return [self._to_item(rem) for rem in self._fetch(calendars)]

        return await self._run(work)

    async def resolve_item(self, item_id: str) -> Optional[ReminderItem]:
        def work():
            rem = self._reminder(item_id)
            return self._to_item(rem) if rem is not None else None

        return await self._run(work)

    async def persist(self, item: ReminderItem) -> str:
        def work():
            store = self._get_store()
            calendar = self._calendar(item.list_id)
            if calendar is None:
                raise StoreOperationError(f"No list with identifier {item.list_id}")

            if item.id is None:
                reminder = self._EKReminder.reminderWithEventStore_(store)
            else:
                reminder = self._reminder(item.id)
                if reminder is None:
                    raise StoreOperationError(f"No reminder with identifier {item.id}")

            reminder.setCalendar_(calendar)
            reminder.setTitle_(item.title)
            reminder.setNotes_(item.notes)
            reminder.setPriority_(item.priority)
            reminder.setCompleted_(item.is_completed)
            reminder.setDueDateComponents_(self._due_components(item.due_date))

            success, error = store.saveReminder_commit_error_(reminder, True, None)
            self.logger.debug(f"saveReminder result: success={success}, error={error}")
            if not success:
                raise StoreOperationError(_describe(error))
            return str(reminder.calendarItemIdentifier())

        return await self._run(work)

    async def remove(self, item: ReminderItem) -> None:
        def work():
            reminder = self._reminder(item.id)
            if reminder is None:
                raise StoreOperationError(f"No reminder with identifier {item.id}")
            success, error = self._get_store().removeReminder_commit_error_(reminder, True, None)
            if not success:
                raise StoreOperationError(_describe(error))

        await self._run(work)
