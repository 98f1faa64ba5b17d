"""
Tests for argument validation and the channel wire format.
"""

import pytest

from reminders_bridge.core.exceptions import EncodingError, InvalidDateComponentsError
from reminders_bridge.core.models import DueDate, ReminderItem, ReminderList
from reminders_bridge.transport import codec


def _reminder(**overrides):
    data = {"listId": "L1", "title": "Milk", "priority": 0, "isCompleted": False}
    data.update(overrides)
    return data


class TestValidateArguments:
    def test_none_means_no_arguments(self):
        assert codec.validate_arguments("getLists", None) == {}

    def test_valid_create_reminder(self):
        args = {"reminder": _reminder(notes="2 cartons", dueDate={"year": 2024, "month": 5, "day": 1})}
        assert codec.validate_arguments("createReminder", args) == args

    @pytest.mark.parametrize("method,arguments", [
        ("createList", {}),
        ("createList", {"title": 5}),
        ("updateList", {"id": "L1"}),
        ("deleteList", {"id": None}),
        ("createReminder", {"reminder": _reminder(priority="high")}),
        ("createReminder", {"reminder": _reminder(priority=10)}),
        ("createReminder", {"reminder": {"listId": "L1", "title": "Milk"}}),
        ("updateReminder", {"reminder": _reminder()}),
        ("deleteReminder", []),
        ("getLists", "not-an-object"),
    ])
    def test_malformed_arguments(self, method, arguments):
        with pytest.raises(EncodingError) as exc_info:
            codec.validate_arguments(method, arguments)

        assert exc_info.value.code == "ENCODING_ERROR"

    def test_error_names_the_offending_field(self):
        with pytest.raises(EncodingError) as exc_info:
            codec.validate_arguments("createReminder", {"reminder": _reminder(isCompleted="yes")})

        assert "reminder/isCompleted" in exc_info.value.message

    def test_optional_list_id(self):
        assert codec.validate_arguments("getRemindersForListId", {}) == {}
        assert codec.validate_arguments("getRemindersForListId", {"listId": None}) == {"listId": None}


class TestReminderFromDict:
    def test_full_reminder(self):
        item = codec.reminder_from_dict(_reminder(
            id="R1",
            notes="n",
            priority=5,
            isCompleted=True,
            dueDate={"year": 2024, "month": 2, "day": 29},
        ))

        assert item == ReminderItem(
            id="R1",
            list_id="L1",
            title="Milk",
            notes="n",
            priority=5,
            is_completed=True,
            due_date=DueDate(2024, 2, 29),
        )

    def test_absent_optional_fields(self):
        item = codec.reminder_from_dict(_reminder())

        assert item.id is None
        assert item.notes is None
        assert item.due_date is None

    def test_iso_string_due_date(self):
        item = codec.reminder_from_dict(_reminder(dueDate="2024-05-01"))
        assert item.due_date == DueDate(2024, 5, 1)

    @pytest.mark.parametrize("due", [
        {"year": 2023, "month": 2, "day": 29},
        {"year": 2024, "month": 13, "day": 1},
        {"year": 2024, "month": 1},
        "not a date",
    ])
    def test_invalid_due_date(self, due):
        with pytest.raises(InvalidDateComponentsError):
            codec.reminder_from_dict(_reminder(dueDate=due))


class TestToDict:
    def test_reminder_to_dict_omits_absent_optionals(self):
        item = ReminderItem(list_id="L1", title="Milk", id="R1")

        assert codec.reminder_to_dict(item) == {
            "listId": "L1",
            "id": "R1",
            "title": "Milk",
            "priority": 0,
            "isCompleted": False,
        }

    def test_reminder_to_dict_with_due_date(self):
        item = ReminderItem(list_id="L1", title="Milk", id="R1", notes="n", due_date=DueDate(2024, 5, 1))

        data = codec.reminder_to_dict(item)

        assert data["dueDate"] == {"year": 2024, "month": 5, "day": 1}
        assert data["notes"] == "n"

    def test_list_to_dict(self):
        assert codec.list_to_dict(ReminderList(title="Groceries", id="L1", source_id="S")) == {
            "id": "L1",
            "title": "Groceries",
        }
        assert codec.list_to_dict(None) is None
