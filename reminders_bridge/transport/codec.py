"""
Wire format for the method channel.

Incoming argument bags are validated against JSON Schemas before they are
turned into model objects; outgoing values are plain dicts with the
camelCase field names callers depend on.
"""

from typing import Any, Dict, Mapping, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from ..core.exceptions import EncodingError
from ..core.models import ReminderItem, ReminderList
from ..utils.date import parse_due_date


REMINDER_SCHEMA = {
    "type": "object",
    "required": ["listId", "title", "priority", "isCompleted"],
    "properties": {
        "id": {"type": ["string", "null"]},
        "listId": {"type": "string"},
        "title": {"type": "string"},
        "priority": {"type": "integer", "minimum": 0, "maximum": 9},
        "isCompleted": {"type": "boolean"},
        "notes": {"type": ["string", "null"]},
        # components are checked when the DueDate is built
        "dueDate": {"type": ["object", "string", "null"]},
    },
}

# macOS plugin shape: the list id travels under ``list`` and every other
# field falls back to a default
SAVED_REMINDER_SCHEMA = {
    "type": "object",
    "required": ["list"],
    "properties": {
        "id": {"type": ["string", "null"]},
        "list": {"type": "string"},
        "title": {"type": "string"},
        "priority": {"type": "integer", "minimum": 0, "maximum": 9},
        "isCompleted": {"type": "boolean"},
        "notes": {"type": ["string", "null"]},
        "dueDate": {"type": ["object", "string", "null"]},
    },
}

_NO_ARGUMENTS = {"type": "object"}


def _object(required: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": sorted(required),
        "properties": required,
    }


ARGUMENT_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "createList": _object({"title": {"type": "string"}}),
    "updateList": _object({"id": {"type": "string"}, "newTitle": {"type": "string"}}),
    "deleteList": _object({"id": {"type": "string"}}),
    "getRemindersForListId": {
        "type": "object",
        "properties": {"listId": {"type": ["string", "null"]}},
    },
    "createReminder": _object({"reminder": REMINDER_SCHEMA}),
    "updateReminder": _object({"id": {"type": "string"}, "reminder": REMINDER_SCHEMA}),
    "deleteReminder": _object({"id": {"type": "string"}}),
    "getReminders": {
        "type": "object",
        "properties": {"id": {"type": ["string", "null"]}},
    },
    "saveReminder": _object({"reminder": SAVED_REMINDER_SCHEMA}),
}

_VALIDATORS = {
    method: Draft7Validator(schema) for method, schema in ARGUMENT_SCHEMAS.items()
}
_DEFAULT_VALIDATOR = Draft7Validator(_NO_ARGUMENTS)


def validate_arguments(method: str, arguments: Any) -> Dict[str, Any]:
    """Check an argument bag for ``method``; returns it as a dict.

    Raises:
        EncodingError: the bag does not match the method's schema
    """
    if arguments is None:
        arguments = {}
    validator = _VALIDATORS.get(method, _DEFAULT_VALIDATOR)
    error = best_match(validator.iter_errors(arguments))
    if error is not None:
        location = "/".join(str(part) for part in error.absolute_path) or "arguments"
        raise EncodingError(f"{location}: {error.message}")
    return dict(arguments)


def reminder_from_dict(data: Mapping[str, Any]) -> ReminderItem:
    """Build a ReminderItem from an already validated reminder dict."""
    return ReminderItem(
        id=data.get("id"),
        list_id=data["listId"],
        title=data["title"],
        notes=data.get("notes"),
        priority=int(data["priority"]),
        is_completed=data["isCompleted"],
        due_date=parse_due_date(data.get("dueDate")),
    )


def reminder_from_saved_dict(data: Mapping[str, Any]) -> ReminderItem:
    """Build a ReminderItem from a validated ``saveReminder`` payload."""
    return ReminderItem(
        id=data.get("id"),
        list_id=data["list"],
        title=data.get("title", ""),
        notes=data.get("notes"),
        priority=int(data.get("priority", 0)),
        is_completed=data.get("isCompleted", False),
        due_date=parse_due_date(data.get("dueDate")),
    )


def reminder_to_dict(item: ReminderItem, reminder_list: Optional[ReminderList] = None) -> Dict[str, Any]:
    """Wire dict for a reminder; ``reminder_list`` adds the nested ``list`` entry."""
    result: Dict[str, Any] = {
        "listId": item.list_id,
        "id": item.id,
        "title": item.title,
        "priority": item.priority,
        "isCompleted": item.is_completed,
    }
    if reminder_list is not None:
        result["list"] = list_to_dict(reminder_list)
    if item.due_date is not None:
        result["dueDate"] = item.due_date.to_dict()
    if item.notes is not None:
        result["notes"] = item.notes
    return result


def list_to_dict(reminder_list: Optional[ReminderList]) -> Optional[Dict[str, Any]]:
    if reminder_list is None:
        return None
    return {"id": reminder_list.id, "title": reminder_list.title}
