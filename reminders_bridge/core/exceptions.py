"""
Exception classes for reminders-bridge.
"""

from typing import Any, Dict, Optional


class BridgeError(Exception):
    """Base exception for all reminders-bridge errors."""
    pass


class ConfigurationError(BridgeError):
    """Raised when configuration is invalid or missing."""
    pass


class StoreOperationError(BridgeError):
    """Raised by a backing store when a native call fails."""
    pass


class AuthorizationError(StoreOperationError):
    """Raised when EventKit authorization cannot be checked or requested."""
    pass


class EventKitImportError(StoreOperationError):
    """Raised when EventKit/PyObjC dependencies are not available."""
    pass


class ReminderError(BridgeError):
    """Base class of the errors returned by the reminders facade.

    Each subclass carries a stable ``code``; callers branch on it, so codes
    never change between releases.
    """

    code = "UNKNOWN_ERROR"
    default_message = "An unknown error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidListError(ReminderError):
    """Referenced list id does not resolve."""

    code = "INVALID_CALENDAR_ID"
    default_message = "Invalid calendar ID."


class NotFoundError(ReminderError):
    """Referenced reminder id does not resolve."""

    code = "REMINDER_NOT_FOUND"
    default_message = "Reminder not found."


class StoreError(ReminderError):
    """Wraps an underlying persistence or I/O failure."""

    code = "EVENT_STORE_ERROR"

    def __init__(self, cause: Any):
        self.cause = cause
        super().__init__(f"Event store error: {cause}")


class EncodingError(ReminderError):
    """Malformed input from the transport boundary."""

    code = "ENCODING_ERROR"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Encoding error: {detail}")


class InvalidDateComponentsError(ReminderError):
    code = "INVALID_DATE_COMPONENTS"
    default_message = "Invalid date components."


class UnknownError(ReminderError):
    code = "UNKNOWN_ERROR"
    default_message = "An unknown error occurred."


class PermissionDeniedError(ReminderError):
    """Mutation attempted without sufficient authorization."""

    code = "PERMISSION_DENIED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Permission denied for {operation}.")
