"""
Domain models for reminders-bridge.

This module contains the value objects exchanged between the backing
stores, the facade and the transport layer. Backing stores own the
canonical records; everything handed across a layer boundary is a copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, Generic, Optional, TypeVar

from .exceptions import InvalidDateComponentsError, ReminderError


T = TypeVar("T")


class OperationClass(Enum):
    """Kinds of facade operations, as far as permissions are concerned."""

    READ = "read"
    WRITE = "write"


@total_ordering
class AuthorizationStatus(Enum):
    """Normalized authorization level for the reminders store.

    Declaration order is the ordering of the enum. The binary EventKit model
    (authorized/denied) and the tiered one (full access/write only) both map
    onto it, so callers never look at platform versions.
    """

    NOT_DETERMINED = "notDetermined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    WRITE_ONLY = "writeOnly"
    AUTHORIZED = "authorized"
    FULL_ACCESS = "fullAccess"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        return list(AuthorizationStatus).index(self)

    def __lt__(self, other: AuthorizationStatus) -> bool:
        if not isinstance(other, AuthorizationStatus):
            return NotImplemented
        return self.rank < other.rank

    def allows(self, operation: OperationClass) -> bool:
        """Whether this tier permits the given class of operation."""
        if self in (AuthorizationStatus.AUTHORIZED, AuthorizationStatus.FULL_ACCESS):
            return True
        if operation is OperationClass.WRITE:
            return self is AuthorizationStatus.WRITE_ONLY
        return False

    @property
    def is_sufficient(self) -> bool:
        """Sufficient for every operation."""
        return self.allows(OperationClass.READ)

    @classmethod
    def from_value(cls, value: str) -> AuthorizationStatus:
        for status in cls:
            if status.value == value:
                return status
        return cls.UNKNOWN


@dataclass(frozen=True)
class DueDate:
    """Calendar date without a time component."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        for part in (self.year, self.month, self.day):
            if isinstance(part, bool) or not isinstance(part, int):
                raise InvalidDateComponentsError()
        try:
            date(self.year, self.month, self.day)
        except (ValueError, OverflowError):
            raise InvalidDateComponentsError() from None

    @classmethod
    def from_date(cls, value: date) -> DueDate:
        return cls(value.year, value.month, value.day)

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def to_dict(self) -> Dict[str, int]:
        return {"year": self.year, "month": self.month, "day": self.day}


@dataclass
class ReminderList:
    """A reminders container (an EventKit calendar)."""

    title: str
    id: Optional[str] = None
    source_id: Optional[str] = None

    def copy(self) -> ReminderList:
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "source_id": self.source_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ReminderList:
        return cls(
            title=data.get("title", ""),
            id=data.get("id"),
            source_id=data.get("source_id"),
        )


@dataclass
class ReminderItem:
    """A single reminder; ``id`` stays ``None`` until the store saves it."""

    list_id: str
    title: str
    id: Optional[str] = None
    notes: Optional[str] = None
    priority: int = 0
    is_completed: bool = False
    due_date: Optional[DueDate] = None

    def copy(self) -> ReminderItem:
        return replace(self)

    def with_fields_of(self, updates: ReminderItem) -> ReminderItem:
        """Full overwrite of every mutable field, keeping this item's id."""
        return replace(updates, id=self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "list_id": self.list_id,
            "title": self.title,
            "notes": self.notes,
            "priority": self.priority,
            "is_completed": self.is_completed,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ReminderItem:
        due_date = None
        raw_due = data.get("due_date")
        if raw_due:
            year, month, day = (int(part) for part in raw_due.split("-"))
            due_date = DueDate(year, month, day)
        return cls(
            list_id=data.get("list_id", ""),
            title=data.get("title", ""),
            id=data.get("id"),
            notes=data.get("notes"),
            priority=int(data.get("priority", 0) or 0),
            is_completed=bool(data.get("is_completed", False)),
            due_date=due_date,
        )


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a facade operation: a value or exactly one ReminderError."""

    value: Optional[T] = None
    error: Optional[ReminderError] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ReminderError) -> Result[T]:
        return cls(error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value
