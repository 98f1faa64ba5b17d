"""Backing store contract shared by the EventKit and in-memory stores."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..core.models import ReminderItem, ReminderList
from ..utils.macos import platform_version


# Raw EKAuthorizationStatus codes. On the tiered model code 3 is
# EKAuthorizationStatusFullAccess (EKAuthorizationStatusAuthorized is an
# alias of it) and code 4 is EKAuthorizationStatusWriteOnly.
RAW_NOT_DETERMINED = 0
RAW_RESTRICTED = 1
RAW_DENIED = 2
RAW_AUTHORIZED = 3
RAW_FULL_ACCESS = 3
RAW_WRITE_ONLY = 4


class BackingStore(ABC):
    """Opaque handle to a reminders store.

    Every coroutine may suspend on native I/O. Mutating calls may raise
    ``StoreOperationError`` (or whatever the native layer raises); callers
    wrap those errors, stores never swallow them. Values passed in and out
    are snapshots: stores copy on the way in and on the way out.
    """

    #: True when the store reports the tiered (full access / write only)
    #: authorization model, False for the legacy binary one.
    tiered_access: bool = True

    @abstractmethod
    def current_authorization(self) -> int:
        """Raw authorization code; must never prompt the user."""

    @abstractmethod
    async def request_authorization(self) -> bool:
        """Show the native permission prompt and report whether access was granted."""

    @abstractmethod
    async def enumerate_lists(self) -> List[ReminderList]:
        ...

    @abstractmethod
    async def resolve_list(self, list_id: str) -> Optional[ReminderList]:
        ...

    @abstractmethod
    async def default_list(self) -> Optional[ReminderList]:
        ...

    @abstractmethod
    async def enumerate_items(self, list_ids: Optional[Sequence[str]] = None) -> List[ReminderItem]:
        """Items in the given lists, or in every list when ``list_ids`` is None."""

    @abstractmethod
    async def resolve_item(self, item_id: str) -> Optional[ReminderItem]:
        ...

    @abstractmethod
    async def persist(self, item: ReminderItem) -> str:
        """Create (no id) or overwrite (id set) an item and commit; returns the id."""

    @abstractmethod
    async def remove(self, item: ReminderItem) -> None:
        ...

    @abstractmethod
    async def persist_list(self, reminder_list: ReminderList) -> str:
        """Create (no id) or rename (id set) a list and commit; returns the id."""

    @abstractmethod
    async def remove_list(self, reminder_list: ReminderList) -> None:
        ...

    def platform_version(self) -> str:
        return platform_version()

    def close(self) -> None:
        """Release native resources held by the store."""
