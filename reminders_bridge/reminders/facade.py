"""Asynchronous CRUD facade over a reminders backing store."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..core.exceptions import (
    InvalidListError,
    NotFoundError,
    PermissionDeniedError,
    ReminderError,
    StoreError,
    UnknownError,
)
from ..core.models import OperationClass, ReminderItem, ReminderList, Result
from ..utils.locks import AsyncReadWriteLock
from .permissions import PermissionNegotiator
from .store import BackingStore


T = TypeVar("T")


class RemindersFacade:
    """List and reminder operations returning ``Result`` values.

    Nothing here raises across the public methods and nothing requests
    permission implicitly. Reads without read access come back empty;
    writes without write access fail with ``PermissionDeniedError``.

    Writes are exclusive against every other operation on the same store
    handle; reads run concurrently with each other.
    """

    def __init__(
        self,
        store: BackingStore,
        permissions: Optional[PermissionNegotiator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.permissions = permissions or PermissionNegotiator(store, logger=self.logger)
        self._lock = AsyncReadWriteLock()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    async def _read(self, operation: str, empty: T, work: Callable[[], Awaitable[T]]) -> Result[T]:
        if not self.permissions.allows(OperationClass.READ):
            self.logger.debug(f"{operation}: no read access, returning empty result")
            return Result.success(empty)

        async with self._lock.shared():
            return await self._guarded(operation, work)

    async def _write(self, operation: str, work: Callable[[], Awaitable[T]]) -> Result[T]:
        if not self.permissions.allows(OperationClass.WRITE):
            self.logger.warning(f"{operation}: refused, no write access")
            return Result.failure(PermissionDeniedError(operation))

        async with self._lock.exclusive():
            return await self._guarded(operation, work)

    async def _guarded(self, operation: str, work: Callable[[], Awaitable[T]]) -> Result[T]:
        try:
            value = await work()
        except ReminderError as e:
            self.logger.info(f"{operation} failed: {e.code}")
            return Result.failure(e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"{operation} failed in backing store: {e}")
            return Result.failure(StoreError(e))

        self.logger.debug(f"{operation} succeeded")
        return Result.success(value)

    @staticmethod
    async def _submit(mutation: Awaitable[T]) -> T:
        """Run a store mutation that cannot be cancelled once submitted.

        If the caller is cancelled the writer lock stays held until the
        native call has landed.
        """
        task = asyncio.ensure_future(mutation)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            await asyncio.wait({task})
            raise

    async def _require_list(self, list_id: str) -> ReminderList:
        found = await self.store.resolve_list(list_id)
        if found is None:
            raise InvalidListError()
        return found

    async def _require_item(self, item_id: str) -> ReminderItem:
        found = await self.store.resolve_item(item_id)
        if found is None:
            raise NotFoundError()
        return found

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    async def list_lists(self) -> Result[List[ReminderList]]:
        """All reminder lists, in store order (not guaranteed stable)."""
        return await self._read("list_lists", [], self.store.enumerate_lists)

    async def default_list(self) -> Result[Optional[ReminderList]]:
        return await self._read("default_list", None, self.store.default_list)

    async def default_list_id(self) -> Result[Optional[str]]:
        async def work():
            found = await self.store.default_list()
            return found.id if found is not None else None

        return await self._read("default_list_id", None, work)

    async def create_list(self, title: str) -> Result[str]:
        """Create a list on the same source (account) as the default list."""
        async def work():
            default = await self.store.default_list()
            if default is None:
                raise UnknownError()
            new_list = ReminderList(title=title, source_id=default.source_id)
            return await self._submit(self.store.persist_list(new_list))

        return await self._write("create_list", work)

    async def update_list(self, list_id: str, new_title: str) -> Result[None]:
        async def work():
            found = await self._require_list(list_id)
            found.title = new_title
            await self._submit(self.store.persist_list(found))

        return await self._write("update_list", work)

    async def delete_list(self, list_id: str) -> Result[None]:
        async def work():
            found = await self._require_list(list_id)
            await self._submit(self.store.remove_list(found))

        return await self._write("delete_list", work)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    async def list_reminders(self, list_id: Optional[str] = None) -> Result[List[ReminderItem]]:
        """Reminders in ``list_id``, or in every list when it is None.

        An unknown list yields an empty sequence, not an error.
        """
        async def work():
            if list_id is None:
                return await self.store.enumerate_items(None)
            if await self.store.resolve_list(list_id) is None:
                return []
            return await self.store.enumerate_items([list_id])

        return await self._read("list_reminders", [], work)

    async def create_reminder(self, item: ReminderItem) -> Result[str]:
        """Persist a new reminder and return its store-assigned id.

        Any id already on ``item`` is ignored.
        """
        async def work():
            await self._require_list(item.list_id)
            new_item = item.copy()
            new_item.id = None
            return await self._submit(self.store.persist(new_item))

        return await self._write("create_reminder", work)

    async def update_reminder(self, item_id: str, updates: ReminderItem) -> Result[None]:
        """Overwrite every mutable field of a reminder with ``updates``.

        Optional fields missing from ``updates`` are cleared.
        """
        async def work():
            existing = await self._require_item(item_id)
            await self._require_list(updates.list_id)
            await self._submit(self.store.persist(existing.with_fields_of(updates)))

        return await self._write("update_reminder", work)

    async def save_reminder(self, item: ReminderItem) -> Result[str]:
        """Update the reminder ``item.id`` names, or create a new one.

        An id that does not resolve is treated like no id at all. Returns
        the id of the saved reminder.
        """
        async def work():
            await self._require_list(item.list_id)
            existing = await self.store.resolve_item(item.id) if item.id else None
            if existing is not None:
                return await self._submit(self.store.persist(existing.with_fields_of(item)))
            new_item = item.copy()
            new_item.id = None
            return await self._submit(self.store.persist(new_item))

        return await self._write("save_reminder", work)

    async def delete_reminder(self, item_id: str) -> Result[None]:
        async def work():
            existing = await self._require_item(item_id)
            await self._submit(self.store.remove(existing))

        return await self._write("delete_reminder", work)
