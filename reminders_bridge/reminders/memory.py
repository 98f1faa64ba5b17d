"""In-memory reminders store, optionally persisted to a JSON state file."""

import asyncio
import logging
import uuid
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import StoreOperationError
from ..core.models import AuthorizationStatus, ReminderItem, ReminderList
from ..utils.io import safe_read_json, safe_update_json
from .store import (
    BackingStore,
    RAW_DENIED,
    RAW_FULL_ACCESS,
    RAW_NOT_DETERMINED,
    RAW_RESTRICTED,
    RAW_WRITE_ONLY,
)


STATE_SCHEMA = 1
DEFAULT_LIST_TITLE = "Reminders"
LOCAL_SOURCE_ID = "local"

_RAW_BY_STATUS = {
    AuthorizationStatus.NOT_DETERMINED: RAW_NOT_DETERMINED,
    AuthorizationStatus.RESTRICTED: RAW_RESTRICTED,
    AuthorizationStatus.DENIED: RAW_DENIED,
    AuthorizationStatus.WRITE_ONLY: RAW_WRITE_ONLY,
    AuthorizationStatus.AUTHORIZED: RAW_FULL_ACCESS,
    AuthorizationStatus.FULL_ACCESS: RAW_FULL_ACCESS,
}


def raw_authorization_for(status: AuthorizationStatus) -> int:
    """Raw EventKit code a store would report for ``status`` (-1 if none)."""
    return _RAW_BY_STATUS.get(status, -1)


class InMemoryStore(BackingStore):
    """Dict-backed store used off macOS and as the test double.

    ``prompt_count`` counts permission prompts. ``failures`` maps a method
    name to an exception raised (once) by the next call of that method.
    """

    def __init__(
        self,
        authorization: int = RAW_FULL_ACCESS,
        tiered_access: bool = True,
        grant_on_request: bool = True,
        state_path: Optional[str] = None,
        seed_default_list: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.tiered_access = tiered_access
        self.grant_on_request = grant_on_request
        self.state_path = state_path
        self.prompt_count = 0
        self.prompt_error: Optional[Exception] = None
        self.failures: Dict[str, Exception] = {}

        self._authorization = authorization
        self._lists: Dict[str, ReminderList] = {}
        self._items: Dict[str, ReminderItem] = {}
        self._default_list_id: Optional[str] = None

        if state_path and self._load_state():
            return
        if seed_default_list:
            self._commit(self._seed_default_list)

    def _seed_default_list(self) -> None:
        # another process may have seeded the shared state file first
        if self._lists:
            return
        default = ReminderList(
            title=DEFAULT_LIST_TITLE,
            id=self._new_id(),
            source_id=LOCAL_SOURCE_ID,
        )
        self._lists[default.id] = default
        self._default_list_id = default.id

    # ------------------------------------------------------------------
    # State file
    # ------------------------------------------------------------------
    def _apply_state(self, data: Dict) -> bool:
        if data.get("schema") != STATE_SCHEMA:
            return False
        self._lists = {
            entry["id"]: ReminderList.from_dict(entry) for entry in data.get("lists", [])
        }
        self._items = {
            entry["id"]: ReminderItem.from_dict(entry) for entry in data.get("items", [])
        }
        self._default_list_id = data.get("default_list_id")
        if "authorization" in data:
            self._authorization = int(data["authorization"])
        return True

    def _state_dict(self) -> Dict:
        return {
            "schema": STATE_SCHEMA,
            "authorization": self._authorization,
            "default_list_id": self._default_list_id,
            "lists": [lst.to_dict() for lst in self._lists.values()],
            "items": [item.to_dict() for item in self._items.values()],
        }

    def _load_state(self) -> bool:
        data = safe_read_json(self.state_path, default={})
        if not data:
            return False
        if not self._apply_state(data):
            self.logger.warning(
                f"Ignoring state file {self.state_path} with unsupported schema {data.get('schema')!r}"
            )
            return False
        self.logger.debug(
            f"Loaded {len(self._lists)} lists and {len(self._items)} reminders from {self.state_path}"
        )
        return True

    def _refresh(self) -> None:
        """Pick up writes other processes made to the state file."""
        if self.state_path:
            self._apply_state(safe_read_json(self.state_path, default={}))

    def _snapshot(self) -> Tuple:
        return dict(self._lists), dict(self._items), self._default_list_id, self._authorization

    def _restore(self, saved: Tuple) -> None:
        self._lists, self._items, self._default_list_id, self._authorization = saved

    def _commit(self, mutate: Callable[[], None]) -> None:
        """Apply ``mutate`` and persist; roll back if persisting fails.

        With a state file the mutation runs against the file's current
        contents while its exclusive lock is held, so commits from other
        processes sharing the file are kept.
        """
        if not self.state_path:
            mutate()
            return

        saved = self._snapshot()

        def update(data: Dict) -> Dict:
            self._apply_state(data)
            mutate()
            return self._state_dict()

        try:
            written = safe_update_json(self.state_path, update)
        except StoreOperationError:
            self._restore(saved)
            raise
        if not written:
            self._restore(saved)
            raise StoreOperationError(f"Failed to write state file {self.state_path}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4()).upper()

    async def _io(self, operation: str) -> None:
        # every native call is a suspension point
        await asyncio.sleep(0)
        self._refresh()
        failure = self.failures.pop(operation, None)
        if failure is not None:
            raise failure

    def set_authorization(self, raw: int) -> None:
        def mutate():
            self._authorization = raw

        self._commit(mutate)

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------
    def current_authorization(self) -> int:
        self._refresh()
        return self._authorization

    async def request_authorization(self) -> bool:
        self.prompt_count += 1
        await self._io("request_authorization")
        if self.prompt_error is not None:
            raise self.prompt_error

        granted = self.grant_on_request

        def mutate():
            self._authorization = RAW_FULL_ACCESS if granted else RAW_DENIED

        self._commit(mutate)
        self.logger.info(f"Permission prompt answered: {'granted' if granted else 'denied'}")
        return granted

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    async def enumerate_lists(self) -> List[ReminderList]:
        await self._io("enumerate_lists")
        return [lst.copy() for lst in self._lists.values()]

    async def resolve_list(self, list_id: str) -> Optional[ReminderList]:
        await self._io("resolve_list")
        found = self._lists.get(list_id)
        return found.copy() if found else None

    async def default_list(self) -> Optional[ReminderList]:
        await self._io("default_list")
        found = self._lists.get(self._default_list_id) if self._default_list_id else None
        return found.copy() if found else None

    async def persist_list(self, reminder_list: ReminderList) -> str:
        await self._io("persist_list")
        stored = reminder_list.copy()
        is_new = stored.id is None
        if is_new:
            stored.id = self._new_id()

        def mutate():
            if not is_new and stored.id not in self._lists:
                raise StoreOperationError(f"No list with identifier {stored.id}")
            self._lists[stored.id] = stored
            if self._default_list_id is None:
                self._default_list_id = stored.id

        self._commit(mutate)
        return stored.id

    async def remove_list(self, reminder_list: ReminderList) -> None:
        await self._io("remove_list")

        def mutate():
            if reminder_list.id not in self._lists:
                raise StoreOperationError(f"No list with identifier {reminder_list.id}")
            del self._lists[reminder_list.id]
            # removing a calendar removes its reminders
            self._items = {
                item_id: item for item_id, item in self._items.items()
                if item.list_id != reminder_list.id
            }
            if self._default_list_id == reminder_list.id:
                self._default_list_id = next(iter(self._lists), None)

        self._commit(mutate)

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    async def enumerate_items(self, list_ids: Optional[Sequence[str]] = None) -> List[ReminderItem]:
        await self._io("enumerate_items")
        wanted = set(list_ids) if list_ids is not None else None
        return [
            item.copy() for item in self._items.values()
            if wanted is None or item.list_id in wanted
        ]

    async def resolve_item(self, item_id: str) -> Optional[ReminderItem]:
        await self._io("resolve_item")
        found = self._items.get(item_id)
        return found.copy() if found else None

    async def persist(self, item: ReminderItem) -> str:
        await self._io("persist")
        stored = item.copy()
        is_new = stored.id is None
        if is_new:
            stored.id = self._new_id()

        def mutate():
            if stored.list_id not in self._lists:
                raise StoreOperationError(f"No list with identifier {stored.list_id}")
            if not is_new and stored.id not in self._items:
                raise StoreOperationError(f"No reminder with identifier {stored.id}")
            self._items[stored.id] = stored

        self._commit(mutate)
        return stored.id

    async def remove(self, item: ReminderItem) -> None:
        await self._io("remove")

        def mutate():
            if item.id not in self._items:
                raise StoreOperationError(f"No reminder with identifier {item.id}")
            del self._items[item.id]

        self._commit(mutate)
