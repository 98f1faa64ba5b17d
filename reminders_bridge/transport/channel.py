"""Named-operation channel in front of the reminders facade."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.exceptions import ReminderError, UnknownError
from ..reminders.facade import RemindersFacade
from . import codec


SUCCESS = "success"
ERROR = "error"
NOT_IMPLEMENTED = "notImplemented"


@dataclass
class MethodResponse:
    """Outcome of one channel invocation."""

    kind: str
    value: Any = None
    error: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Any = None) -> MethodResponse:
        return cls(kind=SUCCESS, value=value)

    @classmethod
    def failure(cls, error: ReminderError) -> MethodResponse:
        return cls(kind=ERROR, error=error.to_dict())

    @classmethod
    def not_implemented(cls) -> MethodResponse:
        return cls(kind=NOT_IMPLEMENTED)

    @property
    def ok(self) -> bool:
        return self.kind == SUCCESS

    def to_message(self, call_id: Any = None) -> Dict[str, Any]:
        """Envelope written back to the caller."""
        if self.kind == SUCCESS:
            return {"id": call_id, "result": self.value}
        if self.kind == ERROR:
            return {"id": call_id, "error": self.error}
        return {"id": call_id, "notImplemented": True}


Handler = Callable[[Dict[str, Any]], Awaitable[Any]]


class MethodChannel:
    """Dispatches ``(method, arguments)`` calls to the facade.

    ``invoke`` never raises: facade errors become ``{code, message}``
    descriptors, unknown methods a not-implemented response.
    """

    def __init__(self, facade: RemindersFacade, logger: Optional[logging.Logger] = None):
        self.facade = facade
        self.logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[str, Handler] = {
            "getPlatformVersion": self._get_platform_version,
            "hasAccess": self._has_access,
            "getPermissionStatus": self._get_permission_status,
            "requestPermission": self._request_permission,
            "getDefaultListId": self._get_default_list_id,
            "getDefaultList": self._get_default_list,
            "getLists": self._get_lists,
            "createList": self._create_list,
            "updateList": self._update_list,
            "deleteList": self._delete_list,
            "getRemindersForListId": self._get_reminders_for_list_id,
            "createReminder": self._create_reminder,
            "updateReminder": self._update_reminder,
            "deleteReminder": self._delete_reminder,
            # names served by the macOS plugin
            "requestPermissions": self._request_permission,
            "getAllLists": self._get_lists,
            "getReminders": self._get_reminders,
            "saveReminder": self._save_reminder,
        }

    @property
    def methods(self) -> List[str]:
        return sorted(self._handlers)

    async def invoke(self, method: str, arguments: Any = None) -> MethodResponse:
        handler = self._handlers.get(method)
        if handler is None:
            self.logger.warning(f"Method not implemented: {method}")
            return MethodResponse.not_implemented()

        try:
            args = codec.validate_arguments(method, arguments)
            value = await handler(args)
        except ReminderError as e:
            self.logger.info(f"{method} -> {e.code}")
            return MethodResponse.failure(e)
        except Exception:
            self.logger.exception(f"Unexpected failure in {method}")
            return MethodResponse.failure(UnknownError())

        return MethodResponse.success(value)

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------
    async def _get_platform_version(self, args):
        return self.facade.store.platform_version()

    async def _has_access(self, args):
        return self.facade.permissions.has_access()

    async def _get_permission_status(self, args):
        return self.facade.permissions.current_status().value

    async def _request_permission(self, args):
        status = await self.facade.permissions.request_access()
        return status.is_sufficient

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------
    async def _get_default_list_id(self, args):
        return (await self.facade.default_list_id()).unwrap()

    async def _get_default_list(self, args):
        return codec.list_to_dict((await self.facade.default_list()).unwrap())

    async def _get_lists(self, args):
        lists = (await self.facade.list_lists()).unwrap()
        return [codec.list_to_dict(lst) for lst in lists]

    async def _create_list(self, args):
        return (await self.facade.create_list(args["title"])).unwrap()

    async def _update_list(self, args):
        return (await self.facade.update_list(args["id"], args["newTitle"])).unwrap()

    async def _delete_list(self, args):
        return (await self.facade.delete_list(args["id"])).unwrap()

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    async def _get_reminders_for_list_id(self, args):
        items = (await self.facade.list_reminders(args.get("listId"))).unwrap()
        return [codec.reminder_to_dict(item) for item in items]

    async def _create_reminder(self, args):
        item = codec.reminder_from_dict(args["reminder"])
        new_id = (await self.facade.create_reminder(item)).unwrap()
        return {"success": True, "message": "Reminder successfully created.", "id": new_id}

    async def _update_reminder(self, args):
        item = codec.reminder_from_dict(args["reminder"])
        (await self.facade.update_reminder(args["id"], item)).unwrap()
        return {"success": True, "message": "Reminder successfully updated."}

    async def _delete_reminder(self, args):
        (await self.facade.delete_reminder(args["id"])).unwrap()
        return {"success": True}

    async def _get_reminders(self, args):
        items = (await self.facade.list_reminders(args.get("id"))).unwrap()
        if not items:
            return []
        lists = {lst.id: lst for lst in (await self.facade.list_lists()).unwrap()}
        return [codec.reminder_to_dict(item, lists.get(item.list_id)) for item in items]

    async def _save_reminder(self, args):
        item = codec.reminder_from_saved_dict(args["reminder"])
        return (await self.facade.save_reminder(item)).unwrap()
