"""Reminder item command."""

import asyncio
import logging
from typing import Optional

from ..core.config import BridgeConfig
from ..core.exceptions import BridgeError, InvalidDateComponentsError
from ..core.models import DueDate, ReminderItem
from ..reminders.facade import RemindersFacade
from ..reminders.factory import create_facade
from ..utils.date import parse_date


class RemindersCommand:
    """Show, add, complete or delete reminders."""

    def __init__(self, config: BridgeConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def run(
        self,
        list_id: Optional[str] = None,
        add: Optional[str] = None,
        due: Optional[str] = None,
        priority: int = 0,
        notes: Optional[str] = None,
        complete: Optional[str] = None,
        delete: Optional[str] = None,
    ) -> bool:
        """Run the reminders command; with no action, print reminders."""
        try:
            if add is not None:
                if not list_id:
                    print("Error: --add requires --list.")
                    return False
                item = ReminderItem(
                    list_id=list_id,
                    title=add,
                    notes=notes,
                    priority=priority,
                    due_date=self._parse_due(due),
                )
                return asyncio.run(self._with_facade(self._add, item))
            if complete is not None:
                return asyncio.run(self._with_facade(self._complete, complete))
            if delete is not None:
                return asyncio.run(self._with_facade(self._delete, delete))
            return asyncio.run(self._with_facade(self._show, list_id))
        except BridgeError as exc:
            self.logger.error(f"Reminders command failed: {exc}")
            print(f"Error: {exc}")
            return False

    @staticmethod
    def _parse_due(due: Optional[str]) -> Optional[DueDate]:
        if not due:
            return None
        parsed = parse_date(due)
        if parsed is None:
            raise InvalidDateComponentsError(f"Invalid due date '{due}', expected YYYY-MM-DD")
        return DueDate.from_date(parsed)

    async def _with_facade(self, action, argument) -> bool:
        facade = create_facade(self.config, logger=self.logger)
        try:
            return await action(facade, argument)
        finally:
            facade.store.close()

    async def _add(self, facade: RemindersFacade, item: ReminderItem) -> bool:
        result = await facade.create_reminder(item)
        if not result.ok:
            print(f"Error: {result.error.message}")
            return False
        print(f"Created reminder '{item.title}' ({result.value})")
        return True

    async def _complete(self, facade: RemindersFacade, item_id: str) -> bool:
        items = await facade.list_reminders()
        match = next((item for item in items.value or [] if item.id == item_id), None)
        if match is None:
            print(f"Error: reminder {item_id} not found.")
            return False
        match.is_completed = True
        result = await facade.update_reminder(item_id, match)
        if not result.ok:
            print(f"Error: {result.error.message}")
            return False
        print(f"Completed '{match.title}'")
        return True

    async def _delete(self, facade: RemindersFacade, item_id: str) -> bool:
        result = await facade.delete_reminder(item_id)
        if not result.ok:
            print(f"Error: {result.error.message}")
            return False
        print(f"Deleted reminder {item_id}")
        return True

    async def _show(self, facade: RemindersFacade, list_id: Optional[str]) -> bool:
        if not facade.permissions.has_access():
            status = facade.permissions.current_status()
            print(f"No read access to Reminders (status: {status.value}).")
            return False

        result = await facade.list_reminders(list_id)
        if not result.ok:
            print(f"Error: {result.error.message}")
            return False

        items = result.value
        print(f"Found {len(items)} reminders.")
        for item in items:
            box = "x" if item.is_completed else " "
            due = f" 📅 {item.due_date.isoformat()}" if item.due_date else ""
            print(f"  - [{box}] {item.title}{due}  [{item.id}]")
        return True
