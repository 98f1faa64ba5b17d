"""Reminder list management command."""

import asyncio
import logging
from typing import Optional, Sequence

from ..core.config import BridgeConfig
from ..core.exceptions import BridgeError
from ..reminders.facade import RemindersFacade
from ..reminders.factory import create_facade


class ListsCommand:
    """Show, create, rename or delete reminder lists."""

    def __init__(self, config: BridgeConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def run(
        self,
        create: Optional[str] = None,
        rename: Optional[Sequence[str]] = None,
        delete: Optional[str] = None,
    ) -> bool:
        """Run the lists command; with no options, print every list."""
        try:
            return asyncio.run(self._run(create, rename, delete))
        except BridgeError as exc:
            self.logger.error(f"Lists command failed: {exc}")
            print(f"Error: {exc}")
            return False

    async def _run(self, create, rename, delete) -> bool:
        facade = create_facade(self.config, logger=self.logger)
        try:
            if create is not None:
                result = await facade.create_list(create)
                if not result.ok:
                    print(f"Error: {result.error.message}")
                    return False
                print(f"Created list '{create}' ({result.value})")
            elif rename is not None:
                list_id, new_title = rename
                result = await facade.update_list(list_id, new_title)
                if not result.ok:
                    print(f"Error: {result.error.message}")
                    return False
                print(f"Renamed list {list_id} to '{new_title}'")
            elif delete is not None:
                result = await facade.delete_list(delete)
                if not result.ok:
                    print(f"Error: {result.error.message}")
                    return False
                print(f"Deleted list {delete}")
            else:
                return await self._show(facade)
            return True
        finally:
            facade.store.close()

    async def _show(self, facade: RemindersFacade) -> bool:
        if not facade.permissions.has_access():
            status = facade.permissions.current_status()
            print(f"No read access to Reminders (status: {status.value}).")
            print("Run 'reminders-bridge status --request' first.")
            return False

        lists_result = await facade.list_lists()
        default_result = await facade.default_list_id()
        if not lists_result.ok:
            print(f"Error: {lists_result.error.message}")
            return False

        lists = sorted(lists_result.value, key=lambda lst: lst.title.lower())
        print(f"Found {len(lists)} reminder lists:")
        for lst in lists:
            marker = " (default)" if lst.id == default_result.value else ""
            print(f"  - {lst.title}{marker}  [{lst.id}]")
        return True
