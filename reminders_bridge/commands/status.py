"""Permission status command."""

import asyncio
import logging

from ..core.config import BridgeConfig
from ..core.exceptions import BridgeError
from ..reminders.factory import create_facade


class StatusCommand:
    """Show the reminders authorization status, optionally negotiating it."""

    def __init__(self, config: BridgeConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def run(self, request: bool = False) -> bool:
        """Run the status command."""
        try:
            return asyncio.run(self._run(request))
        except BridgeError as exc:
            self.logger.error(f"Status command failed: {exc}")
            print(f"Error: {exc}")
            return False

    async def _run(self, request: bool) -> bool:
        facade = create_facade(self.config, logger=self.logger)
        try:
            permissions = facade.permissions
            status = permissions.current_status()
            print(f"Reminders access: {status.value}")
            print(f"Platform: {facade.store.platform_version()}")

            if not request:
                return status.is_sufficient

            new_status = await permissions.request_access()
            if new_status is not status:
                print(f"Reminders access is now: {new_status.value}")
            if not new_status.is_sufficient:
                print("Access not granted. Enable it in System Settings > Privacy & Security > Reminders.")
            return new_status.is_sufficient
        finally:
            facade.store.close()
