"""Serve the method channel over stdin/stdout."""

import asyncio
import logging

from ..core.config import BridgeConfig
from ..core.exceptions import BridgeError
from ..reminders.factory import create_facade
from ..transport.channel import MethodChannel
from ..transport.stdio import StdioServer


class ServeCommand:
    """Run the JSON-lines method channel until stdin closes."""

    def __init__(self, config: BridgeConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self) -> bool:
        try:
            return asyncio.run(self._run())
        except BridgeError as exc:
            self.logger.error(f"Serve command failed: {exc}")
            return False

    async def _run(self) -> bool:
        facade = create_facade(self.config, logger=self.logger)
        server = StdioServer(MethodChannel(facade, logger=self.logger), logger=self.logger)
        try:
            await server.serve()
        finally:
            facade.store.close()
        return True
