"""Builds the configured backing store and the facade around it."""

import logging
from typing import Optional

from ..core.config import BridgeConfig
from ..core.exceptions import ConfigurationError
from ..core.models import AuthorizationStatus
from .facade import RemindersFacade
from .gateway import EventKitStore
from .memory import InMemoryStore, raw_authorization_for
from .store import BackingStore


def create_store(config: BridgeConfig, logger: Optional[logging.Logger] = None) -> BackingStore:
    """Instantiate the backing store selected by ``config``."""
    backend = config.resolved_backend
    if backend == "eventkit":
        return EventKitStore(logger=logger)
    if backend == "memory":
        status = AuthorizationStatus.from_value(config.memory_authorization)
        return InMemoryStore(
            authorization=raw_authorization_for(status),
            tiered_access=config.tiered_access,
            grant_on_request=config.memory_grant_on_request,
            state_path=config.persistent_state_path,
            logger=logger,
        )
    raise ConfigurationError(f"Unknown backend '{backend}'")


def create_facade(config: BridgeConfig, logger: Optional[logging.Logger] = None) -> RemindersFacade:
    return RemindersFacade(create_store(config, logger=logger), logger=logger)
