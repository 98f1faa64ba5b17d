"""
Configuration management for reminders-bridge.
"""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .models import AuthorizationStatus
from .paths import get_path_manager


BACKENDS = ("auto", "eventkit", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Sentinel stored in the config file to keep the memory backend unpersisted.
NO_STATE_FILE = "none"


def _normalize_path(path: str) -> str:
    """Expand user and convert to absolute path."""
    return os.path.abspath(os.path.expanduser(path))


@dataclass
class BridgeConfig:
    """Configuration for the bridge and its backing store."""

    backend: str = "auto"
    state_path: Optional[str] = None
    memory_authorization: str = AuthorizationStatus.NOT_DETERMINED.value
    memory_grant_on_request: bool = True
    tiered_access: bool = True
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        manager = get_path_manager()

        if self.state_path is None:
            self.state_path = str(manager.state_path)
        elif self.state_path != NO_STATE_FILE:
            self.state_path = _normalize_path(self.state_path)

        if self.log_file is None:
            self.log_file = str(manager.log_path)
        else:
            self.log_file = _normalize_path(self.log_file)

        self.log_level = str(self.log_level).upper()
        self.validate()

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend '{self.backend}'. Expected one of: {', '.join(BACKENDS)}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level '{self.log_level}'")
        if self.memory_authorization not in {s.value for s in AuthorizationStatus}:
            raise ConfigurationError(
                f"Unknown authorization status '{self.memory_authorization}'"
            )

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    @property
    def resolved_backend(self) -> str:
        """Backend to instantiate; 'auto' picks EventKit on macOS."""
        if self.backend != "auto":
            return self.backend
        return "eventkit" if platform.system() == "Darwin" else "memory"

    @property
    def persistent_state_path(self) -> Optional[str]:
        if self.state_path == NO_STATE_FILE:
            return None
        return self.state_path

    @property
    def numeric_log_level(self) -> int:
        return getattr(logging, self.log_level, logging.WARNING)

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    @classmethod
    def load_from_file(cls, config_path: str) -> BridgeConfig:
        config_path = _normalize_path(config_path)
        if not os.path.exists(config_path):
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError:
            return cls()

        memory = data.get("memory", {})
        logging_settings = data.get("logging", {})

        return cls(
            backend=data.get("backend", "auto"),
            state_path=memory.get("state_path"),
            memory_authorization=memory.get(
                "authorization", AuthorizationStatus.NOT_DETERMINED.value
            ),
            memory_grant_on_request=memory.get("grant_on_request", True),
            tiered_access=memory.get("tiered_access", True),
            log_level=logging_settings.get("level", "WARNING"),
            log_file=logging_settings.get("file"),
        )

    def save_to_file(self, config_path: str) -> None:
        config_path = _normalize_path(config_path)
        os.makedirs(os.path.dirname(config_path), exist_ok=True)

        data = {
            "backend": self.backend,
            "memory": {
                "state_path": self.state_path,
                "authorization": self.memory_authorization,
                "grant_on_request": self.memory_grant_on_request,
                "tiered_access": self.tiered_access,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }

        with open(config_path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_path_manager().config_path


def load_config(config_path: Optional[str] = None) -> BridgeConfig:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        BridgeConfig object
    """
    if config_path is None:
        config_path = str(get_default_config_path())

    return BridgeConfig.load_from_file(config_path)


def save_config(config: BridgeConfig, config_path: Optional[str] = None):
    """
    Save configuration to file.

    Args:
        config: BridgeConfig object to save
        config_path: Optional path to save to. Uses default if not provided.
    """
    if config_path is None:
        manager = get_path_manager()
        manager.ensure_directories()
        config_path = str(manager.config_path)

    config.save_to_file(config_path)
