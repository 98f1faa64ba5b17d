#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Platform-specific test skipping (macOS/EventKit tests)
- Store, negotiator and facade fixtures over the in-memory backend
- Isolation of the per-user working directory
"""

import os
import platform
import shutil
import sys
import tempfile
from typing import Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from reminders_bridge.core.paths import PathManager, reset_path_manager
from reminders_bridge.reminders.facade import RemindersFacade
from reminders_bridge.reminders.memory import InMemoryStore
from reminders_bridge.reminders.permissions import PermissionNegotiator
from reminders_bridge.reminders.store import RAW_FULL_ACCESS

HAS_EVENTKIT = False

try:
    if platform.system() == "Darwin":
        import objc  # noqa: F401
        import EventKit  # noqa: F401
        HAS_EVENTKIT = True
except ImportError:
    pass


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to skip platform-specific tests.

    Automatically skip macOS/EventKit tests on non-Darwin platforms.
    """
    skip_macos = pytest.mark.skip(reason="macOS/EventKit tests require Darwin platform")
    skip_eventkit = pytest.mark.skip(reason="Test requires EventKit framework")

    for item in items:
        if "macos" in item.keywords and platform.system() != "Darwin":
            item.add_marker(skip_macos)

        if "eventkit" in item.keywords and not HAS_EVENTKIT:
            item.add_marker(skip_eventkit)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the per-user working directory at a throwaway location."""
    monkeypatch.setenv(PathManager.HOME_ENV_VAR, str(tmp_path / "home"))
    reset_path_manager()
    yield tmp_path / "home"
    reset_path_manager()


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = tempfile.mkdtemp(prefix="reminders_bridge_test_")
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def store() -> InMemoryStore:
    """Authorized in-memory store holding only the default list."""
    return InMemoryStore(authorization=RAW_FULL_ACCESS)


@pytest.fixture
def negotiator(store) -> PermissionNegotiator:
    return PermissionNegotiator(store)


@pytest.fixture
def facade(store, negotiator) -> RemindersFacade:
    return RemindersFacade(store, permissions=negotiator)


@pytest.fixture
def default_list_id(store) -> str:
    return store._default_list_id
