"""macOS-specific helpers."""

from __future__ import annotations

import logging
import platform
from typing import Optional


def set_process_name(name: str, logger: Optional[logging.Logger] = None) -> bool:
    """Set the current process name on macOS when PyObjC is available."""
    if platform.system() != "Darwin":
        return False

    try:
        from Foundation import NSProcessInfo  # type: ignore
    except ImportError:
        if logger:
            logger.debug("PyObjC not installed; cannot set process name")
        return False

    try:
        process_info = NSProcessInfo.processInfo()
        if process_info.processName() == name:
            return True
        process_info.setProcessName_(name)
        return True
    except Exception as exc:  # pragma: no cover - depends on PyObjC runtime
        if logger:
            logger.warning(f"Failed to set process name: {exc}")
        return False


def platform_version() -> str:
    """Human readable OS version, e.g. ``macOS 14.4.1`` or ``Linux 6.8.0``."""
    system = platform.system()
    if system == "Darwin":
        release = platform.mac_ver()[0] or platform.release()
        return f"macOS {release}"
    return f"{system} {platform.release()}".strip()
