"""
JSON state file I/O with atomic writes and cooperative file locking.

The memory backend's state file may be shared by a serving process and
concurrent CLI invocations; readers take a shared lock, writers an exclusive
one. Updates hold the exclusive lock across the whole read-modify-write
cycle and land through a temp file plus rename.
"""

import contextlib
import errno
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional

try:  # fcntl is only available on POSIX platforms
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - Windows fallback
    fcntl = None  # type: ignore


DEFAULT_LOCK_TIMEOUT = 8.0  # seconds
LOCK_SLEEP_INTERVAL = 0.05  # seconds

logger = logging.getLogger(__name__)


def _lock_file_path(path: Path) -> Path:
    """Return the companion lock file path for the target file."""
    lock_name = f"{path.name}.lock"
    return path.parent / lock_name


@contextlib.contextmanager
def _file_lock(target_path: Path, exclusive: bool, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """Acquire a cooperative file lock around the target path.

    Uses POSIX advisory locking via fcntl when available; otherwise acts as a no-op.
    """
    if fcntl is None:
        yield
        return

    lock_path = _lock_file_path(target_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    deadline = time.monotonic() + timeout if timeout is not None else None

    with open(lock_path, "a") as lock_file:
        while True:
            try:
                flags = lock_type | fcntl.LOCK_NB if deadline is not None else lock_type
                fcntl.flock(lock_file.fileno(), flags)
                break
            except OSError as exc:  # pragma: no cover - depends on timing
                if exc.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(f"Timed out waiting for lock on {target_path}") from exc
                time.sleep(LOCK_SLEEP_INTERVAL)

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def _load(path_obj: Path) -> Any:
    with path_obj.open('r', encoding='utf-8') as handle:
        return json.load(handle)


def _dump_atomic(path_obj: Path, data: Any, indent: int) -> None:
    """Write through a temp file in the target directory, then rename."""
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            dir=str(path_obj.parent),
            prefix='.tmp_',
            suffix='.json',
            delete=False,
            encoding='utf-8'
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            json.dump(data, tmp_file, indent=indent, ensure_ascii=False, sort_keys=True)

        os.replace(str(tmp_path), str(path_obj))
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def safe_read_json(file_path: str, default: Optional[Dict] = None, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Dict[str, Any]:
    """
    Safely read JSON from file with error handling.

    Args:
        file_path: Path to JSON file
        default: Default value to return if file doesn't exist or is invalid

    Returns:
        Parsed JSON data or default value
    """
    if default is None:
        default = {}

    file_path = os.path.expanduser(file_path)
    path_obj = Path(file_path)

    if not path_obj.exists():
        return default

    try:
        with _file_lock(path_obj, exclusive=False, timeout=lock_timeout):
            return _load(path_obj)
    except TimeoutError as exc:
        logger.warning(f"Timed out waiting to read {file_path}: {exc}")
        return default
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning(f"Failed to read {file_path}: {exc}")
        return default


def safe_update_json(
    file_path: str,
    update: Callable[[Dict[str, Any]], Dict[str, Any]],
    indent: int = 2,
    *,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> bool:
    """
    Read, transform and rewrite a JSON file under one exclusive lock.

    ``update`` receives the current contents (``{}`` when the file is missing
    or unreadable) and returns the data to write. Exceptions raised by
    ``update`` propagate and leave the file untouched.

    Returns:
        True if the new data was written, False on an I/O failure
    """
    file_path = os.path.expanduser(file_path)
    path_obj = Path(file_path)

    try:
        path_obj.parent.mkdir(parents=True, exist_ok=True)
        with _file_lock(path_obj, exclusive=True, timeout=lock_timeout):
            current: Dict[str, Any] = {}
            if path_obj.exists():
                try:
                    current = _load(path_obj)
                except json.JSONDecodeError as exc:
                    logger.warning(f"Replacing unreadable {file_path}: {exc}")
            _dump_atomic(path_obj, update(current), indent)
        return True
    except TimeoutError as exc:
        logger.error(f"Error updating {file_path}: {exc}")
    except (OSError, TypeError, ValueError) as exc:
        logger.error(f"Error updating {file_path}: {exc}")

    return False
