"""Atomic file writes and the store lock."""

from __future__ import annotations

import json
import logging
import os
import uuid
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> Path:
    """Create a directory if it does not exist and return it."""

    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _fsync_directory(path: Path) -> None:
    """Best-effort fsync for a directory."""

    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        logger.debug("fsync: unable to open directory %s", path)
        return
    try:
        os.fsync(fd)
    except OSError:
        logger.debug("fsync: sync failed for directory %s", path)
    finally:
        os.close(fd)


def atomic_write_text(path: Path, content: str) -> None:
    """Replace file contents via temp-write + rename."""

    ensure_directory(path.parent)
    temp_path = path.parent / f".{path.name}.{uuid.uuid4().hex}.tmp"
    try:
        with temp_path.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
        _fsync_directory(path.parent)
    finally:
        if temp_path.exists():
            with suppress(OSError):
                temp_path.unlink()


def save_json(path: str | Path, payload: dict[str, Any]) -> Path:
    """Save a JSON object to disk atomically."""

    file_path = Path(path)
    content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    atomic_write_text(file_path, content)
    return file_path


class StoreLockError(RuntimeError):
    """Raised when another writer holds the store lock."""


def _read_lock_owner(lock_path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(lock_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return payload if isinstance(payload, dict) else {}


@contextmanager
def store_lock(data_path: str | Path) -> Iterator[Path]:
    """Hold an exclusive lock file beside `data_path` for one read-modify-write."""

    target = Path(data_path)
    ensure_directory(target.parent)
    lock_path = target.with_name(f"{target.name}.lock")
    owner = {"pid": os.getpid(), "acquired_at_utc": datetime.now(UTC).isoformat()}

    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError as exc:
        existing = _read_lock_owner(lock_path)
        raise StoreLockError(
            f"Store {target} is locked by pid {existing.get('pid')!r} "
            f"since {existing.get('acquired_at_utc')!r}. "
            f"If this is stale, remove {lock_path} manually."
        ) from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(owner) + "\n")
        yield lock_path
    finally:
        try:
            lock_path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to remove lock file: %s", lock_path, exc_info=True)
