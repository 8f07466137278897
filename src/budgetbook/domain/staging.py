"""Short-lived storage for imports between preview and confirm.

Entries are JSON-compatible dicts keyed by an opaque import id and expire
after a fixed time to live.
"""

import copy
import json
import logging
import os
import re
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
STAGING_DIR_ENV = "BUDGETBOOK_STAGING_DIR"
STAGING_TTL_ENV = "BUDGETBOOK_STAGING_TTL"
# Entries may name an uploaded file that is removed along with them
TEMP_PATH_KEY = "temp_path"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class StagingStore(ABC):
    """Key-value store for staged imports."""

    @abstractmethod
    def put(self, key: str, value: dict) -> None:
        """Store a value, replacing any existing one and restarting its TTL."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[dict]:
        """Get a value, or None if missing or expired."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a value if present."""
        pass

    @abstractmethod
    def purge_expired(self) -> int:
        """Remove expired values. Returns how many were removed."""
        pass

    @property
    def upload_dir(self) -> Path:
        """Directory where uploaded files are kept until confirm or discard."""
        return Path(tempfile.gettempdir())


def _check_key(key: str) -> str:
    if not key or not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid staging key '{key}'")
    return key


def _release_upload(value: Optional[dict]) -> None:
    """Delete the uploaded file an evicted entry refers to."""
    temp_path = value.get(TEMP_PATH_KEY) if isinstance(value, dict) else None
    if temp_path:
        Path(temp_path).unlink(missing_ok=True)
        logger.debug("Removed expired upload %s", temp_path)


class MemoryStagingStore(StagingStore):
    """In-process store, for a long-running process or tests."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, tuple[float, dict]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: dict) -> None:
        _check_key(key)
        with self._lock:
            self._entries[key] = (self.clock() + self.ttl_seconds, copy.deepcopy(value))

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self.clock():
                del self._entries[key]
                _release_upload(value)
                logger.debug("Staged import %s expired", key)
                return None
            return copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
            released = [self._entries.pop(key)[1] for key in expired]
        for value in released:
            _release_upload(value)
        return len(expired)


class FileStagingStore(StagingStore):
    """Store that keeps one JSON file per import, shared across processes.

    Used by the CLI, where preview and confirm run as separate commands.
    """

    def __init__(self, directory: str | Path, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.directory = Path(directory)
        self.ttl_seconds = ttl_seconds
        self.directory.mkdir(parents=True, exist_ok=True)

    @property
    def upload_dir(self) -> Path:
        path = self.directory / "uploads"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _path(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    def put(self, key: str, value: dict) -> None:
        path = self._path(key)
        payload = {"expires_at": time.time() + self.ttl_seconds, "value": value}
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload), encoding="utf-8")
        tmp_path.replace(path)

    def get(self, key: str) -> Optional[dict]:
        try:
            path = self._path(key)
        except ValueError:
            return None
        if not path.is_file():
            return None

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable staged import %s: %s", key, e)
            return None

        if payload.get("expires_at", 0) <= time.time():
            path.unlink(missing_ok=True)
            _release_upload(payload.get("value"))
            logger.debug("Staged import %s expired", key)
            return None
        return payload.get("value")

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except ValueError:
            return

    def purge_expired(self) -> int:
        now = time.time()
        removed = 0
        for path in self.directory.glob("*.json"):
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                payload = {}
            if payload.get("expires_at", 0) <= now:
                path.unlink(missing_ok=True)
                _release_upload(payload.get("value"))
                removed += 1
        return removed


def create_staging_store(
    directory: Optional[str | Path] = None, ttl_seconds: Optional[int] = None
) -> FileStagingStore:
    """Create the file staging store used across CLI invocations.

    Args:
        directory: Staging directory. If None, checks BUDGETBOOK_STAGING_DIR,
            then defaults to ~/.budgetbook/staging
        ttl_seconds: Entry lifetime. If None, checks BUDGETBOOK_STAGING_TTL,
            then defaults to one hour

    Returns:
        FileStagingStore instance
    """
    if directory is None:
        directory = os.environ.get(STAGING_DIR_ENV)

    if directory is None:
        directory = Path.home() / ".budgetbook" / "staging"

    if ttl_seconds is None:
        raw_ttl = os.environ.get(STAGING_TTL_ENV)
        try:
            ttl_seconds = int(raw_ttl) if raw_ttl else DEFAULT_TTL_SECONDS
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", STAGING_TTL_ENV, raw_ttl)
            ttl_seconds = DEFAULT_TTL_SECONDS

    return FileStagingStore(directory, ttl_seconds=ttl_seconds)
