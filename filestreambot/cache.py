"""A size-bounded, expiring in-memory cache of file descriptions."""

from __future__ import annotations

import logging
import pickle
import threading
import time
from collections import OrderedDict
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class FileCache:
    """Stores serialised copies of values, evicting the least recently used when full."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self._max_bytes = max_bytes
        self._entries: OrderedDict[str, tuple[bytes, float | None]] = OrderedDict()
        self._used = 0
        self._lock = threading.Lock()
        log.info("Initialized")

    def _size(self, key: str, data: bytes) -> int:
        return len(key.encode()) + len(data)

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._used -= self._size(key, entry[0])

    def get(self, key: str) -> Any:
        """Return a copy of the value stored under ``key``; raise KeyError if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                raise KeyError(key)
            data, expires = entry
            if expires is not None and time.monotonic() >= expires:
                self._remove(key)
                raise KeyError(key)
            self._entries.move_to_end(key)
        return pickle.loads(data)

    def set(self, key: str, value: Any, expire_seconds: int = 0) -> None:
        """Store a copy of ``value``; a non-positive ``expire_seconds`` never expires."""
        data = pickle.dumps(value)
        size = self._size(key, data)
        with self._lock:
            self._remove(key)
            if size > self._max_bytes:
                log.debug("Entry %s too large to cache", key)
                return
            while self._used + size > self._max_bytes:
                self._remove(next(iter(self._entries)))
            expires = time.monotonic() + expire_seconds if expire_seconds > 0 else None
            self._entries[key] = (data, expires)
            self._used += size

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        with self._lock:
            self._remove(key)