"""In-process TTL store for the query cache.

Each entry carries its own expiry (time.monotonic based). Expired entries
are dropped lazily on read and swept every SWEEP_INTERVAL writes. Values
are deep-copied in and out so callers never share mutable state with the
store. One instance is one namespace: clear() empties only this instance.
"""

from __future__ import annotations

import copy
import logging
import time
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = 1000


class InMemoryQueryStore:
    """Dict-backed store with per-entry TTL. Safe for concurrent use (lock-guarded)."""

    def __init__(self, namespace: str = "query_results") -> None:
        self.namespace = namespace
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = Lock()
        self._writes_since_sweep = 0

    async def get(self, key: str) -> Any | None:
        """Return value or None if missing/expired."""
        now = time.monotonic()
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= now:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value; expires ttl seconds from now. Overwrites any previous value."""
        now = time.monotonic()
        value = copy.deepcopy(value)
        with self._lock:
            self._writes_since_sweep += 1
            if self._writes_since_sweep >= SWEEP_INTERVAL:
                self._sweep(now)
            self._entries[key] = (now + ttl, value)

    async def clear(self) -> None:
        """Remove all entries in this namespace."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("In-memory store %s cleared (%s keys)", self.namespace, count)

    def __len__(self) -> int:
        """Number of stored entries (expired ones included until swept)."""
        with self._lock:
            return len(self._entries)

    def _sweep(self, now: float) -> None:
        """Drop expired entries. Caller holds the lock."""
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        self._writes_since_sweep = 0
