"""Query cache: memoized results of free-form textual queries.

Identity is (scope, trimmed query text), hashed by derive_query_key. The
store is injected (QueryStoreProtocol); every store failure is contained
here and surfaces only as a log record, a span event and a miss/no-op
return value. Nothing in this module raises into the request path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from functools import wraps
from typing import Any

from querymemo.core.constants import (
    DEFAULT_QUERY_CACHE_TTL_SECONDS,
    QUERY_LOG_PREVIEW_CHARS,
)
from querymemo.infrastructure.cache.keys import derive_query_key
from querymemo.infrastructure.cache.store_protocol import QueryStoreProtocol
from querymemo.shared.telemetry.tracing import add_span_event, set_span_error
from querymemo.shared.utils.datetime import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryCacheEntry:
    """Stored value for one query identity.

    Attributes:
        result: Cached handler output (opaque, JSON-serializable).
        query: Original untrimmed query text (diagnostics).
        timestamp: ISO-8601 UTC time the entry was written.
        scope: Requester scope used at write time ("" if unscoped).
    """

    result: Any
    query: str
    timestamp: str
    scope: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> QueryCacheEntry | None:
        """Build an entry from a stored mapping; None if the value is not an entry."""
        if not isinstance(data, dict) or "result" not in data:
            return None
        return cls(
            result=data["result"],
            query=str(data.get("query", "")),
            timestamp=str(data.get("timestamp", "")),
            scope=str(data.get("scope", "")),
        )


def _preview(query_text: str) -> str:
    """Query text truncated for diagnostic signals."""
    if len(query_text) <= QUERY_LOG_PREVIEW_CHARS:
        return query_text
    return query_text[:QUERY_LOG_PREVIEW_CHARS] + "..."


def _is_valid_query(query_text: Any) -> bool:
    return isinstance(query_text, str) and bool(query_text)


def _is_valid_scope(scope: Any) -> bool:
    """Any string scope is accepted; "" means unscoped."""
    return isinstance(scope, str)


class QueryCache:
    """Get/set/clear over cached query results, with failure containment.

    Receives its store at construction; the application lifespan owns the
    store's lifecycle. Safe to share across concurrent requests: it holds no
    per-request state.
    """

    def __init__(
        self,
        store: QueryStoreProtocol,
        default_ttl: float = DEFAULT_QUERY_CACHE_TTL_SECONDS,
    ) -> None:
        """Initialize the accessor.

        Args:
            store: Namespaced TTL store (InMemoryQueryStore, RedisQueryStore, ...).
            default_ttl: TTL in seconds used when set() gets no ttl.
        """
        self.store = store
        self.default_ttl = default_ttl
        self._background_writes: set[asyncio.Task[bool]] = set()

    async def get(self, query_text: Any, scope: Any = "") -> QueryCacheEntry | None:
        """Return the cached entry for (scope, trimmed query_text), or None.

        Invalid input returns None without touching the store. Store errors
        are logged and degrade to None.
        """
        if not _is_valid_query(query_text) or not _is_valid_scope(scope):
            return None
        key = derive_query_key(query_text.strip(), scope)
        try:
            stored = await self.store.get(key)
        except Exception as e:
            self._report_error("get", e)
            return None

        entry = QueryCacheEntry.from_dict(stored) if stored is not None else None
        if entry is None:
            if stored is not None:
                logger.warning("Ignoring malformed query cache value for key %s", key)
            logger.info("Query cache MISS for query: %r", _preview(query_text))
            add_span_event(
                "query_cache.miss",
                {"query.preview": _preview(query_text), "query.scoped": bool(scope)},
            )
            return None

        logger.info("Query cache HIT for query: %r", _preview(query_text))
        add_span_event(
            "query_cache.hit",
            {"query.preview": _preview(query_text), "query.scoped": bool(scope)},
        )
        return entry

    async def set(
        self,
        query_text: Any,
        result: Any,
        scope: Any = "",
        ttl: float | None = None,
    ) -> bool:
        """Cache result for (scope, trimmed query_text). Returns True on success.

        The entry keeps the untrimmed query text. A None result or invalid
        query/scope returns False without touching the store; store errors
        are logged and return False.

        Args:
            query_text: Query text as received.
            result: Value to cache (JSON-serializable for networked stores).
            scope: Requester scope ("" for unscoped).
            ttl: Time-to-live in seconds; defaults to default_ttl.
        """
        if not _is_valid_query(query_text) or not _is_valid_scope(scope) or result is None:
            return False
        key = derive_query_key(query_text.strip(), scope)
        entry = QueryCacheEntry(
            result=result,
            query=query_text,
            timestamp=utc_now_iso(),
            scope=scope,
        )
        effective_ttl = self.default_ttl if ttl is None else ttl
        try:
            await self.store.set(key, entry.to_dict(), effective_ttl)
        except Exception as e:
            self._report_error("set", e)
            add_span_event("query_cache.write", {"succeeded": False})
            return False
        logger.info("Cached query result for: %r", _preview(query_text))
        add_span_event("query_cache.write", {"succeeded": True, "ttl": effective_ttl})
        return True

    async def clear_all(self) -> bool:
        """Remove every entry in the query cache namespace. Returns True on success."""
        try:
            await self.store.clear()
        except Exception as e:
            self._report_error("clear", e)
            add_span_event("query_cache.clear", {"succeeded": False})
            return False
        logger.info("Query cache cleared")
        add_span_event("query_cache.clear", {"succeeded": True})
        return True

    def set_in_background(
        self,
        query_text: str,
        result: Any,
        scope: str = "",
        ttl: float | None = None,
    ) -> asyncio.Task[bool]:
        """Schedule set() without waiting for it (fire-and-forget).

        Must be called from a running event loop. The task is tracked until
        done so drain() can await it at shutdown.
        """
        task = asyncio.get_running_loop().create_task(
            self.set(query_text, result, scope, ttl=ttl)
        )
        self._background_writes.add(task)
        task.add_done_callback(self._background_writes.discard)
        return task

    async def drain(self) -> None:
        """Wait for outstanding background writes (application shutdown)."""
        pending = list(self._background_writes)
        if pending:
            logger.info("Waiting for %s pending query cache writes", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    @staticmethod
    def _report_error(operation: str, error: Exception) -> None:
        logger.warning("Query cache %s failed: %s", operation, error, exc_info=True)
        set_span_error(error)
        add_span_event(
            "query_cache.error",
            {"operation": operation, "error.type": type(error).__name__},
        )


def cached_query(
    cache: QueryCache,
    ttl: float | None = None,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Decorator to memoize an async query function through a QueryCache.

    The wrapped function must take (query_text, scope="") and return a
    JSON-serializable result; its output must depend only on those two
    arguments. A None result is returned but not cached.

    Args:
        cache: QueryCache to read from and write to.
        ttl: Time-to-live in seconds; defaults to the cache's default_ttl.

    Returns:
        Decorator that returns the cached result on hit and caches on miss.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(query_text: str, scope: str = "") -> Any:
            entry = await cache.get(query_text, scope)
            if entry is not None:
                return entry.result
            result = await func(query_text, scope)
            await cache.set(query_text, result, scope, ttl=ttl)
            return result

        return wrapper

    return decorator
