"""Redis-backed store for the query cache.

Keys live under "<namespace>:" so the query cache can share a Redis
database with other data; clear() removes only that prefix. Values are
JSON-encoded. Failures are raised as CacheStoreError for QueryCache to
contain.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis

from querymemo.core.config import Settings, get_settings
from querymemo.core.constants import CACHE_KEY_SEP
from querymemo.domain.exceptions import CacheStoreError
from querymemo.infrastructure.cache.keys import namespaced_key

logger = logging.getLogger(__name__)

_CLEAR_CHUNK_SIZE = 500

T = TypeVar("T")


class RedisQueryStore:
    """Async Redis store with per-entry TTL (PSETEX, milliseconds).

    Call connect() at startup and disconnect() at shutdown (application
    lifespan). While Redis is unreachable, each operation tries to connect
    again, at most once per reconnect backoff. A connection error on a live
    client triggers one reconnect and one retry before the operation fails.
    """

    def __init__(
        self,
        namespace: str,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize store.

        Args:
            namespace: Logical namespace (key prefix) for this store.
            redis_client: Optional Redis client for testing or DI.
            settings: Optional settings; defaults to get_settings().
        """
        self.namespace = namespace
        self.redis = redis_client
        self.settings = settings or get_settings()
        self._connected = redis_client is not None
        self._next_connect_at = 0.0

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        self._next_connect_at = time.monotonic() + self.settings.redis_reconnect_backoff_seconds
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value() if self.settings.redis_password else None,
                decode_responses=True,
                socket_connect_timeout=self.settings.redis_socket_timeout,
                socket_timeout=self.settings.redis_socket_timeout,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis query store connected: %s:%s (namespace=%s)",
                self.settings.redis_host,
                self.settings.redis_port,
                self.namespace,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning(
                "Redis connection failed: %s. Query cache will run degraded (always miss).",
                e,
            )
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis query store disconnected")

    async def _reconnect(self) -> bool:
        """Drop the current client (if any) and connect again. Returns True if reconnected."""
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except redis.RedisError as e:
                logger.debug("Ignoring error while closing Redis client: %s", e)
            self.redis = None
        self._connected = False
        await self.connect()
        return self._connected

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    async def _client(self, operation: str) -> redis.Redis:
        """Return a live client, connecting first when the backoff allows it."""
        if not self.is_available() and time.monotonic() >= self._next_connect_at:
            await self._reconnect()
        if not self.is_available() or self.redis is None:
            raise CacheStoreError(operation, "Redis unavailable")
        return self.redis

    async def _execute(self, operation: str, command: Callable[[redis.Redis], Awaitable[T]]) -> T:
        """Run command against the client, reconnecting once on connection errors."""
        client = await self._client(operation)
        try:
            return await command(client)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            if not await self._reconnect():
                raise CacheStoreError(operation, str(e)) from e
            try:
                return await command(await self._client(operation))
            except redis.RedisError as retry_error:
                raise CacheStoreError(operation, str(retry_error)) from retry_error
        except redis.RedisError as e:
            raise CacheStoreError(operation, str(e)) from e

    async def get(self, key: str) -> Any | None:
        """Return JSON-decoded value or None if missing/expired.

        Raises:
            CacheStoreError: On Redis failure or undecodable value.
        """
        full_key = namespaced_key(self.namespace, key)
        raw = await self._execute("get", lambda client: client.get(full_key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheStoreError("get", f"undecodable value: {e}") from e

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Store JSON-encoded value with TTL in seconds (sub-second precision).

        Raises:
            CacheStoreError: On Redis failure or non-JSON-serializable value.
        """
        full_key = namespaced_key(self.namespace, key)
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheStoreError("set", f"value not serializable: {e}") from e
        ttl_ms = max(1, int(ttl * 1000))
        await self._execute("set", lambda client: client.psetex(full_key, ttl_ms, serialized))
        logger.debug("Redis SET: %s (TTL: %sms)", full_key, ttl_ms)

    async def clear(self) -> None:
        """Delete all keys under this namespace using SCAN + batched UNLINK (non-blocking).

        Raises:
            CacheStoreError: On Redis failure.
        """
        deleted = await self._execute("clear", self._clear_namespace)
        logger.info("Redis namespace %s cleared (%s keys)", self.namespace, deleted)

    async def _clear_namespace(self, client: redis.Redis) -> int:
        pattern = f"{self.namespace}{CACHE_KEY_SEP}*"
        deleted = 0
        chunk: list[str] = []
        async for key in client.scan_iter(match=pattern):
            chunk.append(key)
            if len(chunk) >= _CLEAR_CHUNK_SIZE:
                deleted += await self._unlink(client, chunk)
                chunk = []
        if chunk:
            deleted += await self._unlink(client, chunk)
        return deleted

    @staticmethod
    async def _unlink(client: redis.Redis, keys: list[str]) -> int:
        async with client.pipeline(transaction=False) as pipe:
            pipe.unlink(*keys)
            results = await pipe.execute()
        return sum(int(r or 0) for r in results)
