"""Clear the query-result cache namespace.

Usage:
    python -m scripts.clear_query_cache
Uses QUERY_CACHE_BACKEND / QUERY_CACHE_NAMESPACE / REDIS_* from the
environment or .env. Only the query cache namespace is removed; other
keys in the same Redis database are left alone. With the in-memory
backend there is nothing to clear outside a running server (use
DELETE /api/v1/cache instead).
"""

import asyncio
import sys

from querymemo.core.config import get_settings
from querymemo.infrastructure.cache import QueryCache, RedisQueryStore


async def main() -> None:
    """Connect to the configured Redis store and clear its namespace."""
    settings = get_settings()
    if settings.query_cache_backend != "redis":
        print(
            "QUERY_CACHE_BACKEND is not 'redis'; clear a running server via DELETE /api/v1/cache",
            file=sys.stderr,
        )
        sys.exit(1)

    store = RedisQueryStore(settings.query_cache_namespace, settings=settings)
    await store.connect()
    if not store.is_available():
        print("Redis unavailable", file=sys.stderr)
        sys.exit(1)
    try:
        cleared = await QueryCache(store).clear_all()
    finally:
        await store.disconnect()

    if not cleared:
        print(f"Failed to clear namespace {settings.query_cache_namespace!r}", file=sys.stderr)
        sys.exit(1)
    print(f"Cleared query cache namespace {settings.query_cache_namespace!r}")


if __name__ == "__main__":
    asyncio.run(main())
