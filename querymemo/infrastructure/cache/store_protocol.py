"""Store protocol for the query cache (DIP).

Any TTL-aware key-value backend that implements this protocol can back
QueryCache. Implementations: InMemoryQueryStore, RedisQueryStore.
"""

from typing import Any, Protocol


class QueryStoreProtocol(Protocol):
    """Namespaced TTL store consumed by QueryCache.

    Each instance is bound to one logical namespace; clear() must not touch
    data outside it. Operations raise CacheStoreError on failure and must be
    safe for concurrent use.
    """

    async def get(self, key: str) -> Any | None:
        """Return stored value, or None if missing or expired."""
        ...

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key; it expires after ttl seconds."""
        ...

    async def clear(self) -> None:
        """Remove every entry in this store's namespace."""
        ...
