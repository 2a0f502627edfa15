"""Cache: query-result cache, its stores and key derivation.

QueryCache is built once at application bootstrap with an injected store;
key format lives in keys.py (DRY).
"""

from querymemo.infrastructure.cache.keys import derive_query_key, namespaced_key
from querymemo.infrastructure.cache.memory_store import InMemoryQueryStore
from querymemo.infrastructure.cache.query_cache import (
    QueryCache,
    QueryCacheEntry,
    cached_query,
)
from querymemo.infrastructure.cache.redis_store import RedisQueryStore
from querymemo.infrastructure.cache.store_protocol import QueryStoreProtocol

__all__ = [
    "InMemoryQueryStore",
    "QueryCache",
    "QueryCacheEntry",
    "QueryStoreProtocol",
    "RedisQueryStore",
    "cached_query",
    "derive_query_key",
    "namespaced_key",
]
