"""HTTP middleware: requester context and query cache.

Applied in main app; order matters (last added = outermost): the
requester context must wrap the query cache so the cache sees the scope.
Import and use from querymemo.main.
"""

from querymemo.middleware.auth_context import AuthContextMiddleware
from querymemo.middleware.query_cache import PendingQueryCache, QueryCacheMiddleware

__all__ = [
    "AuthContextMiddleware",
    "PendingQueryCache",
    "QueryCacheMiddleware",
]
