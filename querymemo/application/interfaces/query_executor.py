"""Query executor interface (port) for the expensive downstream computation.

The executor is unaware of caching: QueryCacheMiddleware decides whether
it runs at all.
"""

from __future__ import annotations

from typing import Any, Protocol


class QueryExecutor(Protocol):
    """Protocol for the component that answers free-form textual queries (DIP)."""

    async def execute(self, query_text: str, scope: str) -> Any:
        """Return a JSON-serializable result for query_text on behalf of scope ("" if anonymous)."""
        ...
