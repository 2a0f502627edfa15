"""Query API schemas.

The response shape (success/data/cached) matches what QueryCacheMiddleware
returns on a hit, so clients see the same envelope either way.
"""

from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Body for POST /query. message takes precedence over query."""

    message: str | None = Field(default=None, description="Free-form query text")
    query: str | None = Field(default=None, description="Alternative query text field")

    def query_text(self) -> str | None:
        """Return the first non-empty field, message first."""
        return self.message or self.query or None


class QueryResponse(BaseModel):
    """Result envelope for a computed (uncached) query."""

    success: bool = True
    data: Any = Field(..., description="Executor result")
    cached: bool = False
