"""API request/response schemas (Pydantic)."""

from querymemo.schemas.cache import CacheClearResponse
from querymemo.schemas.health import HealthResponse
from querymemo.schemas.query import QueryRequest, QueryResponse

__all__ = [
    "CacheClearResponse",
    "HealthResponse",
    "QueryRequest",
    "QueryResponse",
]
