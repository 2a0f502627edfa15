"""Query cache administration: clear the query-result namespace."""

from typing import Annotated

from fastapi import APIRouter, Depends

from querymemo.api.v1.dependencies import get_query_cache
from querymemo.infrastructure.cache import QueryCache
from querymemo.schemas.cache import CacheClearResponse

router = APIRouter()


@router.delete("", response_model=CacheClearResponse)
async def clear_query_cache(
    cache: Annotated[QueryCache, Depends(get_query_cache)],
) -> CacheClearResponse:
    """Remove every cached query result (e.g. after the underlying data changed)."""
    return CacheClearResponse(cleared=await cache.clear_all())
