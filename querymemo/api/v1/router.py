"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from querymemo.api.v1.dependencies.
"""

from fastapi import APIRouter

from querymemo.api.v1.endpoints import cache, health, query

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(query.router, prefix="/query", tags=["query"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
