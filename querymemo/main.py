"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here (SRP). See querymemo.core.lifespan and
querymemo.core.exception_handlers.

The query store and executor are injected through create_app() so tests
and embedding applications can supply their own; by default the store
comes from settings and no executor is configured (POST /query -> 503).
"""

from fastapi import FastAPI

from querymemo.api.v1.router import api_router
from querymemo.application.interfaces import QueryExecutor
from querymemo.core.config import Settings, get_settings
from querymemo.core.exception_handlers import register_exception_handlers
from querymemo.core.lifespan import create_lifespan, setup_app_telemetry
from querymemo.infrastructure.cache import (
    InMemoryQueryStore,
    QueryCache,
    QueryStoreProtocol,
    RedisQueryStore,
)
from querymemo.middleware import AuthContextMiddleware, QueryCacheMiddleware


def build_query_store(settings: Settings) -> QueryStoreProtocol:
    """Return the store selected by settings.query_cache_backend (not yet connected)."""
    if settings.query_cache_backend == "redis":
        return RedisQueryStore(settings.query_cache_namespace, settings=settings)
    return InMemoryQueryStore(settings.query_cache_namespace)


def create_app(
    store: QueryStoreProtocol | None = None,
    executor: QueryExecutor | None = None,
) -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import).

    Args:
        store: Query store; defaults to build_query_store(settings).
        executor: Component that computes query results; None disables /query.
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    query_store = store if store is not None else build_query_store(settings)
    query_cache = QueryCache(query_store, default_ttl=settings.query_cache_ttl_seconds)
    app.state.query_store = query_store
    app.state.query_cache = query_cache
    app.state.query_executor = executor

    # Middleware: last added = outermost. Order: auth context -> query cache -> routes.
    if settings.query_cache_enabled:
        app.add_middleware(
            QueryCacheMiddleware,
            cache=query_cache,
            max_body_bytes=settings.query_cache_max_body_bytes,
            paths=settings.query_cache_paths,
        )
    app.add_middleware(AuthContextMiddleware)

    app.include_router(api_router, prefix="/api/v1")
    setup_app_telemetry(app, settings)

    return app


app = create_app()
