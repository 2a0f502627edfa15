"""API dependencies (composition root).

Routes get the query cache and executor from app.state, where create_app
places them; no route constructs infrastructure itself.
"""

from __future__ import annotations

from fastapi import Request

from querymemo.application.interfaces import QueryExecutor
from querymemo.domain.exceptions import ExecutorNotConfiguredException
from querymemo.infrastructure.cache import QueryCache


def get_query_cache(request: Request) -> QueryCache:
    """Query cache built at bootstrap (app.state.query_cache)."""
    return request.app.state.query_cache


def get_query_executor(request: Request) -> QueryExecutor:
    """Configured query executor; 503 when none is wired in."""
    executor = getattr(request.app.state, "query_executor", None)
    if executor is None:
        raise ExecutorNotConfiguredException()
    return executor


def get_requester_scope(request: Request) -> str:
    """Authenticated requester ID set by AuthContextMiddleware, or "" if anonymous."""
    return getattr(request.state, "user_id", None) or ""
