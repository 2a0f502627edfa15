"""Requester context middleware.

Resolves the authenticated requester from "Authorization: Bearer <jwt>"
and publishes its ID on scope state (user_id) and in the request context
var. Missing or invalid tokens leave the request anonymous; rejecting
requests is left to the routes.
Uses raw ASGI (no BaseHTTPMiddleware) for production-safe streaming and background tasks.
"""

import logging
from typing import Callable

from querymemo.infrastructure.security.jwt import verify_token
from querymemo.shared.context import reset_current_user, set_current_user

logger = logging.getLogger(__name__)


def _get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def _user_id_from_scope(scope: dict) -> str | None:
    """Return the sub claim of a valid bearer token, else None."""
    auth = _get_header(scope, "authorization")
    if not auth or not auth.startswith("Bearer "):
        return None
    try:
        payload = verify_token(auth[7:].strip())
    except ValueError as e:
        logger.debug("Ignoring bearer token: %s", e)
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def AuthContextMiddleware(app: Callable) -> Callable:
    """Set requester ID (state.user_id + context var) before the route runs. Raw ASGI.

    A user_id already placed on scope state by an outer layer is kept.
    """

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope.setdefault("state", {})
        user_id = state.get("user_id") or _user_id_from_scope(scope)
        state["user_id"] = user_id
        token = set_current_user(user_id)
        try:
            await app(scope, receive, send)
        finally:
            reset_current_user(token)

    return asgi_app
