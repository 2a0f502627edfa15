"""Query cache middleware.

Two-phase interception around the downstream app, for requests under the
configured query paths only:

- request side: extract query text (body "message", then body "query",
  then query-string "q"; first non-empty wins) and the requester scope
  (state.user_id), then try the cache. A hit is answered here and the
  downstream app never runs. A miss leaves a PendingQueryCache on
  state.pending_query_cache and calls downstream.
- response side: after the last body chunk has been sent, a 200 JSON
  object response with a non-null "data" field is written back in the
  background. The response itself is forwarded unchanged.

Downstream errors propagate untouched. Requests without usable query text,
and requests whose body was not fully read (over the size cap or client
disconnect), bypass the cache entirely.
Uses raw ASGI (no BaseHTTPMiddleware) for production-safe streaming and background tasks.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable

from starlette.datastructures import Headers, QueryParams

from querymemo.core.constants import (
    QUERY_BODY_FIELDS,
    QUERY_STRING_PARAM,
    RESPONSE_DATA_FIELD,
)
from querymemo.infrastructure.cache.query_cache import QueryCache, QueryCacheEntry
from querymemo.shared.telemetry.tracing import add_span_attributes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingQueryCache:
    """Identity captured on a miss, used to write the response back."""

    query_text: str
    scope: str


class _ReplayReceive:
    """Replay already-received request messages, then continue with the real receive."""

    def __init__(self, messages: list[dict], receive: Callable) -> None:
        self._messages = messages
        self._index = 0
        self._receive = receive

    async def __call__(self) -> dict:
        if self._index < len(self._messages):
            message = self._messages[self._index]
            self._index += 1
            return message
        return await self._receive()


async def _buffer_body(receive: Callable, max_bytes: int) -> tuple[bytes | None, list[dict]]:
    """Read the request body up to max_bytes.

    Returns (body, messages). body is None when the body is larger than
    max_bytes or the client disconnected; messages are everything received
    so far, for replay.
    """
    messages: list[dict] = []
    chunks: list[bytes] = []
    total = 0
    while True:
        message = await receive()
        messages.append(message)
        if message["type"] != "http.request":
            return None, messages
        chunk = message.get("body", b"")
        total += len(chunk)
        if total > max_bytes:
            return None, messages
        chunks.append(chunk)
        if not message.get("more_body", False):
            return b"".join(chunks), messages


def _matches_path(path: str, prefixes: Sequence[str]) -> bool:
    """True if path equals a prefix or lies below it (segment boundary)."""
    for prefix in prefixes:
        base = prefix.rstrip("/")
        if path == base or path.startswith(base + "/"):
            return True
    return False


def _is_json_body(headers: Headers) -> bool:
    """Same rule FastAPI uses for body parameters: no content-type, or (application/)json / +json."""
    content_type = headers.get("content-type")
    if not content_type:
        return True
    mime = content_type.split(";", 1)[0].strip().lower()
    maintype, _, subtype = mime.partition("/")
    return maintype == "application" and (subtype == "json" or subtype.endswith("+json"))


def _parse_json_object(raw: bytes) -> dict[str, Any] | None:
    """Return raw decoded as a JSON object, or None."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _extract_query_text(scope: dict, body: bytes) -> Any:
    """Return the first non-empty query candidate, in priority order (may be non-str)."""
    fields: dict[str, Any] = {}
    if _is_json_body(Headers(scope=scope)):
        fields = _parse_json_object(body) or {}
    candidates = [fields.get(name) for name in QUERY_BODY_FIELDS]
    candidates.append(QueryParams(scope.get("query_string", b"")).get(QUERY_STRING_PARAM))
    return next((value for value in candidates if value), None)


def _encode_cached(entry: QueryCacheEntry) -> bytes | None:
    """Hit response body (success, data, cached=true, timestamp); None if result is not JSON."""
    try:
        return json.dumps(
            {
                "success": True,
                "data": entry.result,
                "cached": True,
                "timestamp": entry.timestamp,
            }
        ).encode()
    except (TypeError, ValueError) as e:
        logger.warning("Cached query result is not JSON-serializable, treating as miss: %s", e)
        return None


async def _send_cached(send: Callable, body: bytes) -> None:
    """Answer the request from the cache (200)."""
    await send({
        "type": "http.response.start",
        "status": 200,
        "headers": [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode()),
        ],
    })
    await send({
        "type": "http.response.body",
        "body": body,
        "more_body": False,
    })


def QueryCacheMiddleware(
    app: Callable,
    cache: QueryCache,
    max_body_bytes: int,
    paths: Sequence[str] = ("/api/v1/query",),
) -> Callable:
    """Serve repeated queries from cache and cache successful responses. Raw ASGI.

    Args:
        app: Downstream ASGI app.
        cache: QueryCache built at bootstrap.
        max_body_bytes: Larger request bodies bypass the cache.
        paths: Path prefixes of the query routes; everything else passes through.
    """
    prefixes = tuple(paths)

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or not _matches_path(scope["path"], prefixes):
            await app(scope, receive, send)
            return

        body, received = await _buffer_body(receive, max_body_bytes)
        replay = _ReplayReceive(received, receive)
        if body is None:
            logger.debug("Request body not fully read, bypassing query cache")
            await app(scope, replay, send)
            return

        query_text = _extract_query_text(scope, body)
        if not query_text or not isinstance(query_text, str):
            await app(scope, replay, send)
            return

        state = scope.setdefault("state", {})
        requester = state.get("user_id") or ""
        entry = await cache.get(query_text, requester)
        cached_body = _encode_cached(entry) if entry is not None else None
        if cached_body is not None:
            add_span_attributes(**{"query_cache.outcome": "hit"})
            await _send_cached(send, cached_body)
            return

        add_span_attributes(**{"query_cache.outcome": "miss"})
        pending = PendingQueryCache(query_text=query_text, scope=requester)
        state["pending_query_cache"] = pending
        status: int | None = None
        response_chunks: list[bytes] = []

        async def send_wrapper(message: dict) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            elif message["type"] == "http.response.body" and status == 200:
                response_chunks.append(message.get("body", b""))
            await send(message)
            if (
                message["type"] == "http.response.body"
                and status == 200
                and not message.get("more_body", False)
            ):
                _write_back(pending, b"".join(response_chunks))

        await app(scope, replay, send_wrapper)

    def _write_back(pending: PendingQueryCache, raw: bytes) -> None:
        payload = _parse_json_object(raw)
        if payload is None or payload.get(RESPONSE_DATA_FIELD) is None:
            logger.debug("Response not cacheable (no %r field)", RESPONSE_DATA_FIELD)
            return
        cache.set_in_background(
            pending.query_text,
            payload[RESPONSE_DATA_FIELD],
            pending.scope,
        )

    return asgi_app
