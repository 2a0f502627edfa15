"""Pytest configuration and fixtures for querymemo.

Builds a fresh app per test with an in-memory store and a recording
executor injected through create_app(). All imports use querymemo.*.
"""

import os

# Settings are read when querymemo.main is imported (module-level app).
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-bearer-tokens")
os.environ.setdefault("QUERY_CACHE_BACKEND", "memory")

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from querymemo.core.config import get_settings
from querymemo.infrastructure.cache import InMemoryQueryStore, QueryCache
from querymemo.main import create_app

get_settings.cache_clear()


class RecordingExecutor:
    """Query executor that records every call and returns a fixed-shape result."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def execute(self, query_text: str, scope: str) -> Any:
        self.calls.append((query_text, scope))
        return {"rows": [1, 2, 3], "answered": query_text.strip()}


@pytest.fixture
def store() -> InMemoryQueryStore:
    """Empty in-memory query store."""
    return InMemoryQueryStore()


@pytest.fixture
def query_cache(store: InMemoryQueryStore) -> QueryCache:
    """QueryCache over the in-memory store."""
    return QueryCache(store)


@pytest.fixture
def executor() -> RecordingExecutor:
    """Executor whose calls count downstream invocations."""
    return RecordingExecutor()


@pytest.fixture
def app(store: InMemoryQueryStore, executor: RecordingExecutor) -> FastAPI:
    """App wired with the test store and executor."""
    return create_app(store=store, executor=executor)


@pytest.fixture
async def client(app: FastAPI) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Unhandled app errors become 500s."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
