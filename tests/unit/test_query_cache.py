"""QueryCache unit tests: identity rules, input validation, failure containment."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from querymemo.domain.exceptions import CacheStoreError
from querymemo.infrastructure.cache import (
    InMemoryQueryStore,
    QueryCache,
    QueryCacheEntry,
    cached_query,
    derive_query_key,
)


@pytest.fixture
def failing_store() -> AsyncMock:
    """Store whose every operation raises CacheStoreError."""
    store = AsyncMock()
    store.get.side_effect = CacheStoreError("get", "connection refused")
    store.set.side_effect = CacheStoreError("set", "connection refused")
    store.clear.side_effect = CacheStoreError("clear", "connection refused")
    return store


class TestRoundTrip:
    async def test_set_then_get_returns_entry(self, query_cache: QueryCache) -> None:
        assert await query_cache.set("Show balances by branch", {"rows": [1, 2, 3]}) is True
        entry = await query_cache.get("Show balances by branch")
        assert isinstance(entry, QueryCacheEntry)
        assert entry.result == {"rows": [1, 2, 3]}
        assert entry.query == "Show balances by branch"
        assert entry.scope == ""
        assert entry.timestamp

    async def test_entry_keeps_untrimmed_query(self, query_cache: QueryCache) -> None:
        await query_cache.set("  Show balances by branch \n", {"rows": []})
        entry = await query_cache.get("Show balances by branch")
        assert entry is not None
        assert entry.query == "  Show balances by branch \n"

    async def test_trim_equivalence(self, query_cache: QueryCache) -> None:
        await query_cache.set("q", "r")
        entry = await query_cache.get("  q  ")
        assert entry is not None
        assert entry.result == "r"

    async def test_different_query_misses(self, query_cache: QueryCache) -> None:
        await query_cache.set("balances by branch", [1])
        assert await query_cache.get("balances by branch and fiscal year 2015") is None

    async def test_overwrite(self, query_cache: QueryCache) -> None:
        await query_cache.set("q", "first")
        await query_cache.set("q", "second")
        entry = await query_cache.get("q")
        assert entry is not None
        assert entry.result == "second"


class TestScopeIsolation:
    async def test_other_scope_misses(self, query_cache: QueryCache) -> None:
        await query_cache.set("q", "r1", "userA")
        assert await query_cache.get("q", "userB") is None
        assert await query_cache.get("q") is None
        entry = await query_cache.get("q", "userA")
        assert entry is not None
        assert entry.result == "r1"
        assert entry.scope == "userA"

    async def test_scope_containing_separator_round_trips(self, query_cache: QueryCache) -> None:
        """Scopes like OAuth subjects ("google-oauth2:123") are cached like any other."""
        assert await query_cache.set("c", "first", "a:b") is True
        assert await query_cache.set("b:c", "second", "a") is True

        entry = await query_cache.get("c", "a:b")
        assert entry is not None
        assert entry.result == "first"
        entry = await query_cache.get("b:c", "a")
        assert entry is not None
        assert entry.result == "second"


class TestInvalidInput:
    @pytest.mark.parametrize("query_text", ["", None, 42, ["q"]])
    async def test_get_rejects_without_store_access(self, query_text) -> None:
        store = AsyncMock()
        cache = QueryCache(store)
        assert await cache.get(query_text) is None
        store.get.assert_not_called()

    @pytest.mark.parametrize("query_text", ["", None, 42])
    async def test_set_rejects_invalid_query(self, query_text) -> None:
        store = AsyncMock()
        cache = QueryCache(store)
        assert await cache.set(query_text, {"rows": []}) is False
        store.set.assert_not_called()

    async def test_set_rejects_none_result(self) -> None:
        store = AsyncMock()
        cache = QueryCache(store)
        assert await cache.set("q", None) is False
        store.set.assert_not_called()

    async def test_falsy_results_are_cached(self, query_cache: QueryCache) -> None:
        assert await query_cache.set("empty list", []) is True
        entry = await query_cache.get("empty list")
        assert entry is not None
        assert entry.result == []


class TestTtl:
    async def test_default_ttl_passed_to_store(self) -> None:
        store = AsyncMock()
        cache = QueryCache(store, default_ttl=123)
        await cache.set("q", "r")
        key, value, ttl = store.set.call_args.args
        assert key == derive_query_key("q")
        assert value["result"] == "r"
        assert ttl == 123

    async def test_ttl_override(self) -> None:
        store = AsyncMock()
        cache = QueryCache(store)
        await cache.set("q", "r", ttl=5)
        assert store.set.call_args.args[2] == 5

    async def test_default_is_ten_minutes(self) -> None:
        assert QueryCache(AsyncMock()).default_ttl == 600

    async def test_entry_expires(self, query_cache: QueryCache) -> None:
        text = "Show balances by branch"
        await query_cache.set(text, {"rows": [1]}, "", ttl=0.05)
        await asyncio.sleep(0.1)
        assert await query_cache.get(text) is None


class TestFailureContainment:
    async def test_get_degrades_to_miss(self, failing_store: AsyncMock) -> None:
        assert await QueryCache(failing_store).get("q") is None

    async def test_get_contains_unexpected_errors(self) -> None:
        store = AsyncMock()
        store.get.side_effect = RuntimeError("boom")
        assert await QueryCache(store).get("q") is None

    async def test_set_returns_false(self, failing_store: AsyncMock) -> None:
        assert await QueryCache(failing_store).set("q", "r") is False

    async def test_clear_all_returns_false(self, failing_store: AsyncMock) -> None:
        assert await QueryCache(failing_store).clear_all() is False

    async def test_failure_is_logged(
        self, failing_store: AsyncMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="querymemo.infrastructure.cache.query_cache"):
            await QueryCache(failing_store).get("q")
        assert "Query cache get failed" in caplog.text

    async def test_malformed_stored_value_is_a_miss(self) -> None:
        store = AsyncMock()
        store.get.return_value = "not-an-entry"
        assert await QueryCache(store).get("q") is None


class TestSignals:
    async def test_hit_and_miss_logged_with_truncated_query(
        self, query_cache: QueryCache, caplog: pytest.LogCaptureFixture
    ) -> None:
        long_query = "balances " * 20
        with caplog.at_level(logging.INFO, logger="querymemo.infrastructure.cache.query_cache"):
            await query_cache.get(long_query)
            await query_cache.set(long_query, [1])
            await query_cache.get(long_query)
        messages = [r.getMessage() for r in caplog.records]
        assert any("MISS" in m for m in messages)
        assert any("HIT" in m for m in messages)
        assert all(long_query not in m for m in messages)


class TestClearAll:
    async def test_clear_all_removes_entries(self, query_cache: QueryCache) -> None:
        await query_cache.set("a", 1)
        await query_cache.set("b", 2, "userA")
        assert await query_cache.clear_all() is True
        assert await query_cache.get("a") is None
        assert await query_cache.get("b", "userA") is None


class TestBackgroundWrites:
    async def test_set_in_background_then_drain(self, query_cache: QueryCache) -> None:
        task = query_cache.set_in_background("q", {"rows": [1]}, "userA")
        await query_cache.drain()
        assert task.done()
        assert task.result() is True
        entry = await query_cache.get("q", "userA")
        assert entry is not None

    async def test_background_failure_is_contained(self, failing_store: AsyncMock) -> None:
        cache = QueryCache(failing_store)
        task = cache.set_in_background("q", "r")
        await cache.drain()
        assert task.result() is False

    async def test_drain_without_pending_writes(self, query_cache: QueryCache) -> None:
        await query_cache.drain()


class TestCachedQueryDecorator:
    async def test_second_call_served_from_cache(self, query_cache: QueryCache) -> None:
        calls: list[tuple[str, str]] = []

        @cached_query(query_cache)
        async def lookup(query_text: str, scope: str = "") -> dict:
            calls.append((query_text, scope))
            return {"rows": [len(calls)]}

        first = await lookup("balances by branch", "userA")
        second = await lookup(" balances by branch ", "userA")
        assert first == second == {"rows": [1]}
        assert calls == [("balances by branch", "userA")]

        await lookup("balances by branch", "userB")
        assert len(calls) == 2

    async def test_none_result_not_cached(self, query_cache: QueryCache) -> None:
        calls = 0

        @cached_query(query_cache)
        async def lookup(query_text: str, scope: str = "") -> None:
            nonlocal calls
            calls += 1
            return None

        await lookup("q")
        await lookup("q")
        assert calls == 2
