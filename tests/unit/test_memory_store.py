"""Tests for InMemoryQueryStore (per-entry TTL, namespace isolation)."""

import asyncio

from querymemo.infrastructure.cache.memory_store import InMemoryQueryStore


async def test_set_then_get() -> None:
    store = InMemoryQueryStore()
    await store.set("k", {"rows": [1]}, ttl=60)
    assert await store.get("k") == {"rows": [1]}


async def test_missing_key_returns_none() -> None:
    assert await InMemoryQueryStore().get("nope") is None


async def test_entry_expires_after_ttl() -> None:
    store = InMemoryQueryStore()
    await store.set("k", "v", ttl=0.05)
    await asyncio.sleep(0.1)
    assert await store.get("k") is None
    assert len(store) == 0


async def test_ttl_is_per_entry() -> None:
    store = InMemoryQueryStore()
    await store.set("short", "v", ttl=0.05)
    await store.set("long", "v", ttl=60)
    await asyncio.sleep(0.1)
    assert await store.get("short") is None
    assert await store.get("long") == "v"


async def test_overwrite_last_writer_wins() -> None:
    store = InMemoryQueryStore()
    await store.set("k", "first", ttl=60)
    await store.set("k", "second", ttl=60)
    assert await store.get("k") == "second"


async def test_clear_only_affects_own_namespace() -> None:
    results = InMemoryQueryStore("query_results")
    other = InMemoryQueryStore("sessions")
    await results.set("k", 1, ttl=60)
    await other.set("k", 2, ttl=60)
    await results.clear()
    assert await results.get("k") is None
    assert await other.get("k") == 2


async def test_values_are_copied() -> None:
    """Mutating a value after set or after get does not change the stored entry."""
    store = InMemoryQueryStore()
    value = {"rows": [1, 2]}
    await store.set("k", value, ttl=60)
    value["rows"].append(3)
    fetched = await store.get("k")
    fetched["rows"].append(4)
    assert await store.get("k") == {"rows": [1, 2]}


async def test_concurrent_writers() -> None:
    store = InMemoryQueryStore()
    await asyncio.gather(*(store.set(f"k{i}", i, ttl=60) for i in range(200)))
    assert len(store) == 200
    assert await store.get("k150") == 150
