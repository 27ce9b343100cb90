"""Tests for the dict-backed cache store."""
import pytest

from travel_bff.core.models import CacheStatus, CacheType
from travel_bff.core.store import InMemoryCacheStore
from tests.conftest import MutableClock


@pytest.mark.asyncio
async def test_set_then_get_returns_independent_copy(memory_store: InMemoryCacheStore):
    value = {"lat": 41.3, "lng": 19.8, "tags": ["capital"]}
    assert await memory_store.set("geo_search:tirana", value, 60, CacheType.GEO)

    lookup = await memory_store.get("geo_search:tirana")
    assert lookup.status is CacheStatus.HIT
    assert lookup.data == value
    lookup.data["tags"].append("mutated")
    assert (await memory_store.get("geo_search:tirana")).data == value


@pytest.mark.asyncio
async def test_unknown_key_is_a_miss(memory_store: InMemoryCacheStore):
    lookup = await memory_store.get("nope")
    assert lookup.status is CacheStatus.MISS
    assert lookup.data is None


@pytest.mark.asyncio
async def test_entries_expire_after_ttl(memory_store: InMemoryCacheStore, clock: MutableClock):
    await memory_store.set("k", 1, 10, "api")
    clock.advance(minutes=9)
    assert (await memory_store.get("k")).status is CacheStatus.HIT
    clock.advance(minutes=1)
    assert (await memory_store.get("k")).status is CacheStatus.MISS


@pytest.mark.asyncio
async def test_unserialisable_value_is_rejected(memory_store: InMemoryCacheStore):
    assert await memory_store.set("k", object(), 10, "api") is False
    assert (await memory_store.get("k")).status is CacheStatus.MISS


@pytest.mark.asyncio
async def test_stats_group_by_type(memory_store: InMemoryCacheStore):
    await memory_store.set("geo:1", {"a": 1}, 60, CacheType.GEO)
    await memory_store.set("api:1", {"b": 2}, 60, "api")
    await memory_store.get("geo:1")
    await memory_store.get("geo:1")
    await memory_store.get("missing")

    stats = await memory_store.stats()
    assert stats.total_entries == 2
    assert stats.total_hits == 2
    assert stats.hit_rate == pytest.approx(200 / 3)
    assert stats.by_type["geo"].count == 1
    assert stats.by_type["geo"].hits == 2
    assert stats.by_type["api"].hits == 0
    assert stats.total_size_mb > 0


@pytest.mark.asyncio
async def test_empty_store_stats(memory_store: InMemoryCacheStore):
    stats = await memory_store.stats()
    assert stats.is_empty


@pytest.mark.asyncio
async def test_cleanup_removes_expired_entries(memory_store: InMemoryCacheStore, clock: MutableClock):
    await memory_store.set("short", 1, 5, "api")
    await memory_store.set("long", 2, 500, "api")
    clock.advance(minutes=10)

    report = await memory_store.cleanup()
    assert report.ok
    assert report.total_deleted == 1
    assert report.expired_deleted == 1
    assert report.cleaned_at == clock.now
    assert (await memory_store.get("long")).status is CacheStatus.HIT


@pytest.mark.asyncio
async def test_cleanup_evicts_least_used_over_capacity(clock: MutableClock):
    store = InMemoryCacheStore(max_entries=2, clock=clock)
    for key in ("a", "b", "c"):
        await store.set(key, key, 60, "api")
        clock.advance(seconds=1)
    await store.get("a")

    report = await store.cleanup()
    assert report.low_priority_deleted == 1
    assert (await store.get("b")).status is CacheStatus.MISS
    assert (await store.get("a")).status is CacheStatus.HIT
    assert (await store.get("c")).status is CacheStatus.HIT


@pytest.mark.asyncio
async def test_scaling_needs_near_capacity(clock: MutableClock):
    store = InMemoryCacheStore(max_entries=5, clock=clock)
    for i in range(3):
        await store.set(f"k{i}", i, 60, "api")
    assert (await store.scaling_needs()).scaling_actions == []

    await store.set("k3", 3, 60, "api")
    report = await store.scaling_needs()
    assert report.scaling_actions[0]["action"] == "increase_cache_capacity"
    assert report.raw == {"entries": 4, "capacity": 5}


@pytest.mark.asyncio
async def test_configured_strategies_are_returned(clock: MutableClock):
    row = {"ttl_minutes": 15, "priority": 4, "strategy_name": "geo_fast"}
    store = InMemoryCacheStore(strategies={"geolocation_search": [row]}, clock=clock)
    assert await store.fetch_adaptive_strategy("geolocation_search", "eu", clock.now) == [row]
    assert await store.fetch_adaptive_strategy("other", "eu", clock.now) is None


@pytest.mark.asyncio
async def test_maintain_indexes_reports_entry_count(memory_store: InMemoryCacheStore):
    await memory_store.set("k", 1, 60, "api")
    result = await memory_store.maintain_indexes()
    assert result.success is True
    assert result.data == {"backend": "memory", "entries": 1}
