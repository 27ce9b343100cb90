import pytest

from travel_bff.core.models import CacheType
from travel_bff.core.search_cache import SearchCache
from travel_bff.utils.cache import LRUTTLCache
from travel_bff.utils.exceptions import StoreUnavailableError
from tests.conftest import RecordingStore


@pytest.mark.asyncio
async def test_local_only_cache():
    cache = SearchCache(LRUTTLCache(max_size=10))
    assert await cache.get("q") is None
    assert await cache.set("q", ["Tirana"]) is True
    assert await cache.get("q") == ["Tirana"]


@pytest.mark.asyncio
async def test_write_goes_to_both_tiers(recording_store: RecordingStore):
    cache = SearchCache(LRUTTLCache(max_size=10), recording_store, ttl_minutes=360)
    assert await cache.set("search:tirana", {"hits": 3})

    name, (key, value, ttl, cache_type) = recording_store.calls[-1]
    assert (name, key, ttl, cache_type) == ("set", "search:tirana", 360, CacheType.SEARCH)
    assert await cache.get("search:tirana") == {"hits": 3}
    assert recording_store.count("get") == 0


@pytest.mark.asyncio
async def test_remote_hit_backfills_local(recording_store: RecordingStore):
    recording_store.data["search:durres"] = ["Durrës"]
    local = LRUTTLCache(max_size=10)
    cache = SearchCache(local, recording_store)

    assert await cache.get("search:durres") == ["Durrës"]
    assert "search:durres" in local
    assert await cache.get("search:durres") == ["Durrës"]
    assert recording_store.count("get") == 1


@pytest.mark.asyncio
async def test_remote_failures_degrade(recording_store: RecordingStore):
    recording_store.get_error = StoreUnavailableError("down")
    recording_store.set_error = StoreUnavailableError("down")
    local = LRUTTLCache(max_size=10)
    cache = SearchCache(local, recording_store)

    assert await cache.get("q") is None
    assert await cache.set("q", 1) is False
    assert local.get("q") == 1


def test_purge_and_clear_local():
    now = [0.0]
    local = LRUTTLCache(max_size=10, ttl_seconds=5, clock=lambda: now[0])
    cache = SearchCache(local)
    local.put("a", 1)
    now[0] = 10.0
    assert cache.purge_expired() == 1
    local.put("b", 2)
    cache.clear_local()
    assert len(local) == 0
    assert cache.stats()["size"] == 0
