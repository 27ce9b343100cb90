"""Tests for the Supabase RPC client and store adapter over a mock transport."""
import json
from datetime import datetime, timezone

import httpx
import pytest

from travel_bff.core.models import CacheStatus, CacheType
from travel_bff.core.store import SupabaseCacheStore
from travel_bff.core.supabase import SupabaseClient
from travel_bff.utils.exceptions import ConfigurationError, RequestEncodingError, StoreError

SUPABASE_URL = "https://project.supabase.co"


def make_client(handler) -> SupabaseClient:
    return SupabaseClient(SUPABASE_URL, "service-key", transport=httpx.MockTransport(handler))


def make_store(handler) -> SupabaseCacheStore:
    return SupabaseCacheStore(make_client(handler))


def rpc_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def test_missing_credentials_raise_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        SupabaseClient("", "key")
    assert excinfo.value.context["missing"] == ["supabase_url"]


@pytest.mark.asyncio
async def test_get_hit_sends_cache_manager_call():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = rpc_body(request)
        seen["apikey"] = request.headers["apikey"]
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json=[{"status": "hit", "data": {"lat": 41.3, "lng": 19.8}}])

    store = make_store(handler)
    lookup = await store.get("geo_search:tirana")
    await store.close()

    assert lookup.status is CacheStatus.HIT
    assert lookup.data == {"lat": 41.3, "lng": 19.8}
    assert seen == {
        "path": "/rest/v1/rpc/cache_manager",
        "body": {"operation": "get", "key_text": "geo_search:tirana"},
        "apikey": "service-key",
        "auth": "Bearer service-key",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"status": "miss"}, [], None, [{"status": "stale"}], "garbage"],
)
async def test_get_non_hit_shapes_are_misses(payload):
    store = make_store(lambda request: httpx.Response(200, json=payload))
    lookup = await store.get("k")
    await store.close()
    assert lookup.status is CacheStatus.MISS
    assert lookup.data is None


@pytest.mark.asyncio
async def test_get_transport_failures_degrade_to_miss():
    def refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    for handler in (
        refused,
        slow,
        lambda request: httpx.Response(500, text="internal"),
        lambda request: httpx.Response(200, content=b"{not json"),
    ):
        store = make_store(handler)
        lookup = await store.get("k")
        await store.close()
        assert lookup.status is CacheStatus.MISS


@pytest.mark.asyncio
async def test_set_sends_ttl_and_type():
    seen = {}

    def handler(request):
        seen.update(rpc_body(request))
        return httpx.Response(200, json={"success": True})

    store = make_store(handler)
    ok = await store.set("geo_search:tirana", {"lat": 41.3}, 120, CacheType.GEO)
    await store.close()

    assert ok is True
    assert seen == {
        "operation": "set",
        "key_text": "geo_search:tirana",
        "data_json": {"lat": 41.3},
        "cache_type": "geo",
        "ttl_minutes": 120,
    }


@pytest.mark.asyncio
async def test_set_failures_return_false():
    for handler in (
        lambda request: httpx.Response(200, json={"error": "quota exceeded"}),
        lambda request: httpx.Response(503, text="unavailable"),
    ):
        store = make_store(handler)
        assert await store.set("k", 1, 10, "api") is False
        await store.close()


@pytest.mark.asyncio
async def test_set_encodes_datetimes_as_iso_strings():
    seen = {}

    def handler(request):
        seen.update(rpc_body(request))
        return httpx.Response(200, json={"success": True})

    store = make_store(handler)
    departure = datetime(2025, 1, 1, tzinfo=timezone.utc)
    ok = await store.set("flights_search:tia", {"departure": departure}, 30, CacheType.API)
    await store.close()

    assert ok is True
    assert seen["data_json"] == {"departure": "2025-01-01T00:00:00+00:00"}


@pytest.mark.asyncio
async def test_set_unserialisable_value_returns_false_without_request():
    sent = []

    def handler(request):
        sent.append(request)
        return httpx.Response(200, json={"success": True})

    store = make_store(handler)
    assert await store.set("k", object(), 10, "api") is False
    await store.close()
    assert sent == []


@pytest.mark.asyncio
async def test_rpc_rejects_unserialisable_params():
    client = make_client(lambda request: httpx.Response(200, json={}))
    with pytest.raises(RequestEncodingError) as excinfo:
        await client.rpc("cache_manager", {"data_json": object()})
    await client.aclose()
    assert excinfo.value.code == "request_encoding"
    assert isinstance(excinfo.value, StoreError)


@pytest.mark.asyncio
async def test_stats_are_normalised():
    payload = [{
        "total_entries": 10,
        "total_hits": 4,
        "total_size_mb": "1.5",
        "hit_rate": 40,
        "by_type": {"geo": {"count": 3, "hits": 2, "avg_hits": 0.67}},
    }]
    store = make_store(lambda request: httpx.Response(200, json=payload))
    stats = await store.stats()
    await store.close()

    assert stats.total_entries == 10
    assert stats.total_size_mb == 1.5
    assert stats.hit_rate == 40.0
    assert stats.by_type["geo"].count == 3


@pytest.mark.asyncio
async def test_stats_failure_is_zeroed():
    store = make_store(lambda request: httpx.Response(500))
    stats = await store.stats()
    await store.close()
    assert stats.is_empty


@pytest.mark.asyncio
async def test_cleanup_report_parsed():
    payload = [{
        "total_deleted": 5,
        "expired_deleted": 3,
        "low_priority_deleted": 2,
        "cleaned_at": "2025-07-01T00:00:00Z",
    }]
    store = make_store(lambda request: httpx.Response(200, json=payload))
    report = await store.cleanup()
    await store.close()

    assert report.ok
    assert (report.total_deleted, report.expired_deleted, report.low_priority_deleted) == (5, 3, 2)
    assert report.cleaned_at == datetime(2025, 7, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_cleanup_failures_give_failed_report():
    for handler in (
        lambda request: httpx.Response(500),
        lambda request: httpx.Response(200, content=b""),
        lambda request: httpx.Response(200, json=[{"unexpected": True}]),
    ):
        store = make_store(handler)
        report = await store.cleanup()
        await store.close()
        assert not report.ok
        assert report.status == "failed"


@pytest.mark.asyncio
async def test_strategy_call_parameters_and_errors_pass_through():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = rpc_body(request)
        return httpx.Response(200, json=[{"ttl_minutes": 30}])

    at = datetime(2025, 7, 1, 9, 0, tzinfo=timezone.utc)
    store = make_store(handler)
    rows = await store.fetch_adaptive_strategy("flights_search", "eu", at)
    await store.close()
    assert rows == [{"ttl_minutes": 30}]
    assert seen["path"] == "/rest/v1/rpc/get_adaptive_cache_strategy"
    assert seen["body"] == {
        "endpoint_path": "flights_search",
        "user_region": "eu",
        "request_time": at.isoformat(),
    }

    failing = make_store(lambda request: httpx.Response(500))
    with pytest.raises(StoreError):
        await failing.fetch_adaptive_strategy("flights_search", "eu", at)
    await failing.close()


@pytest.mark.asyncio
async def test_scaling_needs_report():
    payload = {"scaling_actions": [{"action": "add_replica"}, "junk"], "load": 0.9}
    store = make_store(lambda request: httpx.Response(200, json=payload))
    report = await store.scaling_needs()
    await store.close()
    assert report.scaling_actions == [{"action": "add_replica"}]
    assert report.to_dict()["load"] == 0.9


@pytest.mark.asyncio
async def test_ping():
    up = make_client(lambda request: httpx.Response(200))
    assert await up.ping() is True
    await up.aclose()

    def refused(request):
        raise httpx.ConnectError("down", request=request)

    down = make_client(refused)
    assert await down.ping() is False
    await down.aclose()


@pytest.mark.asyncio
async def test_maintain_indexes_calls_rpc():
    seen = []
    rows = [{"index_name": "idx_cache_key", "action": "reindexed"}]

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json=rows)

    store = make_store(handler)
    result = await store.maintain_indexes()
    await store.close()

    assert seen == ["/rest/v1/rpc/maintain_performance_indexes"]
    assert result.success is True
    assert result.data == rows


@pytest.mark.asyncio
async def test_maintain_indexes_failures_give_failed_result():
    def refused(request):
        raise httpx.ConnectError("down", request=request)

    for handler in (
        refused,
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(200, json={"error": "permission denied"}),
    ):
        store = make_store(handler)
        result = await store.maintain_indexes()
        await store.close()
        assert result.success is False
