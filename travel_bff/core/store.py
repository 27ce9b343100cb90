"""travel_bff.core.store
======================
Remote store adapters for the smart cache.

Public API (async)           Description
---------------------------  ------------------------------------------------
`get()`                      Look a key up → :class:`StoreLookup` (hit / miss)
`set()`                      Write a value with TTL and cache type → bool
`stats()`                    Aggregate counters → :class:`CacheStats`
`cleanup()`                  Evict expired / low-priority rows → :class:`CleanupReport`
`fetch_adaptive_strategy()`  Raw strategy rows for the strategy resolver
`scaling_needs()`            Capacity advice → :class:`ScalingReport`
`maintain_indexes()`         Refresh store-side indexes → :class:`IndexMaintenanceResult`

Adapters never raise: failures are logged and turned into a miss, ``False``,
zeroed stats or a failure marker. ``fetch_adaptive_strategy`` is the exception;
it passes errors through and the resolver absorbs them.

`InMemoryCacheStore` implements the same interface on a dict, for local
development and fast unit tests.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import orjson

from travel_bff.core.models import (
    CacheStats,
    CacheType,
    CleanupReport,
    IndexMaintenanceResult,
    ScalingReport,
    StoreLookup,
    TypeStats,
)
from travel_bff.core.supabase import SupabaseClient
from travel_bff.utils.exceptions import StoreError
from travel_bff.utils.metrics import STORE_ERRORS, measure_store_call

logger = logging.getLogger(__name__)

__all__ = [
    "AbstractCacheStore",
    "InMemoryCacheStore",
    "SupabaseCacheStore",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _type_name(cache_type: CacheType | str) -> str:
    return cache_type.value if isinstance(cache_type, CacheType) else str(cache_type)


###############################################################################
# Abstract interface – handy for unit‑test fakes
###############################################################################

class AbstractCacheStore(ABC):
    """Behaviour contract for cache store adapters."""

    @abstractmethod
    async def get(self, key: str) -> StoreLookup:
        """Look *key* up; any failure is reported as a miss."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_minutes: int, cache_type: CacheType | str) -> bool:
        """Write *value*; return whether the store accepted it."""

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Aggregate counters, zeroed on failure."""

    @abstractmethod
    async def cleanup(self) -> CleanupReport:
        """Evict expired and low-priority entries; failed report on error."""

    @abstractmethod
    async def fetch_adaptive_strategy(self, endpoint: str, region: str, at: datetime) -> Any:
        """Raw strategy row(s) for *endpoint*; may raise."""

    @abstractmethod
    async def scaling_needs(self) -> ScalingReport:
        """Capacity advice, empty on failure."""

    @abstractmethod
    async def maintain_indexes(self) -> IndexMaintenanceResult:
        """Refresh the store's performance indexes; failure marker on error."""

    async def close(self) -> None:
        """Release resources held by the adapter (idempotent)."""


###############################################################################
# In‑memory store – local development and unit tests
###############################################################################

@dataclass(slots=True)
class _Entry:
    payload: bytes
    cache_type: str
    created_at: datetime
    expires_at: datetime
    hit_count: int = 0


class InMemoryCacheStore(AbstractCacheStore):
    """Dict-backed store that mimics the remote cache functions.

    Values are serialised with *orjson* on write, so what comes back is an
    independent copy with the same JSON semantics as the remote store.
    """

    # Above this fraction of ``max_entries`` scaling_needs() suggests growth.
    SCALE_UP_THRESHOLD = 0.8

    def __init__(
        self,
        *,
        max_entries: int = 10_000,
        strategies: Mapping[str, Any] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.max_entries = max_entries
        self._strategies = dict(strategies or {})
        self._clock = clock
        self._db: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._misses = 0

    async def get(self, key: str) -> StoreLookup:
        async with self._lock:
            entry = self._db.get(key)
            if entry is None or entry.expires_at <= self._clock():
                self._misses += 1
                return StoreLookup.miss()
            entry.hit_count += 1
            return StoreLookup.hit(orjson.loads(entry.payload))

    async def set(self, key: str, value: Any, ttl_minutes: int, cache_type: CacheType | str) -> bool:
        try:
            payload = orjson.dumps(value)
        except TypeError as exc:
            logger.warning("In-memory cache rejected value for %s: %s", key, exc)
            return False
        now = self._clock()
        async with self._lock:
            self._db[key] = _Entry(
                payload=payload,
                cache_type=_type_name(cache_type),
                created_at=now,
                expires_at=now + timedelta(minutes=ttl_minutes),
            )
        return True

    async def stats(self) -> CacheStats:
        async with self._lock:
            entries = list(self._db.values())
            misses = self._misses
        total_hits = sum(e.hit_count for e in entries)
        grouped: dict[str, list[_Entry]] = {}
        for entry in entries:
            grouped.setdefault(entry.cache_type, []).append(entry)
        by_type = {
            name: TypeStats(
                count=len(items),
                hits=sum(e.hit_count for e in items),
                avg_hits=sum(e.hit_count for e in items) / len(items),
            )
            for name, items in grouped.items()
        }
        lookups = total_hits + misses
        return CacheStats(
            total_entries=len(entries),
            total_hits=total_hits,
            total_size_mb=sum(len(e.payload) for e in entries) / (1024 * 1024),
            hit_rate=(total_hits / lookups * 100) if lookups else 0.0,
            by_type=by_type,
        )

    async def cleanup(self) -> CleanupReport:
        now = self._clock()
        async with self._lock:
            expired = [k for k, e in self._db.items() if e.expires_at <= now]
            for key in expired:
                del self._db[key]

            overflow = len(self._db) - self.max_entries
            evicted: list[str] = []
            if overflow > 0:
                # least hit first, oldest first among equals
                ranked = sorted(self._db.items(), key=lambda kv: (kv[1].hit_count, kv[1].created_at))
                evicted = [k for k, _ in ranked[:overflow]]
                for key in evicted:
                    del self._db[key]

        return CleanupReport(
            total_deleted=len(expired) + len(evicted),
            expired_deleted=len(expired),
            low_priority_deleted=len(evicted),
            cleaned_at=now,
        )

    async def fetch_adaptive_strategy(self, endpoint: str, region: str, at: datetime) -> Any:
        return self._strategies.get(endpoint)

    async def scaling_needs(self) -> ScalingReport:
        async with self._lock:
            size = len(self._db)
        actions: list[dict[str, Any]] = []
        if size >= self.max_entries * self.SCALE_UP_THRESHOLD:
            actions.append({"action": "increase_cache_capacity", "entries": size, "capacity": self.max_entries})
        return ScalingReport(
            scaling_actions=actions,
            raw={"entries": size, "capacity": self.max_entries},
        )

    async def maintain_indexes(self) -> IndexMaintenanceResult:
        async with self._lock:
            size = len(self._db)
        return IndexMaintenanceResult(success=True, data={"backend": "memory", "entries": size})

    async def close(self) -> None:
        # nothing to close
        pass


###############################################################################
# Supabase implementation (PostgREST RPC)
###############################################################################

class SupabaseCacheStore(AbstractCacheStore):
    """Adapter over the cache SQL functions exposed by Supabase."""

    FN_CACHE_MANAGER = "cache_manager"
    FN_STATS = "get_cache_stats"
    FN_CLEANUP = "smart_cache_cleanup"
    FN_STRATEGY = "get_adaptive_cache_strategy"
    FN_SCALING = "check_scaling_needs"
    FN_INDEXES = "maintain_performance_indexes"

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    @staticmethod
    def _record_failure(operation: str, exc: StoreError) -> None:
        STORE_ERRORS.labels(operation=operation, type=exc.code).inc()
        logger.warning("Cache store %s failed: %s", operation, exc.message, extra={"error": exc.to_dict()})

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    @measure_store_call("get")
    async def get(self, key: str) -> StoreLookup:
        try:
            payload = await self._client.rpc(
                self.FN_CACHE_MANAGER, {"operation": "get", "key_text": key}
            )
        except StoreError as exc:
            self._record_failure("get", exc)
            return StoreLookup.miss()
        return StoreLookup.from_payload(payload)

    @measure_store_call("set")
    async def set(self, key: str, value: Any, ttl_minutes: int, cache_type: CacheType | str) -> bool:
        params = {
            "operation": "set",
            "key_text": key,
            "data_json": value,
            "cache_type": _type_name(cache_type),
            "ttl_minutes": ttl_minutes,
        }
        try:
            payload = await self._client.rpc(self.FN_CACHE_MANAGER, params)
        except StoreError as exc:
            self._record_failure("set", exc)
            return False
        if isinstance(payload, Mapping) and payload.get("error"):
            logger.warning("Cache store refused write for %s: %s", key, payload["error"])
            return False
        return True

    @measure_store_call("stats")
    async def stats(self) -> CacheStats:
        try:
            payload = await self._client.rpc(self.FN_STATS)
        except StoreError as exc:
            self._record_failure("stats", exc)
            return CacheStats.empty()
        return CacheStats.from_payload(payload)

    @measure_store_call("cleanup")
    async def cleanup(self) -> CleanupReport:
        try:
            payload = await self._client.rpc(self.FN_CLEANUP)
        except StoreError as exc:
            self._record_failure("cleanup", exc)
            return CleanupReport.failed()
        report = CleanupReport.from_payload(payload)
        if not report.ok:
            logger.warning("Cache cleanup returned an unusable payload: %r", payload)
        return report

    # ------------------------------------------------------------------
    # Policy inputs
    # ------------------------------------------------------------------

    @measure_store_call("strategy")
    async def fetch_adaptive_strategy(self, endpoint: str, region: str, at: datetime) -> Any:
        return await self._client.rpc(
            self.FN_STRATEGY,
            {
                "endpoint_path": endpoint,
                "user_region": region,
                "request_time": at.isoformat(),
            },
        )

    @measure_store_call("scaling")
    async def scaling_needs(self) -> ScalingReport:
        try:
            payload = await self._client.rpc(self.FN_SCALING)
        except StoreError as exc:
            self._record_failure("scaling", exc)
            return ScalingReport()
        return ScalingReport.from_payload(payload)

    @measure_store_call("indexes")
    async def maintain_indexes(self) -> IndexMaintenanceResult:
        try:
            payload = await self._client.rpc(self.FN_INDEXES)
        except StoreError as exc:
            self._record_failure("indexes", exc)
            return IndexMaintenanceResult.failed()
        if isinstance(payload, Mapping) and payload.get("error"):
            logger.warning("Index maintenance refused: %s", payload["error"])
            return IndexMaintenanceResult.failed()
        return IndexMaintenanceResult(success=True, data=payload)

    async def close(self) -> None:
        await self._client.aclose()
