"""travel_bff.core.facade
=======================
:class:`SmartCache`, the single get/set entry point used by route handlers.

Typical handler flow::

    key = build_cache_key("flights", origin, destination, depart_date)
    cached = await smart_cache.smart_get(key, "flights_search", region)
    if cached.is_hit:
        return cached.data
    result = await partner.search(...)
    await smart_cache.smart_set(key, result, "flights_search", region)
    return result

The facade is fail-open. A broken or unreachable store degrades to "always
miss", so the feature keeps working by computing its answer the slow way.
Nothing here raises to the caller; the only non-benign outcome that is
surfaced is ``invalid_access``, which is a policy decision rather than a
fault.

Transport errors and true misses are deliberately reported the same way
(``miss``): callers rely on miss-then-recompute as the single degradation
path.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Collection, Optional

from travel_bff.core.access import AUTHENTICATED, AccessValidator
from travel_bff.core.classifier import classify_endpoint
from travel_bff.core.models import (
    CacheReadResult,
    CacheStats,
    CacheStatus,
    CacheWriteResult,
    CleanupReport,
    IndexMaintenanceResult,
    ScalingReport,
    StoreLookup,
    SystemHealth,
)
from travel_bff.core.store import AbstractCacheStore
from travel_bff.core.strategy import StrategyResolver
from travel_bff.utils.metrics import CACHE_LOOKUPS, CACHE_WRITES

__all__ = ["SmartCache"]

log = logging.getLogger(__name__)


class SmartCache:
    """Compose strategy resolution, access validation and the store adapter."""

    # Permissions every smart_get must hold.
    READ_PERMISSIONS: Collection[str] = frozenset({AUTHENTICATED})

    def __init__(
        self,
        store: AbstractCacheStore,
        resolver: StrategyResolver,
        validator: Optional[AccessValidator] = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.validator = validator or AccessValidator()

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    async def smart_get(self, key: str, endpoint: str, region: Optional[str] = None) -> CacheReadResult:
        """Look *key* up under the strategy for *endpoint*/*region*."""
        cache_type = classify_endpoint(endpoint).value if isinstance(endpoint, str) else "unknown"
        try:
            strategy = await self.resolver.resolve(endpoint, region)
            if not self.validator.validate(key, self.READ_PERMISSIONS):
                result = CacheReadResult.invalid_access()
            else:
                try:
                    lookup = await self.store.get(key)
                except Exception as exc:  # noqa: BLE001 – adapter broke its contract; treat as miss
                    log.warning("Cache get failed for %s: %s", key, exc)
                    lookup = None
                if isinstance(lookup, StoreLookup) and lookup.status is CacheStatus.HIT:
                    result = CacheReadResult.hit(lookup.data, strategy)
                else:
                    result = CacheReadResult.miss(strategy)
        except Exception:  # noqa: BLE001 – fail open
            log.exception("smart_get failed for %s (%s)", key, endpoint)
            result = CacheReadResult.error()

        CACHE_LOOKUPS.labels(status=result.status.value, cache_type=cache_type).inc()
        return result

    async def smart_set(self, key: str, data: Any, endpoint: str, region: Optional[str] = None) -> CacheWriteResult:
        """Store *data* under *key* with the TTL chosen for *endpoint*/*region*."""
        strategy = None
        cache_type = "unknown"
        try:
            strategy = await self.resolver.resolve(endpoint, region)
            cache_type = classify_endpoint(endpoint).value
            success = bool(await self.store.set(key, data, strategy.ttl_minutes, cache_type))
        except Exception:  # noqa: BLE001 – fail open
            log.exception("smart_set failed for %s (%s)", key, endpoint)
            success = False

        if not success:
            log.warning("Cache write not accepted for %s", key)
        CACHE_WRITES.labels(result="ok" if success else "failed", cache_type=cache_type).inc()
        return CacheWriteResult(success=success, strategy=strategy)

    # ------------------------------------------------------------------
    # Operational helpers
    # ------------------------------------------------------------------

    async def performance_stats(self) -> CacheStats:
        try:
            return await self.store.stats()
        except Exception:  # noqa: BLE001
            log.exception("Cache stats failed")
            return CacheStats.empty()

    async def scaling_status(self) -> ScalingReport:
        try:
            return await self.store.scaling_needs()
        except Exception:  # noqa: BLE001
            log.exception("Scaling check failed")
            return ScalingReport()

    async def system_health(self) -> SystemHealth:
        """Scaling advice and performance counters, fetched concurrently."""
        scaling, performance = await asyncio.gather(self.scaling_status(), self.performance_stats())
        return SystemHealth(scaling=scaling, performance=performance)

    async def run_maintenance(self) -> CleanupReport:
        """Trigger a store-side cleanup now (on-demand, outside the schedule)."""
        try:
            report = await self.store.cleanup()
        except Exception:  # noqa: BLE001
            log.exception("On-demand cache cleanup failed")
            return CleanupReport.failed()
        log.info("On-demand cache cleanup finished: %s", report.to_dict())
        return report

    async def maintain_indexes(self) -> IndexMaintenanceResult:
        """Ask the store to refresh its performance indexes."""
        try:
            result = await self.store.maintain_indexes()
        except Exception:  # noqa: BLE001
            log.exception("Index maintenance failed")
            return IndexMaintenanceResult.failed()
        if result.success:
            log.info("Index maintenance finished: %s", result.data)
        return result
