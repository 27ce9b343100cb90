# container.py: process-wide runtime for the travel BFF cache subsystem
"""Central place that wires the long-lived cache components.

A *full‑blown* DI framework would be overkill here. Instead
:func:`build_runtime` creates one :class:`CacheRuntime` at startup: the
shared Supabase client, the store adapter, the strategy resolver, the smart
cache facade, the search cache and the maintenance scheduler. The FastAPI
lifespan (and the CLI) own that object, start it, and close it on shutdown;
route handlers receive it through :mod:`travel_bff.api.dependencies`.
Nothing here is a module-level global, so tests build as many isolated
runtimes as they like.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from travel_bff.config.settings import Settings
from travel_bff.core.access import AccessValidator
from travel_bff.core.facade import SmartCache
from travel_bff.core.maintenance import MaintenanceScheduler
from travel_bff.core.search_cache import SearchCache
from travel_bff.core.store import AbstractCacheStore, InMemoryCacheStore, SupabaseCacheStore
from travel_bff.core.strategy import StrategyResolver
from travel_bff.core.supabase import SupabaseClient
from travel_bff.utils.cache import LRUTTLCache

__all__ = [
    "CacheRuntime",
    "build_runtime",
    "create_store",
]

log = logging.getLogger(__name__)


@dataclass
class CacheRuntime:
    """Every long-lived cache component, created once per process."""

    settings: Settings
    store: AbstractCacheStore
    resolver: StrategyResolver
    smart_cache: SmartCache
    search_cache: SearchCache
    scheduler: MaintenanceScheduler
    supabase: Optional[SupabaseClient] = None

    async def start(self) -> None:
        self.scheduler.start()

    async def aclose(self) -> None:
        await self.scheduler.stop()
        await self.store.close()
        log.info("Cache runtime closed")


def create_store(settings: Settings) -> tuple[AbstractCacheStore, Optional[SupabaseClient]]:
    """Factory: the store adapter selected by ``settings.cache_backend``.

    Raises:
        ConfigurationError: Supabase backend selected without credentials.
    """
    if settings.cache_backend == "memory":
        log.warning("Using the in-memory cache backend; entries are not shared between processes")
        return InMemoryCacheStore(max_entries=settings.memory_max_entries), None

    client = SupabaseClient.from_settings(settings)
    log.info("Supabase cache store configured at %s", client.url)
    return SupabaseCacheStore(client), client


def build_runtime(settings: Settings, store: Optional[AbstractCacheStore] = None) -> CacheRuntime:
    """Wire all components; pass *store* to inject a ready-made adapter."""
    client: Optional[SupabaseClient] = None
    if store is None:
        store, client = create_store(settings)

    resolver = StrategyResolver(store, default_region=settings.default_region)
    smart_cache = SmartCache(store, resolver, AccessValidator())
    local = LRUTTLCache(
        max_size=settings.search_cache_size,
        ttl_seconds=settings.search_cache_ttl_minutes * 60,
    )
    search_cache = SearchCache(local, store, ttl_minutes=settings.search_cache_ttl_minutes)
    scheduler = MaintenanceScheduler(
        store,
        interval_seconds=settings.cleanup_interval_sec,
        run_on_start=settings.cleanup_on_start,
        local_cache=local,
    )
    return CacheRuntime(
        settings=settings,
        store=store,
        resolver=resolver,
        smart_cache=smart_cache,
        search_cache=search_cache,
        scheduler=scheduler,
        supabase=client,
    )
