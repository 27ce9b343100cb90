# travel_bff/core/__init__.py
"""Core cache logic: models, store adapters, strategies and the facade."""

from __future__ import annotations

__all__ = [
    "SmartCache",
    "StrategyResolver",
    "AbstractCacheStore",
    "InMemoryCacheStore",
    "SupabaseCacheStore",
    "MaintenanceScheduler",
    "SearchCache",
    "CacheType",
    "CacheStatus",
    "CacheStrategy",
    "build_cache_key",
    "classify_endpoint",
]


def __getattr__(name: str):
    if name == "SmartCache":
        from travel_bff.core.facade import SmartCache
        return SmartCache
    elif name == "StrategyResolver":
        from travel_bff.core.strategy import StrategyResolver
        return StrategyResolver
    elif name in ("AbstractCacheStore", "InMemoryCacheStore", "SupabaseCacheStore"):
        from travel_bff.core.store import AbstractCacheStore, InMemoryCacheStore, SupabaseCacheStore
        return locals()[name]
    elif name == "MaintenanceScheduler":
        from travel_bff.core.maintenance import MaintenanceScheduler
        return MaintenanceScheduler
    elif name == "SearchCache":
        from travel_bff.core.search_cache import SearchCache
        return SearchCache
    elif name in ("CacheType", "CacheStatus", "CacheStrategy"):
        from travel_bff.core.models import CacheStatus, CacheStrategy, CacheType
        return locals()[name]
    elif name == "build_cache_key":
        from travel_bff.core.keys import build_cache_key
        return build_cache_key
    elif name == "classify_endpoint":
        from travel_bff.core.classifier import classify_endpoint
        return classify_endpoint
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
