# dependencies.py: FastAPI dependency helpers for the travel BFF
"""
Reusable dependency callables exposed to FastAPI routes.

The runtime lives on ``app.state.runtime`` (created by the lifespan), so
handlers never reach for module globals and tests can swap the whole runtime
via FastAPI's dependency override mechanism.

Exports:
• get_runtime       – the process-wide :class:`CacheRuntime`
• get_smart_cache   – the smart cache facade
• get_search_cache  – the two-tier search cache
• get_app_settings  – the settings the runtime was built with
"""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status

from travel_bff.api.container import CacheRuntime
from travel_bff.config.settings import Settings
from travel_bff.core.facade import SmartCache
from travel_bff.core.search_cache import SearchCache

__all__ = [
    "get_runtime",
    "get_smart_cache",
    "get_search_cache",
    "get_app_settings",
]

log = logging.getLogger(__name__)


def get_runtime(request: Request) -> CacheRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        log.error("Cache runtime requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache runtime not initialised",
        )
    return runtime


def get_smart_cache(runtime: CacheRuntime = Depends(get_runtime)) -> SmartCache:
    return runtime.smart_cache


def get_search_cache(runtime: CacheRuntime = Depends(get_runtime)) -> SearchCache:
    return runtime.search_cache


def get_app_settings(runtime: CacheRuntime = Depends(get_runtime)) -> Settings:
    return runtime.settings
