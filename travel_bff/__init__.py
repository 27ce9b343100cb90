"""Travel BFF cache subsystem

Adaptive caching layer for a travel backend-for-frontend. Route handlers ask
one facade for cached data; the facade picks a TTL per endpoint and region,
checks access, and talks to a shared Supabase-backed store.

This package provides:
- The smart cache facade with adaptive TTL strategies
- Canonical cache key construction and endpoint classification
- A scheduled cleanup job for the remote store
- A FastAPI operational surface (stats, cleanup, health, metrics)
- An operator CLI
"""

from __future__ import annotations

import logging
from typing import Any

__version__ = "0.1.0"
__description__ = "Adaptive caching layer for a travel backend-for-frontend"

# Configure default logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API exports
__all__ = [
    "__version__",
    "Settings",
    "SmartCache",
    "build_cache_key",
    "create_app",
    "get_settings",
]


# Lazy imports to avoid heavy dependencies during package import
def __getattr__(name: str) -> Any:
    if name == "Settings":
        from travel_bff.config.settings import Settings
        return Settings
    elif name == "SmartCache":
        from travel_bff.core.facade import SmartCache
        return SmartCache
    elif name == "build_cache_key":
        from travel_bff.core.keys import build_cache_key
        return build_cache_key
    elif name == "create_app":
        from travel_bff.api.app import create_app
        return create_app
    elif name == "get_settings":
        from travel_bff.config.settings import get_settings
        return get_settings
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
