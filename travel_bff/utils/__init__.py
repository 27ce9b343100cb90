# travel_bff/utils/__init__.py
"""Utilities: local cache, error hierarchy and metrics."""

from __future__ import annotations

__all__ = [
    "LRUTTLCache",
    "TravelBFFError",
    "ValidationError",
    "ConfigurationError",
    "StoreError",
    "get_prometheus_metrics",
]


def __getattr__(name: str):
    if name == "LRUTTLCache":
        from travel_bff.utils.cache import LRUTTLCache
        return LRUTTLCache
    elif name in ("TravelBFFError", "ValidationError", "ConfigurationError", "StoreError"):
        from travel_bff.utils.exceptions import (
            ConfigurationError,
            StoreError,
            TravelBFFError,
            ValidationError,
        )
        return locals()[name]
    elif name == "get_prometheus_metrics":
        from travel_bff.utils.metrics import get_prometheus_metrics
        return get_prometheus_metrics
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
