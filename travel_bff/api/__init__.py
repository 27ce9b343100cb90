# travel_bff/api/__init__.py
"""HTTP surface for the travel BFF cache subsystem."""

from __future__ import annotations

__all__ = [
    "create_app",
    "CacheRuntime",
    "build_runtime",
]


def __getattr__(name: str):
    if name == "create_app":
        from travel_bff.api.app import create_app
        return create_app
    elif name in ("CacheRuntime", "build_runtime"):
        from travel_bff.api.container import CacheRuntime, build_runtime
        return locals()[name]
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
