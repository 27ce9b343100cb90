"""Configuration module for the travel BFF."""

from __future__ import annotations

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
]


# Lazy imports to avoid heavy dependencies during package import
def __getattr__(name: str):
    if name in __all__:
        from travel_bff.config import settings

        return getattr(settings, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
