"""Endpoint → cache type mapping."""
from __future__ import annotations

from typing import Tuple

from travel_bff.core.models import CacheType

__all__ = ["CLASSIFICATION_RULES", "classify_endpoint"]

# Checked in order; the first substring contained in the endpoint wins.
CLASSIFICATION_RULES: Tuple[Tuple[str, CacheType], ...] = (
    ("geolocation", CacheType.GEO),
    ("affiliate", CacheType.AFFILIATE),
    ("maps", CacheType.MAP),
)


def classify_endpoint(endpoint: str) -> CacheType:
    """Return the cache type for *endpoint* (case-sensitive, default ``api``)."""
    for needle, cache_type in CLASSIFICATION_RULES:
        if needle in endpoint:
            return cache_type
    return CacheType.API
