"""Two-tier cache for search and geolocation results.

A process-local :class:`LRUTTLCache` answers repeated queries without a
network round trip; the remote store is the shared second tier. This cache
does not resolve adaptive strategies or check access: search results are
public and always kept for a fixed period (six hours by default).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from travel_bff.core.models import CacheStatus, CacheType
from travel_bff.core.store import AbstractCacheStore
from travel_bff.utils.cache import LRUTTLCache

__all__ = ["SearchCache"]

log = logging.getLogger(__name__)


class SearchCache:
    def __init__(
        self,
        local: LRUTTLCache,
        remote: Optional[AbstractCacheStore] = None,
        *,
        ttl_minutes: int = 6 * 60,
    ) -> None:
        self.local = local
        self.remote = remote
        self.ttl_minutes = ttl_minutes

    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value or ``None``; local tier first."""
        value = self.local.get(key)
        if value is not None or self.remote is None:
            return value
        try:
            lookup = await self.remote.get(key)
        except Exception as exc:  # noqa: BLE001 – remote tier is optional
            log.warning("Search cache remote read failed for %s: %s", key, exc)
            return None
        if lookup.status is not CacheStatus.HIT:
            return None
        self.local.put(key, lookup.data)
        return lookup.data

    async def set(self, key: str, value: Any) -> bool:
        """Write both tiers; returns whether the remote tier accepted it.

        With no remote tier configured the local write alone counts as success.
        """
        self.local.put(key, value)
        if self.remote is None:
            return True
        try:
            return bool(await self.remote.set(key, value, self.ttl_minutes, CacheType.SEARCH))
        except Exception as exc:  # noqa: BLE001
            log.warning("Search cache remote write failed for %s: %s", key, exc)
            return False

    def clear_local(self) -> None:
        self.local.clear()

    def purge_expired(self) -> int:
        return self.local.purge_expired()

    def stats(self) -> Dict[str, float]:
        return self.local.get_stats()
