# travel_bff/utils/cache.py
"""
In-process LRU cache with TTL expiry, used as the local tier of the search cache.
"""
from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Tuple


class LRUTTLCache:
    """In-memory cache with per-entry TTL (time-to-live) and LRU eviction.

    Not shared across processes; each worker holds its own copy.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 6 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        :param max_size: maximum number of items before the least recently used one is evicted.
        :param ttl_seconds: default lifetime of an entry in seconds.
        :param clock: monotonic time source (overridable in tests).
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # key -> (value, expires_at)
        self._data: OrderedDict[str, Tuple[Any, float]] = OrderedDict()
        self._hits: int = 0
        self._misses: int = 0

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        entry = self._data.get(key)
        return entry is not None and entry[1] > self._clock()

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value, or None when absent or expired.

        Expired entries are dropped on access. A hit moves the key to the
        most-recently-used end.
        """
        entry = self._data.get(key)
        if entry is None:
            self._misses += 1
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            self._data.pop(key, None)
            self._misses += 1
            return None
        self._hits += 1
        self._data.move_to_end(key)
        return value

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store *value* under *key*, replacing any previous entry.

        If adding the item exceeds max_size, evict the least recently used item.
        """
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._data.pop(key, None)
        self._data[key] = (value, self._clock() + ttl)
        while len(self._data) > self.max_size:
            self._data.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._data.items() if exp <= now]
        for key in expired:
            del self._data[key]
        return len(expired)

    def clear(self) -> None:
        """Clear all items and reset hit/miss counters."""
        self._data.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> Dict[str, float]:
        """
        :return: current size, max size, hits, misses and hit rate.
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total) if total > 0 else 0.0
        return {
            "size": len(self._data),
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": hit_rate,
        }
