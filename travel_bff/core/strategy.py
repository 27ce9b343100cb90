"""Adaptive cache strategy resolution.

The store decides TTL and priority per ``(endpoint, region, time)``. Cache
policy is not safety-critical, so the resolver is permissive: whatever goes
wrong, the caller gets :data:`DEFAULT_STRATEGY` and the request proceeds.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from travel_bff.core.models import DEFAULT_STRATEGY, CacheStrategy, first_row
from travel_bff.utils.metrics import STRATEGY_FALLBACKS

__all__ = ["StrategyResolver"]

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StrategyResolver:
    """Resolve a :class:`CacheStrategy` for an endpoint and user region.

    Parameters
    ----------
    source
        Object exposing ``async fetch_adaptive_strategy(endpoint, region, at)``;
        normally the store adapter.
    default_region
        Region used when the caller passes none.
    clock
        Time source for the ``at`` argument (overridable in tests).
    """

    def __init__(
        self,
        source: Any,
        *,
        default_region: str = "eu",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self.default_region = default_region
        self._clock = clock

    async def resolve(self, endpoint: str, region: Optional[str] = None) -> CacheStrategy:
        """Return the strategy for *endpoint*; never raises."""
        region = region or self.default_region
        try:
            payload = await self._source.fetch_adaptive_strategy(endpoint, region, self._clock())
        except Exception as exc:  # noqa: BLE001 – any failure means "use the default"
            log.warning("Strategy lookup failed for %s/%s: %s", endpoint, region, exc)
            return self._fallback("error")

        row = first_row(payload)
        if row is None:
            log.debug("No adaptive strategy for %s/%s", endpoint, region)
            return self._fallback("empty")

        strategy = CacheStrategy.from_row(row, region=region)
        if strategy is None:
            log.warning("Unusable strategy row for %s/%s: %r", endpoint, region, row)
            return self._fallback("malformed")
        return strategy

    @staticmethod
    def _fallback(reason: str) -> CacheStrategy:
        STRATEGY_FALLBACKS.labels(reason=reason).inc()
        return DEFAULT_STRATEGY
