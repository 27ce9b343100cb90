"""travel_bff.core.models
=======================
Value types shared by the cache components, plus normalisation of the raw
payloads returned by the remote store.

Store RPCs answer with an object, a one-element list, or ``null`` depending
on how the SQL function was declared. Everything in this module converts
those shapes into one canonical dataclass so that downstream code never
inspects raw JSON.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

__all__ = [
    "CacheType",
    "CacheStatus",
    "CacheStrategy",
    "DEFAULT_STRATEGY",
    "StoreLookup",
    "CacheReadResult",
    "CacheWriteResult",
    "TypeStats",
    "CacheStats",
    "CleanupReport",
    "IndexMaintenanceResult",
    "ScalingReport",
    "SystemHealth",
    "first_row",
]


class CacheType(str, Enum):
    """Coarse category of a cache entry (stats partitioning, TTL defaults)."""

    GEO = "geo"
    AFFILIATE = "affiliate"
    MAP = "map"
    API = "api"
    FEED = "feed"
    FLIGHTS = "flights"
    SEARCH = "search"


class CacheStatus(str, Enum):
    HIT = "hit"
    MISS = "miss"
    INVALID_ACCESS = "invalid_access"
    ERROR = "error"


def first_row(payload: Any) -> Mapping[str, Any] | None:
    """Collapse an RPC payload into a single mapping.

    A list yields its first element, a mapping is returned as-is and anything
    else (``None``, scalars, empty list) yields ``None``.
    """
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if isinstance(payload, Mapping):
        return payload
    return None


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


###############################################################################
# Strategy
###############################################################################

DEFAULT_PRIORITY = 3


@dataclass(frozen=True, slots=True)
class CacheStrategy:
    """How an entry should be written: lifetime, priority and policy name."""

    ttl_minutes: int
    priority: int
    strategy_name: str
    region: str | None = None

    def __post_init__(self) -> None:
        if self.ttl_minutes <= 0:
            raise ValueError("ttl_minutes must be positive")

    @classmethod
    def from_row(cls, row: Any, *, region: str | None = None) -> "CacheStrategy | None":
        """Build a strategy from a store row, or ``None`` if the row is unusable.

        The store names the policy column either ``strategy_name`` or
        ``strategy``; both are accepted.
        """
        if not isinstance(row, Mapping):
            return None
        ttl = _as_int(row.get("ttl_minutes"), 0)
        if ttl <= 0:
            return None
        name = row.get("strategy_name") or row.get("strategy") or "adaptive"
        return cls(
            ttl_minutes=ttl,
            priority=_as_int(row.get("priority"), DEFAULT_PRIORITY),
            strategy_name=str(name),
            region=row.get("region") or region,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_STRATEGY = CacheStrategy(ttl_minutes=60, priority=DEFAULT_PRIORITY, strategy_name="default")


###############################################################################
# Read / write results
###############################################################################

@dataclass(frozen=True, slots=True)
class StoreLookup:
    """Result of a raw adapter ``get``: only ``hit`` or ``miss``."""

    status: CacheStatus
    data: Any = None

    @classmethod
    def hit(cls, data: Any) -> "StoreLookup":
        return cls(CacheStatus.HIT, data)

    @classmethod
    def miss(cls) -> "StoreLookup":
        return cls(CacheStatus.MISS, None)

    @classmethod
    def from_payload(cls, payload: Any) -> "StoreLookup":
        row = first_row(payload)
        if row is not None and row.get("status") == CacheStatus.HIT.value:
            return cls.hit(row.get("data"))
        return cls.miss()


@dataclass(frozen=True, slots=True)
class CacheReadResult:
    """Outcome of :meth:`SmartCache.smart_get`.

    Branch on :attr:`status`; :attr:`data` is only meaningful on a hit.
    """

    status: CacheStatus
    data: Any = None
    strategy: CacheStrategy | None = None

    @classmethod
    def hit(cls, data: Any, strategy: CacheStrategy) -> "CacheReadResult":
        return cls(CacheStatus.HIT, data, strategy)

    @classmethod
    def miss(cls, strategy: CacheStrategy) -> "CacheReadResult":
        return cls(CacheStatus.MISS, None, strategy)

    @classmethod
    def invalid_access(cls) -> "CacheReadResult":
        return cls(CacheStatus.INVALID_ACCESS)

    @classmethod
    def error(cls) -> "CacheReadResult":
        return cls(CacheStatus.ERROR)

    @property
    def is_hit(self) -> bool:
        return self.status is CacheStatus.HIT

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "data": self.data,
            "strategy": self.strategy.to_dict() if self.strategy else None,
        }


@dataclass(frozen=True, slots=True)
class CacheWriteResult:
    success: bool
    strategy: CacheStrategy | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "strategy": self.strategy.to_dict() if self.strategy else None,
        }


###############################################################################
# Stats / maintenance
###############################################################################

@dataclass(frozen=True, slots=True)
class TypeStats:
    count: int = 0
    hits: int = 0
    avg_hits: float = 0.0


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Aggregate counters reported by the store."""

    total_entries: int = 0
    total_hits: int = 0
    total_size_mb: float = 0.0
    hit_rate: float = 0.0
    by_type: dict[str, TypeStats] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "CacheStats":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "CacheStats":
        row = first_row(payload)
        if row is None:
            return cls.empty()
        by_type: dict[str, TypeStats] = {}
        raw_types = row.get("by_type")
        if isinstance(raw_types, Mapping):
            for name, item in raw_types.items():
                if isinstance(item, Mapping):
                    by_type[str(name)] = TypeStats(
                        count=_as_int(item.get("count")),
                        hits=_as_int(item.get("hits")),
                        avg_hits=_as_float(item.get("avg_hits")),
                    )
        return cls(
            total_entries=_as_int(row.get("total_entries")),
            total_hits=_as_int(row.get("total_hits")),
            total_size_mb=_as_float(row.get("total_size_mb")),
            hit_rate=_as_float(row.get("hit_rate")),
            by_type=by_type,
        )

    @property
    def is_empty(self) -> bool:
        return self == CacheStats.empty()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class CleanupReport:
    """Result of one store-side cleanup pass."""

    total_deleted: int = 0
    expired_deleted: int = 0
    low_priority_deleted: int = 0
    cleaned_at: datetime | None = None
    status: str = "ok"

    @classmethod
    def failed(cls) -> "CleanupReport":
        return cls(status="failed")

    @classmethod
    def from_payload(cls, payload: Any) -> "CleanupReport":
        row = first_row(payload)
        if row is None or row.get("total_deleted") is None:
            return cls.failed()
        return cls(
            total_deleted=_as_int(row.get("total_deleted")),
            expired_deleted=_as_int(row.get("expired_deleted")),
            low_priority_deleted=_as_int(row.get("low_priority_deleted")),
            cleaned_at=_parse_timestamp(row.get("cleaned_at")),
        )

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["cleaned_at"] = self.cleaned_at.isoformat() if self.cleaned_at else None
        return data


@dataclass(frozen=True, slots=True)
class IndexMaintenanceResult:
    """Outcome of a store-side index maintenance run; ``data`` is passed through."""

    success: bool
    data: Any = None

    @classmethod
    def failed(cls) -> "IndexMaintenanceResult":
        return cls(success=False)

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "data": self.data}


@dataclass(frozen=True, slots=True)
class ScalingReport:
    scaling_actions: list[dict[str, Any]] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "ScalingReport":
        row = first_row(payload)
        if row is None:
            return cls()
        actions = row.get("scaling_actions")
        if not isinstance(actions, list):
            actions = []
        return cls(
            scaling_actions=[a for a in actions if isinstance(a, Mapping)],
            raw=dict(row),
        )

    def to_dict(self) -> dict[str, Any]:
        return {**self.raw, "scaling_actions": [dict(a) for a in self.scaling_actions]}


@dataclass(frozen=True, slots=True)
class SystemHealth:
    scaling: ScalingReport
    performance: CacheStats
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "scaling": self.scaling.to_dict(),
            "performance": self.performance.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }
