"""
Shared pytest fixtures for the travel BFF cache tests.

Store fakes record every call so tests can assert what the facade did (or did
not) ask of the remote store.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest

from travel_bff.config.settings import Settings
from travel_bff.core.models import (
    CacheStats,
    CleanupReport,
    IndexMaintenanceResult,
    ScalingReport,
    StoreLookup,
)
from travel_bff.core.store import AbstractCacheStore, InMemoryCacheStore


class MutableClock:
    """Callable clock that tests move forward explicitly."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class RecordingStore(AbstractCacheStore):
    """Scriptable store double.

    Every call is appended to ``calls``; behaviour is set per operation via the
    ``*_result`` attributes, and an exception instance in ``*_error`` is raised
    instead.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.data: Dict[str, Any] = {}
        self.strategy_payload: Any = None
        self.get_result: Any = None
        self.set_result: bool = True
        self.cleanup_result: CleanupReport = CleanupReport(total_deleted=2, expired_deleted=2)
        self.indexes_result = IndexMaintenanceResult(success=True, data=[{"indexes_maintained": 3}])
        self.get_error: Optional[BaseException] = None
        self.set_error: Optional[BaseException] = None
        self.strategy_error: Optional[BaseException] = None
        self.cleanup_error: Optional[BaseException] = None
        self.indexes_error: Optional[BaseException] = None
        self.cleanup_called = asyncio.Event()
        self.closed = False

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def get(self, key: str) -> StoreLookup:
        self.calls.append(("get", (key,)))
        if self.get_error is not None:
            raise self.get_error
        if self.get_result is not None:
            return self.get_result
        if key in self.data:
            return StoreLookup.hit(self.data[key])
        return StoreLookup.miss()

    async def set(self, key: str, value: Any, ttl_minutes: int, cache_type: Any) -> bool:
        self.calls.append(("set", (key, value, ttl_minutes, cache_type)))
        if self.set_error is not None:
            raise self.set_error
        if self.set_result:
            self.data[key] = value
        return self.set_result

    async def stats(self) -> CacheStats:
        self.calls.append(("stats", ()))
        return CacheStats(total_entries=len(self.data))

    async def cleanup(self) -> CleanupReport:
        self.calls.append(("cleanup", ()))
        self.cleanup_called.set()
        if self.cleanup_error is not None:
            raise self.cleanup_error
        return self.cleanup_result

    async def fetch_adaptive_strategy(self, endpoint: str, region: str, at: datetime) -> Any:
        self.calls.append(("strategy", (endpoint, region, at)))
        if self.strategy_error is not None:
            raise self.strategy_error
        return self.strategy_payload

    async def scaling_needs(self) -> ScalingReport:
        self.calls.append(("scaling", ()))
        return ScalingReport(scaling_actions=[{"action": "none"}], raw={"entries": len(self.data)})

    async def maintain_indexes(self) -> IndexMaintenanceResult:
        self.calls.append(("indexes", ()))
        if self.indexes_error is not None:
            raise self.indexes_error
        return self.indexes_result

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def memory_store(clock: MutableClock) -> InMemoryCacheStore:
    return InMemoryCacheStore(max_entries=100, clock=clock)


@pytest.fixture
def memory_settings() -> Settings:
    """Settings for an app wired to the in-memory backend."""
    return Settings(
        cache_backend="memory",
        cleanup_on_start=False,
        memory_max_entries=50,
        search_cache_size=10,
    )
