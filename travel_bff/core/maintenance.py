"""Scheduled cache housekeeping.

:class:`MaintenanceScheduler` owns one cancellable asyncio task that asks the
store to evict expired and low-priority entries: once immediately when
started, then every ``interval_seconds`` (six hours by default). Cleanup is
best effort. A failed pass is logged and the loop simply waits for the next
tick.

The scheduler is created once by the runtime container and started/stopped
from the application lifespan.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from travel_bff.core.models import CleanupReport
from travel_bff.core.store import AbstractCacheStore
from travel_bff.utils.cache import LRUTTLCache
from travel_bff.utils.metrics import CLEANUP_DELETED, CLEANUP_RUNS

__all__ = ["DEFAULT_CLEANUP_INTERVAL", "MaintenanceScheduler", "SchedulerState"]

log = logging.getLogger(__name__)

DEFAULT_CLEANUP_INTERVAL = 6 * 60 * 60  # seconds


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class MaintenanceScheduler:
    """Periodic cleanup driver with an explicit ``start`` / ``stop`` lifecycle.

    Parameters
    ----------
    store
        Adapter whose ``cleanup()`` is invoked on every pass.
    interval_seconds
        Delay between the end of one pass and the start of the next.
    run_on_start
        Run a first pass as soon as the task starts instead of waiting one
        interval.
    local_cache
        Optional process-local cache whose expired entries are purged on
        every pass.
    """

    def __init__(
        self,
        store: AbstractCacheStore,
        *,
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL,
        run_on_start: bool = True,
        local_cache: Optional[LRUTTLCache] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._store = store
        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start
        self._local_cache = local_cache
        self._task: Optional[asyncio.Task] = None
        self.runs: int = 0
        self.failures: int = 0
        self.last_report: Optional[CleanupReport] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        if self._task is not None and not self._task.done():
            return SchedulerState.RUNNING
        return SchedulerState.IDLE

    def start(self) -> bool:
        """Schedule the cleanup loop on the running event loop.

        Returns ``False`` (and does nothing) if the loop is already running.
        Must be called from within a running event loop.
        """
        if self.state is SchedulerState.RUNNING:
            log.debug("Cache maintenance already running")
            return False
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._periodic_cleanup(), name="cache-maintenance")
        log.info("Cache maintenance scheduled every %ss", self.interval_seconds)
        return True

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish; no-op when idle."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        log.info("Cache maintenance stopped")

    # ------------------------------------------------------------------
    # Work
    # ------------------------------------------------------------------

    async def run_once(self) -> CleanupReport:
        """Run one cleanup pass now; store errors become a failed report."""
        if self._local_cache is not None:
            purged = self._local_cache.purge_expired()
            if purged:
                log.debug("Purged %d expired local cache entries", purged)

        try:
            report = await self._store.cleanup()
        except Exception as exc:  # noqa: BLE001 – a bad pass must not kill the loop
            log.exception("Cache cleanup raised: %s", exc)
            report = CleanupReport.failed()

        self.runs += 1
        self.last_report = report
        if report.ok:
            CLEANUP_RUNS.labels(result="ok").inc()
            CLEANUP_DELETED.inc(max(report.total_deleted, 0))
            log.info("Cache cleanup completed: %s", report.to_dict())
        else:
            self.failures += 1
            CLEANUP_RUNS.labels(result="failed").inc()
            log.error("Cache cleanup failed: %s", report.to_dict())
        return report

    async def _guarded_pass(self) -> None:
        try:
            await self.run_once()
        except Exception:  # noqa: BLE001
            self.failures += 1
            CLEANUP_RUNS.labels(result="failed").inc()
            log.exception("Cache maintenance pass crashed")

    async def _periodic_cleanup(self) -> None:
        try:
            if self.run_on_start:
                await self._guarded_pass()
            while True:
                await asyncio.sleep(self.interval_seconds)
                await self._guarded_pass()
        except asyncio.CancelledError:
            return

    def describe(self) -> dict:
        return {
            "state": self.state.value,
            "interval_seconds": self.interval_seconds,
            "runs": self.runs,
            "failures": self.failures,
            "last_report": self.last_report.to_dict() if self.last_report else None,
        }
