"""Travel BFF: Prometheus metrics for the cache subsystem."""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable, Coroutine

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

log = logging.getLogger(__name__)


# ────────── Cache collectors ──────────
CACHE_LOOKUPS = Counter(
    "bff_cache_lookups_total", "Smart cache reads by outcome", ["status", "cache_type"]
)
CACHE_WRITES = Counter(
    "bff_cache_writes_total", "Smart cache writes by outcome", ["result", "cache_type"]
)
STRATEGY_FALLBACKS = Counter(
    "bff_cache_strategy_fallbacks_total", "Strategy lookups answered with the default", ["reason"]
)
CLEANUP_RUNS = Counter("bff_cache_cleanup_runs_total", "Cache cleanup passes", ["result"])
CLEANUP_DELETED = Counter("bff_cache_cleanup_deleted_total", "Entries removed by cleanup")
STORE_ERRORS = Counter("bff_store_errors_total", "Remote store failures", ["operation", "type"])
LAT_STORE_CALL = Histogram(
    "bff_store_call_latency_seconds", "Remote store call latency", ["operation"]
)

# ────────── Process gauges ──────────
PROCESS_UPTIME = Gauge("bff_process_uptime_seconds", "Process uptime")

_START = time.monotonic()
PROCESS_UPTIME.set_function(lambda: time.monotonic() - _START)


# ────────── Timing decorator ──────────
def measure_store_call(operation: str) -> Callable:
    """Time an async store call under ``LAT_STORE_CALL{operation=...}``."""

    metric = LAT_STORE_CALL.labels(operation=operation)

    def decorator(fn: Callable[..., Coroutine]) -> Callable[..., Coroutine]:
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            with metric.time():
                return await fn(*args, **kwargs)

        return wrapper

    return decorator


# ────────── Helpers ──────────
def uptime_seconds() -> float:
    return time.monotonic() - _START


def get_prometheus_metrics() -> str:
    """Return metrics text for `/metrics` endpoint."""
    return generate_latest().decode()


def get_metrics_content_type() -> str:
    """Return content-type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
