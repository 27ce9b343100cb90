"""
Health-check and monitoring endpoints.
"""

import logging
import platform
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import Response

from travel_bff import __version__
from travel_bff.api.container import CacheRuntime
from travel_bff.api.dependencies import get_app_settings, get_runtime
from travel_bff.api.schemas import HealthResponse
from travel_bff.config.settings import Settings
from travel_bff.core.maintenance import SchedulerState
from travel_bff.utils.metrics import get_metrics_content_type, get_prometheus_metrics, uptime_seconds

log = logging.getLogger(__name__)
router = APIRouter(tags=["Health & Monitoring"])


async def _store_reachable(runtime: CacheRuntime) -> bool:
    if runtime.supabase is None:
        return True
    return await runtime.supabase.ping()


# ───────────────────────────  root  ───────────────────────────
@router.get("/", summary="Service info")
async def root(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    return {
        "service": settings.service_name,
        "version": __version__,
        "status": "running",
        "documentation": "/docs",
        "health": "/health",
        "metrics": "/metrics",
        "api_version": "v1",
    }


# ───────────────────────  health / live / ready  ───────────────────────
@router.get("/health", response_model=HealthResponse, summary="Full health check")
async def health_check(runtime: CacheRuntime = Depends(get_runtime)) -> HealthResponse:
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        checks = {
            "store_reachable": await _store_reachable(runtime),
            "maintenance_running": runtime.scheduler.state is SchedulerState.RUNNING,
        }
        performance = await runtime.smart_cache.performance_stats()
        return HealthResponse(
            status="healthy" if all(checks.values()) else "degraded",
            timestamp=timestamp,
            uptime_seconds=int(uptime_seconds()),
            version=__version__,
            checks=checks,
            cache={
                "backend": runtime.settings.cache_backend,
                "total_entries": performance.total_entries,
                "hit_rate": performance.hit_rate,
                "search_cache": runtime.search_cache.stats(),
            },
        )
    except Exception as e:
        log.error("Health check failed: %s", e, exc_info=True)
        return HealthResponse(
            status="unhealthy",
            timestamp=timestamp,
            uptime_seconds=int(uptime_seconds()),
            version=__version__,
            checks={"health_check_error": False},
            cache={"error": str(e)},
        )


@router.get("/health/live", summary="Liveness probe")
async def liveness_probe() -> Dict[str, str]:
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready", summary="Readiness probe")
async def readiness_probe(runtime: CacheRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    if await _store_reachable(runtime):
        return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
    raise HTTPException(status_code=503, detail="Service not ready: cache store unreachable")


# ───────────────────────────  metrics  ───────────────────────────
@router.get("/metrics", summary="Prometheus metrics")
async def metrics(settings: Settings = Depends(get_app_settings)) -> Response:
    if not settings.enable_metrics:
        raise HTTPException(status_code=404, detail="Metrics disabled")

    return Response(
        content=get_prometheus_metrics(),
        media_type=get_metrics_content_type(),
    )


# ───────────────────────────  version  ───────────────────────────
@router.get("/version", summary="Version info")
async def get_version() -> Dict[str, Any]:
    return {
        "version": __version__,
        "api_version": "v1",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "platform": platform.platform(),
    }
