"""Cache administration routes exposed under ``/api/cache``."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travel_bff.api.dependencies import get_smart_cache
from travel_bff.api.schemas import CacheStatsResponse, CleanupResponse, ErrorResponse
from travel_bff.core.facade import SmartCache

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/cache", tags=["Cache administration"])


@router.get("/stats", response_model=CacheStatsResponse, summary="Cache statistics and scaling advice")
async def cache_stats(smart_cache: SmartCache = Depends(get_smart_cache)) -> CacheStatsResponse:
    health = await smart_cache.system_health()
    return CacheStatsResponse(stats=health.to_dict())


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Run a cache cleanup pass now",
)
async def cache_cleanup(smart_cache: SmartCache = Depends(get_smart_cache)):
    report = await smart_cache.run_maintenance()
    if not report.ok:
        body = ErrorResponse(error="Cache cleanup failed", detail=report.to_dict())
        return JSONResponse(status_code=500, content=body.model_dump())
    return CleanupResponse(result=report.to_dict())
