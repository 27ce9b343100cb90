"""System administration routes exposed under ``/api/system``."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travel_bff.api.container import CacheRuntime
from travel_bff.api.dependencies import get_runtime, get_smart_cache
from travel_bff.api.schemas import (
    CleanupResponse,
    ErrorResponse,
    IndexMaintenanceResponse,
    MaintenanceStatusResponse,
    ScalingStatusResponse,
    SystemHealthResponse,
)
from travel_bff.core.facade import SmartCache

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/system", tags=["System administration"])


@router.get("/health", response_model=SystemHealthResponse, summary="Scaling and performance snapshot")
async def system_health(smart_cache: SmartCache = Depends(get_smart_cache)) -> SystemHealthResponse:
    health = await smart_cache.system_health()
    return SystemHealthResponse(health=health.to_dict())


@router.get("/scaling-status", response_model=ScalingStatusResponse, summary="Scaling recommendations")
async def scaling_status(smart_cache: SmartCache = Depends(get_smart_cache)) -> ScalingStatusResponse:
    report = await smart_cache.scaling_status()
    return ScalingStatusResponse(status=report.to_dict())


@router.post(
    "/emergency-recovery",
    response_model=CleanupResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Force an immediate cleanup pass",
)
async def emergency_recovery(smart_cache: SmartCache = Depends(get_smart_cache)):
    log.warning("Emergency cache recovery requested")
    report = await smart_cache.run_maintenance()
    if not report.ok:
        body = ErrorResponse(error="Recovery failed", detail=report.to_dict())
        return JSONResponse(status_code=500, content=body.model_dump())
    return CleanupResponse(result=report.to_dict())


@router.post(
    "/maintain-indexes",
    response_model=IndexMaintenanceResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Refresh the store's performance indexes",
)
async def maintain_indexes(smart_cache: SmartCache = Depends(get_smart_cache)):
    result = await smart_cache.maintain_indexes()
    if not result.success:
        body = ErrorResponse(error="Maintenance failed")
        return JSONResponse(status_code=500, content=body.model_dump())
    return IndexMaintenanceResponse(data=result.data)


@router.get("/maintenance", response_model=MaintenanceStatusResponse, summary="Scheduled maintenance state")
async def maintenance_status(runtime: CacheRuntime = Depends(get_runtime)) -> MaintenanceStatusResponse:
    return MaintenanceStatusResponse(maintenance=runtime.scheduler.describe())
