# schemas.py: Pydantic models for the travel BFF operational API
"""Centralised data‑contracts used by the REST API layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------
_API_VERSION: str = "v1"


# ---------------------------------------------------------------------------
# Cache administration
# ---------------------------------------------------------------------------
class CacheStatsResponse(BaseModel):
    """System health as returned by ``GET /api/cache/stats``."""

    success: bool = True
    stats: Dict[str, Any] = Field(..., description="scaling + performance + timestamp")


class CleanupResponse(BaseModel):
    success: bool = True
    result: Dict[str, Any] = Field(..., description="Cleanup report from the store")


class SystemHealthResponse(BaseModel):
    success: bool = True
    health: Dict[str, Any]


class ScalingStatusResponse(BaseModel):
    success: bool = True
    status: Dict[str, Any]


class MaintenanceStatusResponse(BaseModel):
    success: bool = True
    maintenance: Dict[str, Any]


class IndexMaintenanceResponse(BaseModel):
    success: bool = True
    data: Any = Field(None, description="Raw result of the store's index maintenance")


# ---------------------------------------------------------------------------
# Health & monitoring models (used by health routes)
# ---------------------------------------------------------------------------
class HealthResponse(BaseModel):
    """Global health report for the service."""

    status: str = Field(..., description="healthy | degraded | unhealthy")
    timestamp: str
    uptime_seconds: int = Field(..., ge=0)
    version: str
    checks: Dict[str, bool]
    cache: Dict[str, Any]


# ---------------------------------------------------------------------------
# Generic error wrapper
# ---------------------------------------------------------------------------
class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[Dict[str, Any]] = None
    api_version: str = _API_VERSION
