"""travel_bff.api.app
====================

FastAPI application factory for the **travel BFF** cache subsystem.

Key points
----------
* Lifespan‑managed :class:`~travel_bff.api.container.CacheRuntime`
  (no hidden globals → better test isolation).
* The maintenance scheduler starts with the app and is cancelled on shutdown.
* Modular routers with Swagger tags.

Run with ``uvicorn travel_bff.api.app:create_app --factory`` or
``travel-bff serve``.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_bff import __version__
from travel_bff.api.container import build_runtime
from travel_bff.api.routes import cache_admin, health, system
from travel_bff.api.schemas import ErrorResponse
from travel_bff.config.settings import Settings, configure_logging, get_settings
from travel_bff.core.store import AbstractCacheStore
from travel_bff.utils.exceptions import TravelBFFError, log_exception

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[AbstractCacheStore] = None) -> FastAPI:
    """Build the application.

    *settings* defaults to :func:`get_settings`; *store* injects a ready-made
    adapter instead of the one selected by ``settings.cache_backend``.
    """
    settings = settings or get_settings()

    # -----------------------------------------------------------------------
    # Lifespan management
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create shared resources and tear them down at shutdown."""
        configure_logging(settings)

        runtime = build_runtime(settings, store=store)
        await runtime.start()
        app.state.runtime = runtime
        logger.info("Cache runtime initialised (backend=%s)", settings.cache_backend)

        try:
            yield
        finally:
            app.state.runtime = None
            await runtime.aclose()
            logger.info("Cache runtime shut down")

    # -----------------------------------------------------------------------
    # FastAPI instance
    # -----------------------------------------------------------------------
    app = FastAPI(
        title=f"{settings.service_name} cache API",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Cache administration", "description": "Cache statistics and cleanup"},
            {"name": "System administration", "description": "Health, scaling and recovery"},
            {"name": "Health & Monitoring", "description": "Liveness, readiness and metrics"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TravelBFFError)
    async def _bff_error_handler(request: Request, exc: TravelBFFError) -> JSONResponse:
        log_exception(exc, logger=logger)
        body = ErrorResponse(error=exc.message, detail=exc.to_dict())
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        body = ErrorResponse(error="Internal server error")
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(health.router)
    app.include_router(cache_admin.router)
    app.include_router(system.router)
    return app
