"""
REST API Layer for TimeCraft.

Provides:
- FastAPI application with CORS middleware
- Endpoints for schedule generation, timeline layout, saved plans,
  budgets and upcoming-task notifications
- API versioning under /api/v1 prefix
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.schemas import error_response
from src.config.settings import get_settings
from src.lib.errors import INTERNAL_ERROR, VALIDATION_ERROR, classify_exception
from src.lib.exceptions import TimeCraftException

logger = logging.getLogger(__name__)

_ALLOWED_HEADERS: list[str] = [
    "Content-Type",
    "Accept",
    "Accept-Language",
    "X-Request-ID",
]


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Includes:
    - CORS middleware with origins from TIMECRAFT_CORS_ORIGINS
    - Exception handlers that turn errors into response envelopes
    - API v1 router with all endpoints
    - Root-level health check for container/load balancer probes
    - Production: /docs and /redoc disabled

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="TimeCraft",
        description="Scheduling assistant: free text in, laid-out timeline out",
        version="0.1.0",
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    # -------------------------------------------------------------------------
    # Exception handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(TimeCraftException)
    async def domain_exception_handler(
        request: Request, exc: TimeCraftException,
    ) -> JSONResponse:
        code, status = classify_exception(exc)
        if status >= 500:
            logger.error(
                "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc,
            )
        else:
            logger.info("%s on %s %s: %s", code, request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content=error_response(code, str(exc) or None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response(
                VALIDATION_ERROR,
                details={"errors": jsonable_encoder(exc.errors())},
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception on %s %s", request.method, request.url.path,
        )
        return JSONResponse(status_code=500, content=error_response(INTERNAL_ERROR))

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=_ALLOWED_HEADERS,
    )

    if settings.cors_origins:
        logger.info("CORS enabled for origins: %s", settings.cors_origins)
    else:
        logger.info("CORS: no origins configured (restrictive default)")

    app.include_router(router)

    @app.get("/health")
    async def root_health_check() -> dict[str, str]:
        """Root health check for infrastructure probes."""
        return {"status": "ok"}

    return app


__all__ = ["create_app", "router"]
