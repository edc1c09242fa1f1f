"""
FastAPI application factory for the AR dashboard API.

``create_app()`` takes an optional ready-made DashboardService (tests inject
one bound to a temporary database).  Without one, the lifespan handler
builds it from ``get_active_config()`` on startup.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ar_api.routes import router
from ar_config import get_active_config
from ar_config.schema import ArMetricsConfig
from ar_kernel import __version__
from ar_kernel.exceptions import (
    ArMetricsError,
    IngestionError,
    InvalidQueryParameterError,
    QueryError,
    WeekNotFoundError,
)
from ar_kernel.logging_config import LogContext, get_logger
from ar_services.dashboard_service import DashboardService

logger = get_logger("api")

REQUEST_ID_HEADER = "X-Request-ID"


def status_for(exc: ArMetricsError) -> int:
    if isinstance(exc, WeekNotFoundError):
        return 404
    if isinstance(exc, (QueryError, IngestionError)):
        return 400
    return 500


def create_app(
    config: ArMetricsConfig | None = None,
    service: DashboardService | None = None,
) -> FastAPI:
    """Build the API application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if getattr(app.state, "dashboard", None) is None:
            app.state.dashboard = DashboardService.from_config(config or get_active_config())
        yield

    app = FastAPI(
        title="AR Weekly Metrics",
        description="Weekly accounts-receivable metrics: upload, current metrics and history",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.dashboard = service

    _setup_middleware(app)
    app.include_router(router, prefix="/api", tags=["ar-metrics"])
    _setup_exception_handlers(app)
    return app


def _setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        with LogContext.bind(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ArMetricsError)
    async def ar_metrics_error_handler(request: Request, exc: ArMetricsError) -> JSONResponse:
        status = status_for(exc)
        log = logger.error if status >= 500 else logger.info
        log("request_failed", extra={"error_code": exc.code, "path": request.url.path, "status": status})
        return JSONResponse(status_code=status, content={"error": exc.code, "message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = first.get("loc", ())
        parameter = str(location[-1]) if location else "request"
        message = first.get("msg", "invalid request")
        return JSONResponse(
            status_code=400,
            content={
                "error": InvalidQueryParameterError.code,
                "message": f"Invalid value for '{parameter}': {message}",
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("request_unhandled_error", exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={"error": "INTERNAL_ERROR", "message": "Internal server error"},
        )
