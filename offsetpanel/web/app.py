"""FastAPI web UI for OffsetPanel - price management dashboard."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from offsetpanel.api.client import ApiClient
from offsetpanel.config import get_config
from offsetpanel.core.logging import configure_logging
from offsetpanel.web.routes import auth, debug, health, prices

logger = structlog.get_logger()


# Polled endpoints without per-request log lines
_UNLOGGED_PATHS = frozenset({"/metrics", "/health", "/favicon.ico"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line and echo it as ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        quiet = request.url.path in _UNLOGGED_PATHS
        started = time.perf_counter()
        if not quiet:
            logger.info(
                "request_started",
                client_ip=request.client.host if request.client else None,
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise

        if not quiet:
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One API client (and connection pool) for the whole process."""
    config = get_config()
    app.state.api_client = ApiClient()
    logger.info(
        "api_client_started",
        base_url=config.api.base_url,
        timeout_seconds=config.api.timeout_seconds,
    )
    try:
        yield
    finally:
        await app.state.api_client.close()
        logger.info("api_client_closed")


# Exception Handlers
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions, specifically for redirects."""
    if (
        exc.status_code in [301, 302, 303, 307, 308]
        and exc.headers
        and "Location" in exc.headers
    ):
        return RedirectResponse(
            url=exc.headers["Location"], status_code=exc.status_code
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def root_redirect():
    return RedirectResponse(url=f"/{get_config().locale.default_locale}/prices")


def create_app() -> FastAPI:
    """Build the dashboard application."""
    configure_logging()

    app = FastAPI(
        title="OffsetPanel",
        description="Price management dashboard for offset printing services",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Prometheus Metrics
    Instrumentator().instrument(app).expose(app)

    app.add_exception_handler(HTTPException, http_exception_handler)

    # Include Routers
    app.add_api_route("/", root_redirect, include_in_schema=False)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(debug.router)
    app.include_router(prices.router)

    return app


app = create_app()
