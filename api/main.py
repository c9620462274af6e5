"""FastAPI application for the crawltoll service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from api.config import Settings, get_settings
from api.exceptions import CrawltollError
from api.logging import setup_logging
from api.sentry import init_sentry

VERSION = "0.1.0"

setup_logging()
logger = structlog.get_logger(__name__)


def error_response(status_code: int, code: str, message: str, **details: Any) -> ORJSONResponse:
    """The ``{"error": {...}}`` envelope shared by every failure path."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return ORJSONResponse(status_code=status_code, content={"error": error})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "api_starting",
        env=settings.env,
        version=VERSION,
        payments_enabled=settings.stripe_enabled,
    )

    yield

    # The engine only exists if a request touched the database
    from api.database import get_engine

    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    logger.info("api_stopped")


def add_middleware(app: FastAPI, settings: Settings) -> None:
    """Install middleware; the last one added sees the request first."""
    from api.metrics import MetricsMiddleware
    from api.middleware import LoggingMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CrawltollError)
    async def handle_app_error(request: Request, exc: CrawltollError) -> ORJSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log("application_error", error_code=exc.code, path=request.url.path)
        return error_response(exc.status_code, exc.code, exc.message, **exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        # loc starts with the source: body, query, header
        loc = [str(part) for part in first.get("loc", ())[1:]]
        field = ".".join(loc) or None

        logger.warning("validation_error", path=request.url.path, field=field)
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_error",
            first.get("msg", "Invalid request"),
            field=field,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.error(
            "unhandled_exception",
            exc_info=exc,
            method=request.method,
            path=request.url.path,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            "An unexpected error occurred",
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application: middleware, error envelope and routers."""
    settings = settings or get_settings()
    init_sentry(settings)

    docs = settings.debug
    app = FastAPI(
        title="crawltoll",
        description="AI crawler exposure analysis and pay-per-crawl monetization",
        version=VERSION,
        docs_url="/docs" if docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    add_middleware(app, settings)
    register_exception_handlers(app)

    from api.routers import health, v1

    app.include_router(health.router)
    app.include_router(v1.router, prefix="/v1")
    return app


app = create_app()
