"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from csvbridge.api.routes import health, imports
from csvbridge.core.config import AppSettings
from csvbridge.core.exceptions import (
    CsvBridgeError,
    ImportBlockedError,
    MappingIncompleteError,
    SessionNotFoundError,
    UnsupportedFileError,
)
from csvbridge.core.logging_config import configure_logging, get_logger
from csvbridge.persistence import Persistence, create_persistence
from csvbridge.services.progress import ProgressPublisher, SessionRegistry

logger = get_logger("api")


def _error_status(exc: CsvBridgeError) -> int:
    if isinstance(exc, SessionNotFoundError):
        return 404
    if isinstance(exc, UnsupportedFileError):
        return 415
    if isinstance(exc, ImportBlockedError):
        return 409
    return 500


async def _handle_error(request: Request, exc: CsvBridgeError) -> JSONResponse:
    status = _error_status(exc)
    if status >= 500:
        logger.error("request_failed", extra={"path": request.url.path, "error": str(exc)})
    body: dict = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, MappingIncompleteError):
        body["missing_fields"] = exc.missing_fields
    return JSONResponse(status_code=status, content=body)


def create_app(
    settings: AppSettings | None = None,
    persistence: Persistence | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``persistence`` replaces the backends built from settings, which lets
    tests run the app against in-memory stores.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(level=app_settings.log_level)
        app.state.settings = app_settings
        app.state.persistence = persistence or create_persistence(app_settings)
        app.state.publisher = ProgressPublisher(
            app.state.persistence.cache, app_settings.redis.progress_ttl_seconds,
        )
        app.state.registry = SessionRegistry()
        app.state.financial_flows = {}
        logger.info("app_started", extra={"environment": app_settings.environment})
        yield

    app = FastAPI(
        title="csvbridge Import Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(CsvBridgeError, _handle_error)
    app.include_router(health.router)
    app.include_router(imports.router, prefix="/imports")
    return app
