"""
FastAPI application factory for the Vidly server.

This module creates the main FastAPI app with:
- CORS configuration
- Database, token service and rental lifecycle manager lifecycle management
- Error mapping from domain exceptions to HTTP responses
- Resource routes under /api

Usage:
    uvicorn vidly_server.api.app:app --port 3000
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..auth import TokenService
from ..config import Settings
from ..errors import (
    AlreadyRentedError,
    AlreadyReturnedError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    OutOfStockError,
    TransactionFailedError,
    VidlyError,
)
from ..rentals import RentalLifecycleManager
from ..store import Database
from . import customers, genres, movies, rentals, users

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[VidlyError], int] = {
    NotFoundError: 404,
    InvalidReferenceError: 400,
    OutOfStockError: 400,
    AlreadyRentedError: 400,
    AlreadyReturnedError: 400,
    ConflictError: 400,
    TransactionFailedError: 500,
}

_HTTP_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def status_for(error: VidlyError) -> int:
    """HTTP status for a domain error (500 for unmapped types)."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status_code
    return 500


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(VidlyError)
    async def handle_vidly_error(request: Request, exc: VidlyError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(
                f"Request failed: {exc.message}",
                extra={"path": request.url.path, "code": exc.code, "error_details": exc.details},
            )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_encoder(exc.errors()), "code": "VALIDATION_ERROR"},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Something failed.", "code": "INTERNAL"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration (loaded from environment if not provided)
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage database and service lifecycle."""
        settings.validate_for_startup()

        database = Database(
            settings.database_path,
            wal_mode=settings.wal_mode,
            busy_timeout_ms=settings.busy_timeout_ms,
            cache_size_pages=settings.cache_size_pages,
            transaction_timeout_seconds=settings.request_timeout_seconds,
        )
        await database.initialize()

        app.state.settings = settings
        app.state.database = database
        app.state.token_service = TokenService(
            settings.jwt_private_key,
            algorithm=settings.jwt_algorithm,
            expires_in=settings.jwt_expires_in,
        )
        app.state.lifecycle = RentalLifecycleManager(
            database,
            logger=logging.getLogger("vidly_server.rentals"),
        )
        logger.info("Vidly server ready", extra={"database_path": settings.database_path})

        yield

        logger.info("Vidly server stopped")

    app = FastAPI(
        title="Vidly",
        description="Movie rental store API: catalog, customers, rentals and accounts.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-auth-token"],
    )

    _install_error_handlers(app)

    app.include_router(genres.router, prefix="/api")
    app.include_router(customers.router, prefix="/api")
    app.include_router(movies.router, prefix="/api")
    app.include_router(rentals.router, prefix="/api")
    app.include_router(rentals.returns_router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(users.auth_router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "vidly"}

    return app


# Default app instance
app = create_app()
