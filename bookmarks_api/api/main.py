from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookmarks_api.api.middleware import auth_refresh_middleware
from bookmarks_api.core.logging import configure_logging, correlation_id_var
from bookmarks_api.core.settings import AppSettings, get_app_settings
from bookmarks_api.db.run_migrations import main as run_alembic
from bookmarks_api.db.seed import seed_all
from bookmarks_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from bookmarks_api.api.routes.actions import router as actions_router
from bookmarks_api.api.routes.auth import admin_router as admin_auth_router
from bookmarks_api.api.routes.auth import router as auth_router
from bookmarks_api.api.routes.bookmarks import router as bookmarks_router
from bookmarks_api.api.routes.categories import router as categories_router
from bookmarks_api.api.routes.files import router as files_router
from bookmarks_api.api.routes.tags import router as tags_router

# Configure structured logging once at import
configure_logging()
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Auth", "description": "Session cookie login, registration and logout."},
    {"name": "Actions", "description": "Form actions posted by the UI; always 200 with {success, error?}."},
    {"name": "Categories", "description": "The current user's categories."},
    {"name": "Bookmarks", "description": "The current user's bookmarks."},
    {"name": "Tags", "description": "The current user's tags."},
    {"name": "Files", "description": "Stored bookmark images and icons."},
]


async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with a correlation_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)

    response.headers["X-Correlation-ID"] = corr
    return response


def _session_user_id(request: Request) -> Optional[str]:
    user = getattr(request.state, "user", None)
    if isinstance(user, dict) and user.get("id") is not None:
        return str(user["id"])
    return None


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        user_id=_session_user_id(request),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


# PUBLIC_INTERFACE
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


def build_api_router() -> APIRouter:
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.add_api_route(
        "/health", health_check, methods=["GET"], response_model=MessageResponse, summary="Health Check", tags=["Health"]
    )
    api_v1.include_router(auth_router)
    api_v1.include_router(admin_auth_router)
    api_v1.include_router(actions_router)
    api_v1.include_router(categories_router)
    api_v1.include_router(bookmarks_router)
    api_v1.include_router(tags_router)
    api_v1.include_router(files_router)
    return api_v1


# PUBLIC_INTERFACE
def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters:
        settings: application settings; read from the environment when omitted.
    """
    settings = settings or get_app_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
    )

    # CORS - avoid wildcard with credentials
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
        logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    # Added last runs first: the correlation id is set before the session is refreshed.
    app.middleware("http")(auth_refresh_middleware)
    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def on_startup() -> None:
        """
        Run migrations and optional seeding on service startup.

        This ensures the database schema is up to date. Seeding is opt-in via settings.
        """
        if settings.RUN_MIGRATIONS_ON_STARTUP:
            try:
                logger.info("Running Alembic migrations: upgrade head")
                # env.py drives its own event loop, so it runs off the server loop.
                await asyncio.to_thread(run_alembic, ["upgrade", "head"])
                logger.info("Migrations completed.")
            except Exception as exc:
                logger.exception("Migration step failed: %s", exc)

        if settings.AUTO_SEED:
            try:
                logger.info("Running database seeding...")
                await seed_all()
                logger.info("Seeding completed.")
            except Exception as exc:
                logger.exception("Seeding step failed: %s", exc)

    app.include_router(build_api_router())
    return app


app = create_app()
