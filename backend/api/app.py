"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from modules.auth.exceptions import RevokedAccessError
from modules.auth.routes import router as auth_router
from modules.endorsements.routes import router as endorsements_router
from modules.rfds.routes import router as rfds_router
from shared.config import Settings, get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    RfdIndexError,
    ValidationError,
)

from .dependencies import ServiceContainer
from .middleware.auth import SessionAuthMiddleware, clear_session_cookie, restricted_url
from .models.errors import ErrorResponse, ValidationErrorResponse
from .routes import health, users

logger = logging.getLogger(__name__)

# Checked in order; the first matching base class decides the status
ERROR_STATUS_CODES: list[tuple[type[RfdIndexError], int]] = [
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (ExternalServiceError, 502),
]


def status_code_for(exc: RfdIndexError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


async def handle_rfd_index_error(request: Request, exc: RfdIndexError) -> JSONResponse:
    status_code = status_code_for(exc)
    detail = exc.message
    if status_code == 500:
        logger.error(f"Unhandled {exc.code} on {request.method} {request.url.path}: {exc.message}")
        detail = "Internal server error"
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, code=exc.code).model_dump(),
    )


async def handle_revoked_access(request: Request, exc: RevokedAccessError) -> RedirectResponse:
    response = RedirectResponse(restricted_url(exc.email), status_code=302)
    clear_session_cookie(response, request.app.state.container.settings)
    return response


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=ValidationErrorResponse(errors=errors).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings: Settings = app.state.container.settings
    logger.info(
        f"Starting {settings.app_name} on {settings.host}:{settings.port} "
        f"({settings.environment}, {settings.storage_backend} storage)"
    )
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment)
        container: Pre-built service container (tests pass their own)

    Returns:
        Configured FastAPI instance
    """
    if container is None:
        container = ServiceContainer(settings or get_settings())
    settings = container.settings

    app = FastAPI(
        title=settings.app_name,
        description="Request for Discussion tracker API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.is_development else None,
        redoc_url="/api/redoc" if settings.is_development else None,
    )
    app.state.container = container

    # The gate is added first so CORS wraps it
    app.add_middleware(SessionAuthMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(RevokedAccessError, handle_revoked_access)
    app.add_exception_handler(RfdIndexError, handle_rfd_index_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    # Register routes
    app.include_router(auth_router, tags=["auth"])
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(rfds_router, prefix="/api/rfds", tags=["rfds"])
    app.include_router(endorsements_router, prefix="/api/rfds", tags=["endorsements"])

    return app


# Application instance for uvicorn
app = create_app()
