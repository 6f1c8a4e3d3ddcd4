"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PaymentRequiredError,
    PictoTextError,
    RateLimitError,
    ServiceUnavailableError,
    ValidationError,
)
from modules.identity.exceptions import UserNotFoundError
from .cookies import set_free_usage_cookie
from .dependencies import get_container
from .maintenance import maintenance_loop
from .models.errors import ErrorResponse
from .routes import auth, extract, health, payments, usage

logger = logging.getLogger(__name__)

# First match wins, so subclasses must come before their bases
_STATUS_BY_ERROR: tuple[tuple[type[PictoTextError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (PaymentRequiredError, 402),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (RateLimitError, 429),
    (ExternalServiceError, 502),
    (ServiceUnavailableError, 503),
)


def status_for_error(exc: PictoTextError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def handle_app_error(request: Request, exc: PictoTextError) -> JSONResponse:
    """Render a domain error as an ErrorResponse with the mapped status."""
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)

    body = ErrorResponse(
        error=exc.message,
        code=exc.code,
        details=exc.details or None,
        requires_payment=exc.details.get("requires_payment"),
    )
    response = JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
    if isinstance(exc, UserNotFoundError):
        # Session points at a user that is gone
        response.delete_cookie(get_settings().session_cookie_name)
    return response


async def reissue_free_usage_cookie(request: Request, call_next):
    """Set the tracking cookie on any response to an anonymous caller, errors included."""
    response = await call_next(request)
    cookie_id = getattr(request.state, "free_usage_cookie_id", None)
    if cookie_id:
        set_free_usage_cookie(response, get_settings(), cookie_id)
    return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Starts the periodic maintenance task and stops it on shutdown.
    """
    # Startup
    settings = get_settings()
    container = get_container()
    logger.info(
        "Starting %s on %s:%s (storage=%s, ocr=%s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.storage_backend,
        "available" if container.ocr.available else "unconfigured",
    )

    task = None
    if settings.maintenance_interval_seconds > 0:
        task = asyncio.create_task(
            maintenance_loop(container, settings.maintenance_interval_seconds)
        )
    yield
    # Shutdown
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Freemium image-to-text extraction API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.middleware("http")(reissue_free_usage_cookie)
    app.add_exception_handler(PictoTextError, handle_app_error)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(payments.router, prefix="/api", tags=["payments"])
    app.include_router(usage.router, prefix="/api/usage", tags=["usage"])
    app.include_router(extract.router, prefix="/api", tags=["extract"])

    return app


# Application instance for uvicorn
app = create_app()
