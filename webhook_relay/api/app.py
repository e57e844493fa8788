"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, lifespan management and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webhook_relay import __version__
from webhook_relay.api.dependencies import get_settings, shutdown_dependencies
from webhook_relay.api.exceptions import RelayAPIError
from webhook_relay.api.models.errors import ErrorCode, ErrorResponse
from webhook_relay.api.routes import register_routes
from webhook_relay.db.errors import StoreError
from webhook_relay.observability.logging import get_logger, setup_logging
from webhook_relay.observability.middleware import LoggingContextMiddleware
from webhook_relay.relay.errors import (
    InvalidDateError,
    InvalidForwardURLError,
    InvalidTokenError,
    RelayError,
)

logger = get_logger(__name__)

_RELAY_ERROR_STATUS: dict[type[RelayError], tuple[int, ErrorCode]] = {
    InvalidTokenError: (401, ErrorCode.UNAUTHORIZED),
    InvalidDateError: (400, ErrorCode.INVALID_REQUEST),
    InvalidForwardURLError: (400, ErrorCode.INVALID_REQUEST),
}


def _error_response(status_code: int, message: str, **extra: object) -> JSONResponse:
    body = ErrorResponse(error=message).model_dump()
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start-up and shutdown hooks.

    On shutdown the background runner gets its grace period to finish
    in-flight forwards before the HTTP client and pool are closed.
    """
    settings = get_settings()
    logger.info(
        "app_starting",
        version=__version__,
        storage_backend=settings.storage.backend,
        token_configured=settings.auth.api_token is not None,
    )
    yield
    await shutdown_dependencies()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - Structured logging
    - CORS middleware
    - Logging context middleware
    - Global exception handlers
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    app = FastAPI(
        title="Webhook Relay",
        description="Signed-URL webhook receiver with persistence, forwarding and MCP tools",
        version=__version__,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add logging context middleware
    app.add_middleware(LoggingContextMiddleware)

    # Register exception handlers
    _register_exception_handlers(app)

    # Register routes
    register_routes(app, settings)

    logger.info(
        "app_created",
        debug=settings.debug,
        cors_origins=settings.api.cors_origins,
    )

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Every error body has the flat shape {"error": "<message>"}.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(RelayAPIError)
    async def relay_api_error_handler(request: Request, exc: RelayAPIError) -> JSONResponse:
        """Handle RelayAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, exc.message, **exc.extra_body)

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        """Map relay core errors to HTTP statuses."""
        status_code, error_code = _RELAY_ERROR_STATUS.get(
            type(exc), (400, ErrorCode.INVALID_REQUEST)
        )
        logger.warning(
            "relay_error",
            error_code=error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(loc) for loc in first.get("loc", ()))
        message = f"Invalid request: {field} {first.get('msg', '')}".strip()
        return _error_response(400, message)

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Handle storage backend failures."""
        logger.error(
            "store_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(503, "Storage unavailable")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(500, "An unexpected error occurred")

    logger.debug("exception_handlers_registered")
