"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, middleware, and routes.

Shared resources (settings, session factory, token service) are built once
here and stored on app.state; tests inject their own instead.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- CORSMiddleware wraps AuthMiddleware so preflights and 401s carry CORS headers
- SecurityHeadersMiddleware wraps CORS so every response, 413s included,
  carries the hardening headers

Actual execution order per request:
1. RequestIDMiddleware (sets request_id, starts timer)
2. SecurityHeadersMiddleware (body size cap, hardening headers)
3. CORSMiddleware (answers preflight, adds headers)
4. AuthMiddleware (verifies bearer token, sets viewer)
5. Route handler
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatjournal.api.routes import create_api_router
from chatjournal.auth.middleware import AuthMiddleware
from chatjournal.auth.tokens import TokenService
from chatjournal.config import Settings, get_settings
from chatjournal.db.session import create_session_factory
from chatjournal.errors import ApiError
from chatjournal.logging import configure_logging, get_logger
from chatjournal.middleware.request_id import RequestIDMiddleware
from chatjournal.middleware.security_headers import SecurityHeadersMiddleware
from chatjournal.responses import (
    api_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup state: database reachability and fallback secret use.

    A failed database check is logged but does not abort startup;
    /health reports 503 until the database is reachable.
    """
    settings: Settings = app.state.settings

    if settings.uses_dev_jwt_secret:
        logger.warning("jwt_dev_secret_in_use", env=settings.app_env.value)

    session = app.state.session_factory()
    try:
        session.execute(text("SELECT 1"))
        logger.info("database_connected", env=settings.app_env.value)
    except SQLAlchemyError as e:
        logger.error("database_connection_failed", error_type=type(e).__name__, error=str(e))
    finally:
        session.close()

    yield

    logger.info("app_shutdown")


def create_token_service(settings: Settings) -> TokenService:
    """Create the token service from settings."""
    return TokenService(
        secret=settings.effective_jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
    )


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    token_service: TokenService | None = None,
    skip_auth_middleware: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Defaults to get_settings().
        session_factory: Session factory (for testing). Defaults to one bound
            to the engine built from DATABASE_URL.
        token_service: Token service (for testing). Defaults to one built
            from the JWT settings.
        skip_auth_middleware: If True, skip adding auth middleware (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    token_service = token_service or create_token_service(settings)

    app = FastAPI(
        title="Chat Journal API",
        description="Backend API for Chat Journal - personal AI chat history",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_factory = session_factory or create_session_factory()
    app.state.token_service = token_service

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Use router factory to avoid import-time settings loading
    app.include_router(create_api_router())

    # Add auth middleware (runs on all requests except public paths)
    if not skip_auth_middleware:
        app.add_middleware(AuthMiddleware, verifier=token_service)
        logger.info("auth_middleware_enabled", env=settings.app_env.value)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware, max_body_bytes=settings.max_body_bytes)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")


def create_configured_app() -> FastAPI:
    """Build the production app: logging, app, request-id middleware."""
    settings = get_settings()
    configure_logging(json_format=settings.log_json)
    app = create_app(settings=settings)
    add_request_id_middleware(app)
    return app
