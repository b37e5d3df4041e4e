"""FastAPI dependencies for route handlers.

Common dependencies like database sessions, settings and the token service.
Everything shared is created once in create_app() and read from app.state.
"""

from fastapi import Request

from chatjournal.auth.tokens import TokenService
from chatjournal.config import Settings
from chatjournal.db.session import get_db

__all__ = ["get_app_settings", "get_db", "get_token_service"]


def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was created with."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    """Get the shared TokenService from app state.

    The same instance backs AuthMiddleware, so tokens issued by the auth
    routes are always verifiable by the middleware.
    """
    return request.app.state.token_service
