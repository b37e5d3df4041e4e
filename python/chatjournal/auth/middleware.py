"""Authentication middleware for FastAPI.

Provides:
- TokenVerifier: Protocol the middleware verifies bearer tokens with
- AuthMiddleware: Global middleware for bearer token verification
- get_viewer: Dependency for accessing authenticated viewer identity
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from chatjournal.errors import ApiError, ApiErrorCode, AuthError
from chatjournal.logging import get_logger
from chatjournal.responses import error_response

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "bearer "

# Paths that don't require authentication
PUBLIC_PATHS = {
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/auth/register",
    "/auth/login",
}


class TokenVerifier(Protocol):
    """Protocol for token verification.

    Implementations must verify a bearer token and return the user ID it
    was issued for.
    """

    def verify(self, token: str) -> UUID:
        """Verify token and return the user ID.

        Raises:
            ApiError: Token is invalid, expired, or malformed.
        """
        ...


@dataclass
class Viewer:
    """Authenticated viewer identity.

    Attributes:
        user_id: The viewer's user ID (from the token sub claim).
    """

    user_id: UUID


def _has_route(request: Request) -> bool:
    """True if some route matches the path (a method mismatch still counts)."""
    return any(
        route.matches(request.scope)[0] != Match.NONE for route in request.app.router.routes
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Authentication middleware for FastAPI.

    Enforces bearer token authentication on all non-public paths.
    The token payload is trusted until expiry; the users table is not
    consulted here.

    Order of checks:
    1. Skip if public path, CORS preflight, or no route matches (404 downstream)
    2. Extract and parse bearer token
    3. Verify token via TokenVerifier
    4. Attach Viewer to request state
    """

    def __init__(self, app: ASGIApp, verifier: TokenVerifier):
        """Initialize the auth middleware.

        Args:
            app: The ASGI application.
            verifier: TokenVerifier implementation (normally the app's TokenService).
        """
        super().__init__(app)
        self.verifier = verifier

    async def dispatch(self, request: Request, call_next) -> JSONResponse:
        """Process the request through auth checks."""
        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            return await call_next(request)
        if not _has_route(request):
            return await call_next(request)

        token, error_response_obj = self._extract_bearer_token(request)
        if error_response_obj:
            return error_response_obj

        try:
            user_id = self.verifier.verify(token)
        except ApiError as e:
            logger.warning("auth_failure", reason="token_rejected", request_path=request.url.path)
            return self._error_json_response(e.code, e.message, 401)

        request.state.viewer = Viewer(user_id=user_id)

        return await call_next(request)

    def _extract_bearer_token(self, request: Request) -> tuple[str, JSONResponse | None]:
        """Extract bearer token from Authorization header.

        Returns:
            Tuple of (token, error_response). Token is empty string if error.
        """
        auth_header = request.headers.get(AUTHORIZATION_HEADER)

        # Check for Bearer prefix (case-insensitive)
        if not auth_header or not auth_header.lower().startswith(BEARER_PREFIX):
            logger.warning(
                "auth_failure",
                reason="missing_header" if not auth_header else "invalid_header_format",
                request_path=request.url.path,
            )
            return "", self._error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Access token is required",
                401,
            )

        token = auth_header[len(BEARER_PREFIX) :].strip()

        if not token:
            logger.warning(
                "auth_failure", reason="empty_token", request_path=request.url.path
            )
            return "", self._error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Invalid token format",
                401,
            )

        return token, None

    def _error_json_response(
        self, code: ApiErrorCode, message: str, status_code: int
    ) -> JSONResponse:
        """Create a JSON error response."""
        return JSONResponse(
            status_code=status_code,
            content=error_response(code, message),
        )


def get_viewer(request: Request) -> Viewer:
    """FastAPI dependency to get the authenticated viewer.

    Args:
        request: The FastAPI request object.

    Returns:
        The authenticated Viewer.

    Raises:
        AuthError: If viewer is not set (middleware didn't run or path is public).
    """
    viewer = getattr(request.state, "viewer", None)
    if viewer is None:
        raise AuthError(ApiErrorCode.E_UNAUTHENTICATED, "Access token is required")
    return viewer
