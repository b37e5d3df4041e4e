"""Access token service - issue and verify signed, time-limited bearer tokens.

- HS256 signed with JWT_SECRET (server-held, never sent to clients)
- Claims: iss=chatjournal, sub=user_id, iat=now, exp=now+ttl (default 7 days)
- Stateless: verification never touches the database
- No refresh or rotation; clients log in again after expiry
"""

import time
from uuid import UUID

import jwt

from chatjournal.errors import ApiErrorCode, AuthError
from chatjournal.logging import get_logger

logger = get_logger(__name__)

TOKEN_ISSUER = "chatjournal"
TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60

INVALID_TOKEN_MESSAGE = "Invalid or expired token"


class TokenService:
    """Issues and verifies access tokens for authenticated users.

    One instance is created at app startup (see create_app) and shared by the
    auth routes (issue) and AuthMiddleware (verify).
    """

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        issuer: str = TOKEN_ISSUER,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.issuer = issuer

    def issue(self, user_id: UUID) -> str:
        """Issue a signed token for the given user.

        Args:
            user_id: The authenticated user's ID.

        Returns:
            Encoded JWT string.
        """
        now = int(time.time())
        payload = {
            "iss": self.issuer,
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: str) -> UUID:
        """Verify a token and return the user ID it was issued for.

        Args:
            token: The JWT string from the Authorization header.

        Returns:
            The user ID from the `sub` claim.

        Raises:
            AuthError(E_TOKEN_INVALID): Signature invalid, token malformed,
                required claims missing, issuer mismatch, or token expired.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.ExpiredSignatureError as err:
            raise AuthError(ApiErrorCode.E_TOKEN_INVALID, INVALID_TOKEN_MESSAGE) from err
        except jwt.InvalidTokenError as e:
            logger.warning("access_token_invalid", error=type(e).__name__)
            raise AuthError(ApiErrorCode.E_TOKEN_INVALID, INVALID_TOKEN_MESSAGE) from e

        try:
            return UUID(payload["sub"])
        except (TypeError, ValueError) as e:
            logger.warning("access_token_invalid", error="malformed_sub")
            raise AuthError(ApiErrorCode.E_TOKEN_INVALID, INVALID_TOKEN_MESSAGE) from e
