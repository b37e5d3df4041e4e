"""Authentication service layer.

Implements registration, login and current-user lookup.

- Tokens are stateless; nothing here creates a server-side session
- Login failures use one message for "no such email" and "wrong password"
- Passwords and tokens are never logged
"""

from uuid import UUID

from sqlalchemy.orm import Session

from chatjournal.auth.tokens import TokenService
from chatjournal.errors import ApiErrorCode, AuthError, InvalidRequestError, NotFoundError
from chatjournal.logging import get_logger
from chatjournal.schemas.auth import AuthResult, UserOut
from chatjournal.services import passwords
from chatjournal.services import users as users_service

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _require_credentials(email: str | None, password: str | None) -> tuple[str, str]:
    """Validate presence of email and password; return (trimmed email, password)."""
    email = (email or "").strip()
    if not email or not password:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST, "Email and password are required"
        )
    return email, password


def register(
    db: Session,
    tokens: TokenService,
    email: str | None,
    password: str | None,
    name: str | None = None,
    bcrypt_rounds: int = passwords.DEFAULT_ROUNDS,
) -> AuthResult:
    """Register a new user and issue a token.

    Args:
        db: Database session.
        tokens: Token service used to issue the access token.
        email: Email address (required).
        password: Plain-text password (required, at least 6 characters).
        name: Optional display name.
        bcrypt_rounds: bcrypt cost factor.

    Returns:
        The created user (without password) and an access token.

    Raises:
        InvalidRequestError(E_INVALID_REQUEST): Missing fields or bad password length.
        ConflictError(E_EMAIL_TAKEN): Email already registered.
    """
    email, password = _require_credentials(email, password)

    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    if len(password.encode("utf-8")) > passwords.MAX_PASSWORD_BYTES:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST,
            f"Password must be at most {passwords.MAX_PASSWORD_BYTES} bytes long",
        )

    name = name.strip() if name else None
    password_hash = passwords.hash_password(password, rounds=bcrypt_rounds)
    user = users_service.create_user(db, email, password_hash, name=name or None)

    logger.info("user_registered", registered_user_id=str(user.id))

    return AuthResult(user=users_service.user_to_out(user), token=tokens.issue(user.id))


def login(
    db: Session,
    tokens: TokenService,
    email: str | None,
    password: str | None,
    bcrypt_rounds: int = passwords.DEFAULT_ROUNDS,
) -> AuthResult:
    """Authenticate with email and password and issue a token.

    Raises:
        InvalidRequestError(E_INVALID_REQUEST): Missing fields.
        AuthError(E_INVALID_CREDENTIALS): Unknown email or wrong password
            (same message for both).
    """
    email, password = _require_credentials(email, password)

    user = users_service.find_by_email(db, email)
    if user is None:
        passwords.burn_verification_time(password, rounds=bcrypt_rounds)
        logger.info("login_failed", reason="unknown_email")
        raise AuthError(ApiErrorCode.E_INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    if not passwords.verify_password(password, user.password_hash):
        logger.info("login_failed", reason="bad_password", login_user_id=str(user.id))
        raise AuthError(ApiErrorCode.E_INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    logger.info("login_succeeded", login_user_id=str(user.id))

    return AuthResult(user=users_service.user_to_out(user), token=tokens.issue(user.id))


def get_current_user(db: Session, user_id: UUID) -> UserOut:
    """Get the public profile of the authenticated user.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): The user was deleted after the token was issued.
    """
    user = users_service.get_user(db, user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    return users_service.user_to_out(user)
