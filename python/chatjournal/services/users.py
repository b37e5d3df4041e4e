"""User (credential store) service layer.

Persists user records and enforces email uniqueness. Uniqueness is checked
with a lookup first and again by the unique constraint on flush, so two
concurrent registrations for the same email cannot both succeed.
"""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chatjournal.db.models import User
from chatjournal.errors import ApiErrorCode, ConflictError
from chatjournal.logging import get_logger
from chatjournal.schemas.auth import UserOut

logger = get_logger(__name__)

EMAIL_TAKEN_MESSAGE = "User already exists with this email"


def user_to_out(user: User) -> UserOut:
    """Convert User ORM model to UserOut schema (no password hash)."""
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def find_by_email(db: Session, email: str) -> User | None:
    """Look up a user by exact email."""
    return db.scalar(select(User).where(User.email == email))


def get_user(db: Session, user_id: UUID) -> User | None:
    """Look up a user by ID."""
    return db.get(User, user_id)


def create_user(
    db: Session, email: str, password_hash: str, name: str | None = None
) -> User:
    """Create and commit a new user.

    Args:
        db: Database session.
        email: Email address, stored as given.
        password_hash: bcrypt hash of the password.
        name: Optional display name.

    Returns:
        The created user.

    Raises:
        ConflictError(E_EMAIL_TAKEN): If a user with this email already exists.
    """
    if find_by_email(db, email) is not None:
        raise ConflictError(ApiErrorCode.E_EMAIL_TAKEN, EMAIL_TAKEN_MESSAGE)

    user = User(email=email, password_hash=password_hash, name=name)
    db.add(user)
    try:
        db.flush()
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("user_create_conflict")
        raise ConflictError(ApiErrorCode.E_EMAIL_TAKEN, EMAIL_TAKEN_MESSAGE) from e

    return user


def delete_user(db: Session, user_id: UUID) -> bool:
    """Delete a user and, via FK cascade, all of their chats and messages.

    Administrative operation; not exposed over HTTP.

    Returns:
        True if a user was deleted.
    """
    result = db.execute(delete(User).where(User.id == user_id))
    db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info("user_deleted", deleted_user_id=str(user_id))
    return deleted
