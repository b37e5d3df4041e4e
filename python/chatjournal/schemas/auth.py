"""User and authentication Pydantic schemas.

Contains request and response models for the /auth endpoints.
The password hash never appears in any response schema.
"""

from datetime import datetime
from uuid import UUID

from chatjournal.schemas.base import ApiModel

# =============================================================================
# Response Schemas
# =============================================================================


class UserOut(ApiModel):
    """Public profile of a user."""

    id: UUID
    email: str
    name: str | None = None
    created_at: datetime
    updated_at: datetime


class AuthResult(ApiModel):
    """Returned by register and login: the user plus a fresh access token."""

    user: UserOut
    token: str


# =============================================================================
# Request Schemas
# =============================================================================


class RegisterRequest(ApiModel):
    """Request schema for POST /auth/register.

    Password length rules are enforced by the auth service so that the
    same checks apply to every caller.
    """

    email: str
    password: str
    name: str | None = None


class LoginRequest(ApiModel):
    """Request schema for POST /auth/login."""

    email: str
    password: str
