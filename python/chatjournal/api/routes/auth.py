"""Authentication API routes.

Route handlers for registration, login and the current-user profile.
Routes are transport-only: each calls exactly one service function.

/auth/register and /auth/login are public (see PUBLIC_PATHS);
/auth/me requires a bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chatjournal.api.deps import get_app_settings, get_db, get_token_service
from chatjournal.auth.middleware import Viewer, get_viewer
from chatjournal.auth.tokens import TokenService
from chatjournal.config import Settings
from chatjournal.responses import success_response
from chatjournal.schemas.auth import LoginRequest, RegisterRequest
from chatjournal.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Create an account and return it with an access token.

    Errors:
        E_INVALID_REQUEST (400): Missing email/password or bad password length.
        E_EMAIL_TAKEN (409): An account with this email already exists.
    """
    result = auth_service.register(
        db=db,
        tokens=tokens,
        email=body.email,
        password=body.password,
        name=body.name,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    return success_response(result.to_json(), message="User registered successfully")


@router.post("/login")
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Exchange email and password for an access token.

    Errors:
        E_INVALID_CREDENTIALS (401): Unknown email or wrong password.
    """
    result = auth_service.login(
        db=db,
        tokens=tokens,
        email=body.email,
        password=body.password,
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    return success_response(result.to_json(), message="Login successful")


@router.get("/me")
def get_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the authenticated user's profile.

    Errors:
        E_USER_NOT_FOUND (404): The account was deleted after the token was issued.
    """
    user = auth_service.get_current_user(db=db, user_id=viewer.user_id)
    return success_response({"user": user.to_json()})
