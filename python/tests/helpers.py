"""Test helpers for authentication and common test operations.

Provides:
- Token minting for test authentication (valid, expired, bad signature)
- Header generation for test requests
- User and chat creation through the HTTP API
"""

import time
from uuid import UUID, uuid4

import jwt
from fastapi.testclient import TestClient

from chatjournal.auth.tokens import TOKEN_ALGORITHM, TOKEN_ISSUER

TEST_JWT_SECRET = "test-jwt-secret-that-is-at-least-32-characters"
DEFAULT_PASSWORD = "password123"
DEFAULT_EXPIRES_IN = 3600  # 1 hour


def unique_email(prefix: str = "user") -> str:
    """Generate an email address no other test uses."""
    return f"{prefix}-{uuid4().hex[:12]}@example.com"


def mint_token(
    user_id: UUID | str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    secret: str = TEST_JWT_SECRET,
    issuer: str = TOKEN_ISSUER,
    **extra_claims,
) -> str:
    """Mint a signed token the way TokenService does, with overridable claims."""
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iss": issuer,
        "iat": now,
        "exp": now + expires_in,
        **extra_claims,
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def mint_expired_token(user_id: UUID | str) -> str:
    """Mint a token that expired 1 hour ago."""
    return mint_token(user_id, expires_in=-3600)


def mint_token_with_bad_signature(user_id: UUID | str) -> str:
    """Mint a token signed with a different secret."""
    return mint_token(user_id, secret="some-other-secret-that-is-also-32-chars-long")


def auth_headers(token: str) -> dict[str, str]:
    """Build an Authorization header for the given token."""
    return {"Authorization": f"Bearer {token}"}


def register_user(
    client: TestClient,
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    name: str | None = None,
) -> tuple[dict, str]:
    """Register a user through the API.

    Returns:
        Tuple of (user dict, access token).
    """
    body = {"email": email or unique_email(), "password": password}
    if name is not None:
        body["name"] = name
    response = client.post("/auth/register", json=body)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], data["token"]


def create_chat(
    client: TestClient,
    token: str,
    initial_message: str = "Hello there",
    title: str | None = None,
) -> dict:
    """Create a chat through the API and return its data."""
    body = {"initialMessage": initial_message}
    if title is not None:
        body["title"] = title
    response = client.post("/chats", json=body, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def add_message(client: TestClient, token: str, chat_id: str, role: str, content: str) -> dict:
    """Append a message through the API and return its data."""
    response = client.post(
        f"/chats/{chat_id}/messages",
        json={"role": role, "content": content},
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]
