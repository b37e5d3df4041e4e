"""Authentication and authorization module.

This module provides:
- TokenService: access token issuance and verification
- AuthMiddleware for FastAPI
- Request state with viewer identity
"""

from chatjournal.auth.middleware import AuthMiddleware, TokenVerifier, Viewer, get_viewer
from chatjournal.auth.tokens import TokenService

__all__ = [
    "AuthMiddleware",
    "TokenService",
    "TokenVerifier",
    "Viewer",
    "get_viewer",
]
