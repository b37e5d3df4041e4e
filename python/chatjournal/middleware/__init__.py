"""Middleware modules for the chatjournal API."""

from chatjournal.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from chatjournal.middleware.security_headers import SECURITY_HEADERS, SecurityHeadersMiddleware

__all__ = [
    "RequestIDMiddleware",
    "REQUEST_ID_HEADER",
    "SecurityHeadersMiddleware",
    "SECURITY_HEADERS",
]
