"""Pure ASGI middleware for browser hardening headers and the body size cap.

Every HTTP response gets the headers in SECURITY_HEADERS unless the route
already set them. Requests whose Content-Length exceeds max_body_bytes are
answered with 413 before the app reads the body.

No Content-Security-Policy is sent: the interactive docs at /docs load
their assets from a CDN.
"""

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from chatjournal.errors import ApiErrorCode
from chatjournal.logging import get_logger
from chatjournal.responses import error_response

logger = get_logger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "cross-origin-opener-policy": "same-origin",
    "cross-origin-resource-policy": "same-origin",
    "origin-agent-cluster": "?1",
    "referrer-policy": "no-referrer",
    "strict-transport-security": "max-age=31536000; includeSubDomains",
    "x-content-type-options": "nosniff",
    "x-dns-prefetch-control": "off",
    "x-download-options": "noopen",
    "x-frame-options": "SAMEORIGIN",
    "x-permitted-cross-domain-policies": "none",
    "x-xss-protection": "0",
}


class SecurityHeadersMiddleware:
    """Adds SECURITY_HEADERS to responses and rejects oversized bodies."""

    def __init__(self, app: ASGIApp, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in SECURITY_HEADERS.items():
                    headers.setdefault(name, value)
            await send(message)

        declared = _content_length(Headers(scope=scope))
        if declared is not None and declared > self.max_body_bytes:
            logger.warning(
                "request_body_too_large",
                content_length=declared,
                max_body_bytes=self.max_body_bytes,
            )
            response = JSONResponse(
                status_code=413,
                content=error_response(ApiErrorCode.E_PAYLOAD_TOO_LARGE, "Request body too large"),
            )
            await response(scope, receive, send_with_headers)
            return

        await self.app(scope, receive, send_with_headers)


def _content_length(headers: Headers) -> int | None:
    value = headers.get("content-length")
    if value is None or not value.strip().isdigit():
        return None
    return int(value)
