"""API response envelope helpers and exception handlers.

All API responses use a consistent envelope:
- Success: { "success": true, "message"?: "...", "data"?: ..., "pagination"?: {...} }
- Error: { "success": false, "message": "...", "code": "E_...", "request_id": "..." }

The request_id is included in error responses for debugging and support.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatjournal.errors import ApiError, ApiErrorCode
from chatjournal.logging import get_logger, get_request_id

logger = get_logger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "


def success_response(
    data: Any = None, message: str | None = None, **extra: Any
) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap. Omitted from the envelope when None.
        message: Optional human-readable message.
        **extra: Additional top-level keys (e.g. pagination).

    Returns:
        Dict with "success" set and the provided keys.
    """
    envelope: dict[str, Any] = {"success": True}
    if message is not None:
        envelope["message"] = message
    if data is not None:
        envelope["data"] = data
    envelope.update(extra)
    return envelope


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        code: The error code enum value.
        message: Human-readable error message.
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with success=False, message, code and request_id.
    """
    if request_id is None:
        request_id = get_request_id()

    envelope: dict[str, Any] = {"success": False, "message": message, "code": code.value}
    if request_id:
        envelope["request_id"] = request_id

    return envelope


def validation_error_message(exc: RequestValidationError) -> str:
    """Build a client-facing message from the first validation error."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"

    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    error_type = first.get("type", "")

    if error_type == "json_invalid":
        return "Malformed JSON body"
    if error_type == "missing":
        return f"{field} is required" if field else "Request body is required"

    msg = str(first.get("msg", "Invalid value"))
    if msg.startswith(_VALUE_ERROR_PREFIX):
        msg = msg[len(_VALUE_ERROR_PREFIX) :]
    return f"{field}: {msg}" if field else msg


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return proper JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (including malformed JSON) as 400."""
    return JSONResponse(
        status_code=400,
        content=error_response(ApiErrorCode.E_INVALID_REQUEST, validation_error_message(exc)),
    )


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle Starlette HTTPException (unknown routes, bad methods) as JSON."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        401: ApiErrorCode.E_UNAUTHENTICATED,
        404: ApiErrorCode.E_NOT_FOUND,
        405: ApiErrorCode.E_METHOD_NOT_ALLOWED,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    if exc.status_code == 404:
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error"),
    )
