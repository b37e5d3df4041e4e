"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_TOKEN_INVALID = "E_TOKEN_INVALID"
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_CHAT_NOT_FOUND = "E_CHAT_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_ROLE = "E_INVALID_ROLE"

    # Conflict errors (409)
    E_EMAIL_TAKEN = "E_EMAIL_TAKEN"

    # Method errors (405)
    E_METHOD_NOT_ALLOWED = "E_METHOD_NOT_ALLOWED"

    # Request body over MAX_BODY_BYTES (413)
    E_PAYLOAD_TOO_LARGE = "E_PAYLOAD_TOO_LARGE"

    # Server errors
    E_SERVICE_UNAVAILABLE = "E_SERVICE_UNAVAILABLE"  # 503
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_TOKEN_INVALID: 401,
    ApiErrorCode.E_INVALID_CREDENTIALS: 401,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_USER_NOT_FOUND: 404,
    ApiErrorCode.E_CHAT_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_INVALID_ROLE: 400,
    ApiErrorCode.E_EMAIL_TAKEN: 409,
    ApiErrorCode.E_METHOD_NOT_ALLOWED: 405,
    ApiErrorCode.E_PAYLOAD_TOO_LARGE: 413,
    ApiErrorCode.E_SERVICE_UNAVAILABLE: 503,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class InvalidRequestError(ApiError):
    """Invalid request error."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class AuthError(ApiError):
    """Authentication failure error."""

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_UNAUTHENTICATED,
        message: str = "Authentication required",
    ):
        super().__init__(code, message)


class NotFoundError(ApiError):
    """Resource not found error.

    Also raised when a resource exists but belongs to another user.
    """

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ConflictError(ApiError):
    """Uniqueness conflict error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_EMAIL_TAKEN, message: str = "Conflict"):
        super().__init__(code, message)


class ServiceUnavailableError(ApiError):
    """A required backing service (the database) is unreachable."""

    def __init__(
        self,
        code: ApiErrorCode = ApiErrorCode.E_SERVICE_UNAVAILABLE,
        message: str = "Service unavailable",
    ):
        super().__init__(code, message)
