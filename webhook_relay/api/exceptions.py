"""API exception hierarchy for consistent error handling.

All API exceptions inherit from RelayAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate the error response.
"""

from typing import Any, ClassVar

from webhook_relay.api.models.errors import ErrorCode


class RelayAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    extra_body: ClassVar[dict[str, Any]] = {}

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthError(RelayAPIError):
    """Raised when session credentials are missing or wrong."""

    status_code = 401
    error_code = ErrorCode.UNAUTHORIZED


class InvalidRequestError(RelayAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class NotConfiguredError(RelayAPIError):
    """Raised when a required secret or token is not configured."""

    status_code = 500
    error_code = ErrorCode.NOT_CONFIGURED


class UpstreamLookupError(RelayAPIError):
    """Raised when an upstream API could not resolve a name."""

    status_code = 404
    error_code = ErrorCode.LOOKUP_FAILED
    extra_body = {"ok": False}
