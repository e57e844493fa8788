"""Error response models for API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes, used in logs."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Missing or wrong session credentials or webhook token."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, bad date)."""

    NOT_CONFIGURED = "NOT_CONFIGURED"
    """The operation needs a secret or token that is not configured."""

    LOOKUP_FAILED = "LOOKUP_FAILED"
    """An upstream lookup returned no result."""

    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    """The storage backend failed."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorResponse(BaseModel):
    """Flat error body returned by every endpoint.

    Example:
        {"error": "Invalid webhook token"}
    """

    error: str
