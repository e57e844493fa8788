"""Errors raised by the relay core.

The API layer maps these to HTTP responses; see
webhook_relay.api.app._register_exception_handlers.
"""


class RelayError(Exception):
    """Base class for relay core errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidTokenError(RelayError):
    """Presented webhook token does not match the endpoint."""

    def __init__(self, endpoint: str) -> None:
        super().__init__("Invalid webhook token")
        self.endpoint = endpoint


class InvalidDateError(RelayError, ValueError):
    """Date parameter is neither 'today' nor YYYY-MM-DD."""


class InvalidForwardURLError(RelayError, ValueError):
    """Forward target is not an absolute http(s) URL."""
