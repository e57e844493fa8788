"""Observability: structured logging, metrics and request context."""

from webhook_relay.observability.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
