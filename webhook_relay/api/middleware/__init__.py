"""API middleware and request guards."""

from webhook_relay.api.middleware.auth import SessionDep, is_authorized, require_session

__all__ = ["SessionDep", "is_authorized", "require_session"]
