"""Session authentication for the management API.

A request is authorized when it carries the shared secret either as
``Authorization: Bearer <secret>`` or in the session cookie. When no
secret is configured every request is authorized.
"""

import hmac
from typing import Annotated

from fastapi import Depends, Request

from webhook_relay.api.dependencies import SettingsDep
from webhook_relay.api.exceptions import AuthError
from webhook_relay.config import Settings
from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import AUTH_FAILURES

logger = get_logger(__name__)


def _matches(presented: str | None, expected: str) -> bool:
    if presented is None:
        return False
    return hmac.compare_digest(presented.encode(), expected.encode())


def is_authorized(request: Request, settings: Settings) -> bool:
    """Check bearer header or session cookie against the shared secret."""
    secret = settings.auth.api_token
    if secret is None:
        return True
    if _matches(request.headers.get("authorization"), f"Bearer {secret}"):
        return True
    return _matches(request.cookies.get(settings.auth.cookie_name), secret)


async def require_session(request: Request, settings: SettingsDep) -> None:
    """Dependency that rejects unauthenticated requests.

    Raises:
        AuthError: 401 if credentials are missing or wrong
    """
    if not is_authorized(request, settings):
        AUTH_FAILURES.labels(kind="session").inc()
        logger.warning("auth_rejected", path=request.url.path)
        raise AuthError("Unauthorized")


SessionDep = Annotated[None, Depends(require_session)]
