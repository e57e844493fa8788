"""Dashboard login, logout and session probe."""

import hmac
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from webhook_relay.api.dependencies import SettingsDep
from webhook_relay.api.exceptions import AuthError
from webhook_relay.api.middleware.auth import is_authorized
from webhook_relay.observability.logging import get_logger
from webhook_relay.observability.metrics import AUTH_FAILURES

logger = get_logger(__name__)

router = APIRouter()


async def _read_credentials(request: Request) -> tuple[str, str]:
    """Username and password from a form or JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
    else:
        data = await request.form()
    username = data.get("username")
    password = data.get("password")
    return (
        username if isinstance(username, str) else "",
        password if isinstance(password, str) else "",
    )


@router.post("/auth/login")
async def login(request: Request, settings: SettingsDep) -> JSONResponse:
    """Exchange username and password for a session cookie.

    The credential ``username:password`` must equal the shared secret.
    """
    username, password = await _read_credentials(request)
    credential = f"{username}:{password}"
    secret = settings.auth.api_token

    if secret is None or not hmac.compare_digest(credential.encode(), secret.encode()):
        AUTH_FAILURES.labels(kind="login").inc()
        logger.warning("login_rejected")
        raise AuthError("Invalid credentials")

    response = JSONResponse({"ok": True})
    response.set_cookie(
        settings.auth.cookie_name,
        credential,
        max_age=settings.auth.cookie_max_age,
        path="/",
        secure=True,
        httponly=True,
        samesite="strict",
    )
    logger.info("login_succeeded")
    return response


@router.get("/auth/logout")
async def logout(settings: SettingsDep) -> JSONResponse:
    """Clear the session cookie."""
    response = JSONResponse({"ok": True})
    response.set_cookie(
        settings.auth.cookie_name,
        "",
        max_age=0,
        path="/",
        secure=True,
        httponly=True,
        samesite="strict",
    )
    return response


@router.get("/api/me")
async def me(request: Request, settings: SettingsDep) -> dict[str, Any]:
    """Whether the caller holds a valid session."""
    return {"loggedIn": is_authorized(request, settings)}
