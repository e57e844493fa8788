"""Hit queries, retention purge and signed URL generation."""

from typing import Any

from fastapi import APIRouter, Depends, Request

from webhook_relay.api.dependencies import ServiceDep, SettingsDep
from webhook_relay.api.exceptions import InvalidRequestError, NotConfiguredError
from webhook_relay.api.middleware.auth import require_session
from webhook_relay.relay import tokens

router = APIRouter(prefix="/api", dependencies=[Depends(require_session)])


@router.get("/hits")
async def list_hits(
    service: ServiceDep,
    date: str | None = None,
    endpoint: str | None = None,
) -> dict[str, Any]:
    """Hits for one UTC+7 calendar day, newest first.

    Args:
        date: "today" (default) or YYYY-MM-DD
        endpoint: Restrict to one endpoint
    """
    page = await service.hits_for_day(date=date, endpoint=endpoint)
    return page.to_response()


@router.post("/purge")
async def purge_hits(service: ServiceDep) -> dict[str, int]:
    """Delete hits older than the retention period."""
    return {"deleted": await service.purge()}


@router.get("/generate-url")
async def generate_url(
    request: Request,
    settings: SettingsDep,
    id: str | None = None,
) -> dict[str, str]:
    """Signed receive URL for an endpoint id."""
    if not id:
        raise InvalidRequestError("Missing id")
    secret = settings.auth.api_token
    if secret is None:
        raise NotConfiguredError("No API token configured")

    base_url = settings.api.public_base_url or str(request.base_url)
    return {"url": tokens.build_url(base_url, id, secret)}
