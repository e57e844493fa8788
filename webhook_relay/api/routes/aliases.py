"""Alias management and LINE id resolution endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from webhook_relay.api.dependencies import AliasResolverDep, AliasStoreDep, ServiceDep
from webhook_relay.api.exceptions import (
    InvalidRequestError,
    NotConfiguredError,
    UpstreamLookupError,
)
from webhook_relay.api.middleware.auth import require_session
from webhook_relay.api.models.requests import AliasRequest, ResolveAliasRequest
from webhook_relay.observability.logging import get_logger
from webhook_relay.relay.line import UnknownIdentifier
from webhook_relay.stores.models import Alias

logger = get_logger(__name__)

router = APIRouter(prefix="/api/aliases", dependencies=[Depends(require_session)])


@router.get("")
async def list_aliases(alias_store: AliasStoreDep) -> list[Alias]:
    """All aliases."""
    return await alias_store.list_all()


@router.put("")
async def put_alias(body: AliasRequest, alias_store: AliasStoreDep) -> dict[str, Any]:
    """Create an alias or relabel an existing value."""
    if not body.value or not body.label:
        raise InvalidRequestError("Missing value or label")
    alias = await alias_store.upsert(body.value, body.label)
    logger.info("alias_set", alias_id=alias.id)
    return {"ok": True, "value": alias.value, "label": alias.label}


@router.delete("/{alias_id}")
async def delete_alias(alias_id: int, alias_store: AliasStoreDep) -> dict[str, bool]:
    """Delete an alias by id (no-op if absent)."""
    await alias_store.delete(alias_id)
    return {"ok": True}


@router.get("/unknown")
async def unknown_aliases(service: ServiceDep) -> list[UnknownIdentifier]:
    """LINE ids seen in the last week that have no alias, most frequent first."""
    return await service.unknown_identifiers()


@router.post("/resolve")
async def resolve_alias(
    body: ResolveAliasRequest,
    resolver: AliasResolverDep,
) -> dict[str, Any]:
    """Look up a LINE id's display name and store it as an alias."""
    if resolver is None:
        raise NotConfiguredError("No LINE channel access token configured")
    if not body.id:
        raise InvalidRequestError("Missing id")

    alias = await resolver.resolve_one(body.id, body.groupId)
    if alias is None:
        raise UpstreamLookupError("Could not resolve name from LINE API")
    return {"ok": True, "value": alias.value, "label": alias.label}
