"""Forward rule management endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from webhook_relay.api.dependencies import RuleStoreDep, ServiceDep
from webhook_relay.api.middleware.auth import require_session
from webhook_relay.api.models.requests import ForwardRuleRequest
from webhook_relay.stores.models import ForwardRule

router = APIRouter(prefix="/api/forward-rules", dependencies=[Depends(require_session)])


@router.get("")
async def list_forward_rules(rule_store: RuleStoreDep) -> list[ForwardRule]:
    """All forward rules."""
    return await rule_store.list_all()


@router.put("/{endpoint}")
async def put_forward_rule(
    endpoint: str,
    body: ForwardRuleRequest,
    service: ServiceDep,
) -> dict[str, Any]:
    """Create or replace the rule for an endpoint.

    enabled and persist default to true when omitted.
    """
    await service.set_forward_rule(
        endpoint,
        body.forward_url,
        enabled=body.enabled,
        persist=body.persist,
    )
    return {"ok": True, "endpoint": endpoint}


@router.delete("/{endpoint}")
async def delete_forward_rule(endpoint: str, service: ServiceDep) -> dict[str, bool]:
    """Delete the rule for an endpoint (no-op if absent)."""
    await service.delete_forward_rule(endpoint)
    return {"ok": True}
