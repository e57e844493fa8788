"""Dashboard statistics endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from webhook_relay.api.dependencies import ServiceDep
from webhook_relay.api.middleware.auth import require_session

router = APIRouter(prefix="/api", dependencies=[Depends(require_session)])


@router.get("/stats")
async def get_stats(service: ServiceDep) -> dict[str, Any]:
    """Totals, recent hits, rules, aliases and storage usage."""
    stats = await service.stats()
    return stats.model_dump(mode="json")
