"""Health check and metrics endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from webhook_relay import __version__
from webhook_relay.api.dependencies import RunnerDep, SettingsDep, get_postgres_pool
from webhook_relay.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(settings: SettingsDep, runner: RunnerDep) -> dict[str, Any]:
    """Service status, storage reachability and background backlog."""
    storage_ok = True
    if settings.storage.backend == "postgres":
        try:
            pool = await get_postgres_pool()
            storage_ok = await pool.health_check()
        except Exception as e:
            logger.warning("health_storage_unreachable", error=str(e))
            storage_ok = False

    return {
        "status": "healthy" if storage_ok else "degraded",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
        "storage": {"backend": settings.storage.backend, "ok": storage_ok},
        "background_tasks": runner.pending,
    }


async def metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
