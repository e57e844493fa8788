"""API route registration."""

from fastapi import FastAPI

from webhook_relay.api.mcp.handlers import router as mcp_router
from webhook_relay.api.routes.aliases import router as aliases_router
from webhook_relay.api.routes.health import metrics
from webhook_relay.api.routes.health import router as health_router
from webhook_relay.api.routes.hits import router as hits_router
from webhook_relay.api.routes.rules import router as rules_router
from webhook_relay.api.routes.session import router as session_router
from webhook_relay.api.routes.stats import router as stats_router
from webhook_relay.api.routes.webhooks import router as webhooks_router
from webhook_relay.config import Settings
from webhook_relay.observability.logging import get_logger

logger = get_logger(__name__)


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register all routers with the application.

    Args:
        app: FastAPI application
        settings: Settings controlling the metrics endpoint
    """
    app.include_router(health_router, tags=["Health"])
    app.include_router(webhooks_router, tags=["Webhooks"])
    app.include_router(session_router, tags=["Session"])
    app.include_router(hits_router, tags=["Hits"])
    app.include_router(rules_router, tags=["Forward rules"])
    app.include_router(aliases_router, tags=["Aliases"])
    app.include_router(stats_router, tags=["Stats"])
    app.include_router(mcp_router)

    if settings.observability.metrics.enabled:
        app.add_api_route(
            settings.observability.metrics.path,
            metrics,
            methods=["GET"],
            tags=["Health"],
        )

    logger.debug("routes_registered")
