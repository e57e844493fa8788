"""Console entry point: serve the relay with uvicorn."""

import uvicorn

from webhook_relay.config import get_settings


def main() -> None:
    """Run the API server using host, port and workers from settings."""
    settings = get_settings()
    uvicorn.run(
        "webhook_relay.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        log_level=settings.observability.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
