"""Configuration model exports.

    from webhook_relay.config.models import APIConfig, RelayConfig
"""

from webhook_relay.config.models.api import APIConfig, AuthConfig
from webhook_relay.config.models.line import LineConfig
from webhook_relay.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from webhook_relay.config.models.relay import RelayConfig
from webhook_relay.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    # API
    "APIConfig",
    "AuthConfig",
    # LINE
    "LineConfig",
    # Observability
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    # Relay
    "RelayConfig",
    # Storage
    "PostgresConfig",
    "StorageConfig",
]
