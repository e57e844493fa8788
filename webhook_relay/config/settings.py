"""Root settings model for the relay.

Values resolve from, highest priority first: constructor arguments,
``RELAY_*`` environment variables (``__`` separates nested keys), the
merged TOML layers, then model defaults.
"""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from webhook_relay.config.models.api import APIConfig, AuthConfig
from webhook_relay.config.models.line import LineConfig
from webhook_relay.config.models.observability import ObservabilityConfig
from webhook_relay.config.models.relay import RelayConfig
from webhook_relay.config.models.storage import StorageConfig

# Merged TOML layers, installed by get_settings() before Settings() is built
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the TOML values the next Settings() will read."""
    global _toml_config
    _toml_config = dict(config)


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the installed TOML values."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return {key: value for key, value in _toml_config.items() if value is not None}


class Settings(BaseSettings):
    """All relay configuration, one nested model per TOML table."""

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="webhook-relay", description="Service name in logs")
    debug: bool = Field(default=False, description="Enable debug mode")

    api: APIConfig = Field(default_factory=APIConfig, description="HTTP server")
    auth: AuthConfig = Field(default_factory=AuthConfig, description="Shared secret and session")
    relay: RelayConfig = Field(
        default_factory=RelayConfig,
        description="Receive, forward, retention and reporting",
    )
    line: LineConfig = Field(default_factory=LineConfig, description="LINE Messaging API access")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage backend")
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging and metrics",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
