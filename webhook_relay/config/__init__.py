"""Relay configuration.

    from webhook_relay.config import get_settings

    secret = get_settings().auth.api_token
"""

from functools import lru_cache

from webhook_relay.config.loader import load_config
from webhook_relay.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built on first use.

    Without a config directory the relay runs on model defaults plus
    RELAY_* variables.
    """
    try:
        toml_values = load_config()
    except FileNotFoundError:
        toml_values = {}
    set_toml_config(toml_values)
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached settings and build them again."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
