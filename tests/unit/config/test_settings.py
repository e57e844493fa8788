"""Unit tests for Settings and get_settings."""

from pathlib import Path

import pytest

from webhook_relay.config import get_settings, reload_settings
from webhook_relay.config.settings import Settings, set_toml_config


@pytest.fixture(autouse=True)
def empty_toml_config():
    """Start every test without TOML values left over from get_settings()."""
    set_toml_config({})
    yield
    set_toml_config({})


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.app_name == "webhook-relay"
        assert settings.debug is False
        assert settings.api.port == 8787
        assert settings.auth.api_token is None
        assert settings.relay.body_limit == 4096
        assert settings.storage.backend == "postgres"
        assert settings.observability.metrics.enabled is True

    def test_toml_values_used(self) -> None:
        set_toml_config({"relay": {"retention_days": 14}, "line": {"channel_access_token": "t"}})

        settings = Settings()

        assert settings.relay.retention_days == 14
        assert settings.line.channel_access_token == "t"

    def test_constructor_beats_toml(self) -> None:
        set_toml_config({"debug": False})
        assert Settings(debug=True).debug is True


class TestGetSettings:
    def test_built_from_config_dir(self, write_config) -> None:
        write_config(default="app_name = 'relay-test'")

        settings = get_settings()

        assert isinstance(settings, Settings)
        assert settings.app_name == "relay-test"

    def test_cached(self, write_config) -> None:
        write_config(default="app_name = 'cached'")
        assert get_settings() is get_settings()

    def test_reload(self, write_config) -> None:
        write_config(default="app_name = 'original'")
        assert get_settings().app_name == "original"

        write_config(default="app_name = 'updated'")
        assert reload_settings().app_name == "updated"

    def test_environment_layer(self, write_config) -> None:
        write_config(
            default="[storage]\nbackend = 'postgres'",
            test="[storage]\nbackend = 'inmemory'",
        )
        assert get_settings().storage.backend == "inmemory"

    def test_missing_config_dir_uses_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("RELAY_CONFIG_DIR", raising=False)
        monkeypatch.chdir(tmp_path)

        assert get_settings().relay.retention_days == 7


class TestEnvironmentVariableOverrides:
    def test_top_level(self, write_config, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(default="debug = false")
        monkeypatch.setenv("RELAY_DEBUG", "true")

        assert get_settings().debug is True

    def test_nested_with_double_underscore(
        self, write_config, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_config(default="[relay]\nretention_days = 7")
        monkeypatch.setenv("RELAY_RELAY__RETENTION_DAYS", "3")

        assert get_settings().relay.retention_days == 3

    def test_secret_from_env(self, write_config, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(default="[auth]\ncookie_name = 'api_token'")
        monkeypatch.setenv("RELAY_AUTH__API_TOKEN", "admin:hunter2")

        settings = get_settings()

        assert settings.auth.api_token == "admin:hunter2"
        assert settings.auth.cookie_name == "api_token"

    def test_blank_secret_is_unset(self, write_config, monkeypatch: pytest.MonkeyPatch) -> None:
        write_config(default="")
        monkeypatch.setenv("RELAY_AUTH__API_TOKEN", "  ")

        assert get_settings().auth.api_token is None
