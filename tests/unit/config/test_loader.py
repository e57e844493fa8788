"""Unit tests for the TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from webhook_relay.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
)


class TestDeepMerge:
    def test_later_layer_wins(self) -> None:
        assert deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_tables_merge_key_by_key(self) -> None:
        base = {"relay": {"body_limit": 4096, "retention_days": 7}, "debug": False}

        merged = deep_merge(base, {"relay": {"retention_days": 3}})

        assert merged == {"relay": {"body_limit": 4096, "retention_days": 3}, "debug": False}

    def test_scalar_replaces_table(self) -> None:
        assert deep_merge({"api": {"port": 8787}}, {"api": "replaced"}) == {"api": "replaced"}

    def test_inputs_untouched(self) -> None:
        base = {"storage": {"backend": "postgres"}}
        override = {"storage": {"backend": "inmemory"}}

        deep_merge(base, override)

        assert base == {"storage": {"backend": "postgres"}}
        assert override == {"storage": {"backend": "inmemory"}}


class TestLoadToml:
    def test_parses_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.toml"
        path.write_text('[relay]\nline_endpoint = "line"\nbody_limit = 42')

        assert load_toml(path) == {"relay": {"line_endpoint": "line", "body_limit": 42}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="nonexistent.toml"):
            load_toml(tmp_path / "nonexistent.toml")

    def test_invalid_syntax(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.toml"
        path.write_text("cors_origins = [unclosed")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(path)


class TestGetEnvironment:
    def test_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELAY_ENV", "production")
        assert get_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RELAY_ENV", raising=False)
        assert get_environment() == "development"

    def test_empty_means_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELAY_ENV", "")
        assert get_environment() == "development"


class TestGetConfigDir:
    def test_env_var_wins(self, config_dir: Path) -> None:
        assert get_config_dir() == config_dir

    def test_env_var_must_exist(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELAY_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_found_from_subdirectory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "default.toml").write_text("debug = false")
        nested = tmp_path / "deploy" / "scripts"
        nested.mkdir(parents=True)
        monkeypatch.delenv("RELAY_CONFIG_DIR", raising=False)
        monkeypatch.chdir(nested)

        assert get_config_dir() == tmp_path / "config"


class TestLoadConfig:
    def test_default_layer_only(self, write_config) -> None:
        write_config(default="app_name = 'relay-test'\ndebug = false")

        assert load_config() == {"app_name": "relay-test", "debug": False}

    def test_environment_layer_merged(self, write_config) -> None:
        write_config(
            default="[storage]\nbackend = 'postgres'\n[relay]\nretention_days = 7",
            test="[storage]\nbackend = 'inmemory'",
        )

        assert load_config() == {
            "storage": {"backend": "inmemory"},
            "relay": {"retention_days": 7},
        }

    def test_other_environment_ignored(self, write_config) -> None:
        write_config(default="debug = false", production="debug = true")

        assert load_config() == {"debug": False}

    def test_missing_default_raises(self, config_dir: Path) -> None:
        with pytest.raises(FileNotFoundError, match="default.toml"):
            load_config()
