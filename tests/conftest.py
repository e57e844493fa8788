"""Shared test fixtures for the webhook relay test suite."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from webhook_relay.config import get_settings
from webhook_relay.config.models.relay import RelayConfig
from webhook_relay.stores.inmemory import (
    InMemoryAliasStore,
    InMemoryForwardRuleStore,
    InMemoryHitStore,
)

# Configuration


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty config directory selected via RELAY_CONFIG_DIR.

    RELAY_ENV is set to "test"; write test.toml to add an environment layer.
    """
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.setenv("RELAY_CONFIG_DIR", str(directory))
    monkeypatch.setenv("RELAY_ENV", "test")
    return directory


@pytest.fixture
def write_config(config_dir: Path) -> Callable[..., None]:
    """Write TOML layers into config_dir, e.g. ``write_config(default="debug = true")``."""

    def _write(**layers: str) -> None:
        for name, content in layers.items():
            (config_dir / f"{name}.toml").write_text(content)

    return _write


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Rebuild settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Stores


@pytest.fixture
def hit_store() -> InMemoryHitStore:
    """Fresh in-memory hit store."""
    return InMemoryHitStore()


@pytest.fixture
def rule_store() -> InMemoryForwardRuleStore:
    """Fresh in-memory forward rule store."""
    return InMemoryForwardRuleStore()


@pytest.fixture
def alias_store() -> InMemoryAliasStore:
    """Fresh in-memory alias store."""
    return InMemoryAliasStore()


@pytest.fixture
def relay_config() -> RelayConfig:
    """Relay config with defaults (UTC+7, 4096-char body limit)."""
    return RelayConfig()
