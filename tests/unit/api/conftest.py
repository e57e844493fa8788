"""Fixtures for API route tests.

Routes run against in-memory stores through app.dependency_overrides.
"""

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.factories import SECRET, make_settings
from webhook_relay.api.app import _register_exception_handlers
from webhook_relay.api.dependencies import (
    get_alias_store,
    get_http_client,
    get_hit_store,
    get_rule_store,
    get_runner,
    get_settings,
    reset_dependencies,
)
from webhook_relay.api.routes import register_routes
from webhook_relay.config.settings import Settings
from webhook_relay.relay.background import BackgroundRunner
from webhook_relay.stores.inmemory import (
    InMemoryAliasStore,
    InMemoryForwardRuleStore,
    InMemoryHitStore,
)

AUTH = {"Authorization": f"Bearer {SECRET}"}


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def runner() -> BackgroundRunner:
    return BackgroundRunner()


@pytest.fixture
def http_client() -> httpx.AsyncClient:
    """Outbound client that refuses every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("outbound disabled in tests", request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
async def app(
    settings: Settings,
    hit_store: InMemoryHitStore,
    rule_store: InMemoryForwardRuleStore,
    alias_store: InMemoryAliasStore,
    runner: BackgroundRunner,
    http_client: httpx.AsyncClient,
) -> FastAPI:
    """Create test FastAPI app with every route and error handler."""
    await reset_dependencies()

    app = FastAPI()
    _register_exception_handlers(app)
    register_routes(app, settings)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_hit_store] = lambda: hit_store
    app.dependency_overrides[get_rule_store] = lambda: rule_store
    app.dependency_overrides[get_alias_store] = lambda: alias_store
    app.dependency_overrides[get_runner] = lambda: runner
    app.dependency_overrides[get_http_client] = lambda: http_client

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client without credentials."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def authed(app: FastAPI) -> TestClient:
    """Test client sending the bearer secret."""
    return TestClient(app, headers=AUTH, raise_server_exceptions=False)


@pytest.fixture
def with_settings(app: FastAPI) -> Callable[[Settings], None]:
    """Swap the settings a test app sees."""

    def _apply(new_settings: Settings) -> None:
        app.dependency_overrides[get_settings] = lambda: new_settings

    return _apply
