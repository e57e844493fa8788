"""Unit tests for alias routes and LINE name resolution."""

from collections.abc import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tests.factories import HitFactory, make_settings
from tests.factories import LinePayloadFactory as LP
from webhook_relay.api.dependencies import get_http_client
from webhook_relay.config.models import LineConfig
from webhook_relay.stores.inmemory import InMemoryAliasStore, InMemoryHitStore
from webhook_relay.stores.models import utc_now

GROUP = "Cgroup0000000000000000000000000001"
USER = "Uuser00000000000000000000000000001"


@pytest.fixture
async def line_enabled(app: FastAPI, with_settings) -> AsyncIterator[list[httpx.Request]]:
    """Configure a LINE token and serve lookups from a canned API."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == f"/v2/bot/group/{GROUP}/summary":
            return httpx.Response(200, json={"groupId": GROUP, "groupName": "Ops"})
        return httpx.Response(404, json={"message": "Not found"})

    with_settings(make_settings(line=LineConfig(channel_access_token="line-token")))
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        app.dependency_overrides[get_http_client] = lambda: client
        yield seen


class TestAliasCrud:
    async def test_put_creates(self, authed: TestClient, alias_store: InMemoryAliasStore) -> None:
        response = authed.put("/api/aliases", json={"value": GROUP, "label": "Ops"})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "value": GROUP, "label": "Ops"}
        assert await alias_store.label_map() == {GROUP: "Ops"}

    async def test_put_relabels(self, authed: TestClient, alias_store: InMemoryAliasStore) -> None:
        authed.put("/api/aliases", json={"value": GROUP, "label": "Ops"})
        authed.put("/api/aliases", json={"value": GROUP, "label": "Operations"})

        aliases = await alias_store.list_all()
        assert [(a.value, a.label) for a in aliases] == [(GROUP, "Operations")]

    def test_put_missing_label_400(self, authed: TestClient) -> None:
        response = authed.put("/api/aliases", json={"value": GROUP})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing value or label"}

    def test_list(self, authed: TestClient) -> None:
        authed.put("/api/aliases", json={"value": GROUP, "label": "Ops"})

        aliases = authed.get("/api/aliases").json()

        assert [a["label"] for a in aliases] == ["Ops"]
        assert {"id", "value", "label", "created_at"} <= set(aliases[0])

    async def test_delete_by_id(self, authed: TestClient, alias_store: InMemoryAliasStore) -> None:
        alias = await alias_store.upsert(GROUP, "Ops")

        response = authed.delete(f"/api/aliases/{alias.id}")

        assert response.json() == {"ok": True}
        assert await alias_store.list_all() == []

    def test_delete_non_numeric_id_400(self, authed: TestClient) -> None:
        assert authed.delete("/api/aliases/abc").status_code == 400


class TestUnknownIdentifiers:
    async def test_lists_unaliased_ids(
        self,
        authed: TestClient,
        hit_store: InMemoryHitStore,
        alias_store: InMemoryAliasStore,
    ) -> None:
        body = LP.body(LP.event(group_id=GROUP, user_id=USER, text="hi"))
        now = utc_now()
        await hit_store.record(HitFactory.create(now, endpoint="line", body=body))
        await hit_store.record(HitFactory.create(now, endpoint="line", body=body))
        await alias_store.upsert(GROUP, "Ops")

        response = authed.get("/api/aliases/unknown")

        assert response.status_code == 200
        unknown = response.json()
        assert len(unknown) == 1
        assert unknown[0]["id"] == USER
        assert unknown[0]["type"] == "user"
        assert unknown[0]["count"] == 2
        assert unknown[0]["seen_in_groups"] == ["Ops"]

    def test_empty(self, authed: TestClient) -> None:
        assert authed.get("/api/aliases/unknown").json() == []


class TestResolve:
    def test_without_line_token_500(self, authed: TestClient) -> None:
        response = authed.post("/api/aliases/resolve", json={"id": GROUP})

        assert response.status_code == 500
        assert response.json() == {"error": "No LINE channel access token configured"}

    def test_missing_id_400(self, authed: TestClient, line_enabled) -> None:
        response = authed.post("/api/aliases/resolve", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing id"}

    async def test_resolves_and_stores(
        self,
        authed: TestClient,
        alias_store: InMemoryAliasStore,
        line_enabled: list[httpx.Request],
    ) -> None:
        response = authed.post("/api/aliases/resolve", json={"id": GROUP})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "value": GROUP, "label": "Ops"}
        assert await alias_store.label_map() == {GROUP: "Ops"}
        assert line_enabled[0].headers["authorization"] == "Bearer line-token"

    def test_unresolvable_404(self, authed: TestClient, line_enabled) -> None:
        response = authed.post("/api/aliases/resolve", json={"id": USER, "groupId": GROUP})

        assert response.status_code == 404
        assert response.json() == {
            "error": "Could not resolve name from LINE API",
            "ok": False,
        }
