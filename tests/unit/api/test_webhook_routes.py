"""Unit tests for the signed-URL receive endpoints."""

import json

from fastapi.testclient import TestClient

from tests.factories import SECRET, make_settings
from webhook_relay.relay import tokens
from webhook_relay.stores.inmemory import InMemoryHitStore


def _path(endpoint: str, *rest: str) -> str:
    return "/".join(["/w", endpoint, tokens.issue(endpoint, SECRET), *rest])


class TestReceiveRaw:
    def test_accepts_valid_token(self, client: TestClient) -> None:
        response = client.post(_path("test"), content=b'{"a": 1}')

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["endpoint"] == "test"
        assert "received_at" in data
        assert "response_ms" in data
        assert "hit_id" not in data

    async def test_hit_recorded(self, client: TestClient, hit_store: InMemoryHitStore) -> None:
        client.post(_path("test"), content=b"payload")

        hits = await hit_store.query()
        assert [(h.endpoint, h.body, h.suffix) for h in hits] == [("test", "payload", None)]

    async def test_invalid_token_401(
        self, client: TestClient, hit_store: InMemoryHitStore
    ) -> None:
        response = client.post("/w/test/not-the-token", content=b"{}")

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid webhook token"}
        assert await hit_store.query() == []

    def test_token_for_other_endpoint_401(self, client: TestClient) -> None:
        token = tokens.issue("other", SECRET)
        assert client.post(f"/w/test/{token}", content=b"{}").status_code == 401

    def test_no_secret_accepts_anything(self, client: TestClient, with_settings) -> None:
        with_settings(make_settings(api_token=None))
        assert client.post("/w/test/whatever", content=b"{}").status_code == 200

    def test_get_not_allowed(self, client: TestClient) -> None:
        assert client.get(_path("test")).status_code == 405


class TestReceiveSuffix:
    async def test_suffix_stored_and_echoed(
        self, client: TestClient, hit_store: InMemoryHitStore
    ) -> None:
        response = client.post(_path("stripe", "events"), content=b"{}")

        assert response.status_code == 200
        assert response.json()["suffix"] == "events"
        assert (await hit_store.query())[0].suffix == "/events"


class TestReceiveGitHub:
    async def test_digest_stored(self, client: TestClient, hit_store: InMemoryHitStore) -> None:
        payload = {"repository": {"full_name": "acme/relay"}, "sender": {"login": "octo"}}

        response = client.post(
            _path("gh", "github"),
            content=json.dumps(payload).encode(),
            headers={"X-GitHub-Event": "star", "Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["event"] == "star"
        hit = (await hit_store.query())[0]
        assert hit.suffix == "/github"
        assert hit.body == "[acme/relay] octo starred the repo"

    def test_github_requires_token(self, client: TestClient) -> None:
        response = client.post("/w/gh/bad/github", content=b"{}")
        assert response.status_code == 401
