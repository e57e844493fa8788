"""Unit tests for login, logout and session-protected access."""

from fastapi.testclient import TestClient

from tests.factories import SECRET, make_settings


class TestLogin:
    def test_form_login_sets_cookie(self, client: TestClient) -> None:
        response = client.post(
            "/auth/login", data={"username": "admin", "password": "hunter2"}
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"api_token={SECRET}")
        assert "HttpOnly" in cookie
        assert "Secure" in cookie
        assert "SameSite=strict" in cookie
        assert "Max-Age=86400" in cookie
        assert "Path=/" in cookie

    def test_json_login(self, client: TestClient) -> None:
        response = client.post("/auth/login", json={"username": "admin", "password": "hunter2"})
        assert response.status_code == 200

    def test_wrong_password(self, client: TestClient) -> None:
        response = client.post("/auth/login", data={"username": "admin", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}
        assert "set-cookie" not in response.headers

    def test_missing_fields(self, client: TestClient) -> None:
        assert client.post("/auth/login", json={}).status_code == 401

    def test_no_secret_configured(self, client: TestClient, with_settings) -> None:
        with_settings(make_settings(api_token=None))
        response = client.post("/auth/login", json={"username": "", "password": ""})
        assert response.status_code == 401


class TestLogout:
    def test_clears_cookie(self, client: TestClient) -> None:
        response = client.get("/auth/logout")

        assert response.status_code == 200
        assert "Max-Age=0" in response.headers["set-cookie"]


class TestMe:
    def test_anonymous(self, client: TestClient) -> None:
        assert client.get("/api/me").json() == {"loggedIn": False}

    def test_bearer(self, authed: TestClient) -> None:
        assert authed.get("/api/me").json() == {"loggedIn": True}

    def test_cookie(self, client: TestClient) -> None:
        response = client.get("/api/me", headers={"Cookie": f"api_token={SECRET}"})
        assert response.json() == {"loggedIn": True}

    def test_no_secret_means_logged_in(self, client: TestClient, with_settings) -> None:
        with_settings(make_settings(api_token=None))
        assert client.get("/api/me").json() == {"loggedIn": True}


class TestProtectedRoutes:
    def test_missing_credentials_401(self, client: TestClient) -> None:
        for path in ("/api/hits", "/api/stats", "/api/forward-rules", "/api/aliases"):
            response = client.get(path)
            assert response.status_code == 401, path
            assert response.json() == {"error": "Unauthorized"}

    def test_wrong_bearer_401(self, client: TestClient) -> None:
        response = client.get("/api/stats", headers={"Authorization": "Bearer admin:wrong"})
        assert response.status_code == 401

    def test_cookie_grants_access(self, client: TestClient) -> None:
        response = client.get("/api/stats", headers={"Cookie": f"api_token={SECRET}"})
        assert response.status_code == 200

    def test_mcp_post_requires_session(self, client: TestClient) -> None:
        response = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert response.status_code == 401
