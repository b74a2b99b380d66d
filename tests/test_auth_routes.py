"""HTTP tests for login, logout, refresh, /me and request authentication."""

from fastapi.testclient import TestClient

from tests.conftest import ADMIN_EMAIL, DEVELOPMENT_KEY, PRODUCTION_KEY, REVOKED_KEY, bearer, login


class TestLoginEndpoint:
    def test_login_returns_session_envelope(self, client: TestClient) -> None:
        response = client.post("/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "password"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["role"] == "admin"
        assert body["data"]["token"]
        assert body["data"]["refresh_token"]
        assert isinstance(body["data"]["expires_at"], int)

    def test_wrong_password_is_401(self, client: TestClient) -> None:
        response = client.post("/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "nope-nope"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "invalid_credentials"

    def test_malformed_email_is_400_with_field_errors(self, client: TestClient) -> None:
        response = client.post("/v1/auth/login", json={"email": "admin", "password": "123"})

        assert response.status_code == 400
        fields = response.json()["error"]["details"]["fields"]
        assert fields == {
            "email": "Invalid email format",
            "password": "Password must be at least 6 characters",
        }

    def test_repeated_failures_are_throttled(self, client: TestClient) -> None:
        for _ in range(5):
            client.post("/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong-pass"})

        response = client.post("/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "password"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "too_many_login_attempts"
        assert int(response.headers["Retry-After"]) > 0


class TestSessionEndpoints:
    def test_me_returns_current_user(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/v1/auth/me", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["email"] == ADMIN_EMAIL

    def test_me_without_token(self, client: TestClient) -> None:
        response = client.get("/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "not_authenticated"

    def test_non_bearer_scheme_rejected(self, client: TestClient) -> None:
        response = client.get("/v1/auth/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "token_invalid"

    def test_refresh_then_logout(self, client: TestClient) -> None:
        session = login(client)

        refreshed = client.post("/v1/auth/refresh", json={"refresh_token": session["refresh_token"]})
        assert refreshed.status_code == 200
        new_session = refreshed.json()["data"]
        assert new_session["token"] != session["token"]

        assert client.get("/v1/auth/me", headers=bearer(session)).status_code == 401
        assert client.get("/v1/auth/me", headers=bearer(new_session)).status_code == 200

        assert client.post("/v1/auth/logout", headers=bearer(new_session)).status_code == 200
        assert client.get("/v1/auth/me", headers=bearer(new_session)).status_code == 401

    def test_refresh_with_unknown_token(self, client: TestClient) -> None:
        response = client.post("/v1/auth/refresh", json={"refresh_token": "unknown"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "token_invalid"

    def test_login_updates_last_active_and_records_activity(self, client: TestClient) -> None:
        admin = bearer(login(client))
        assert client.get("/v1/users/7", headers=admin).json()["data"]["last_active"] is None

        headers = bearer(login(client, "david@nexus.com"))

        user = client.get("/v1/users/7", headers=admin).json()["data"]
        activities = client.get("/v1/dashboard/activities?limit=5", headers=headers).json()["data"]

        assert user["last_active"] is not None
        assert activities[0]["type"] == "login"
        assert activities[0]["user_id"] == "7"


class TestRequestAuthentication:
    def test_protected_route_requires_credentials(self, client: TestClient) -> None:
        response = client.get("/v1/dashboard/stats")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "not_authenticated"

    def test_api_key_with_read_permission_can_get(self, client: TestClient) -> None:
        response = client.get("/v1/dashboard/stats", headers={"X-API-Key": PRODUCTION_KEY})

        assert response.status_code == 200

    def test_api_key_without_delete_permission_is_403(self, client: TestClient) -> None:
        response = client.delete("/v1/users/3", headers={"X-API-Key": DEVELOPMENT_KEY})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "insufficient_permissions"

    def test_inactive_api_key_is_401(self, client: TestClient) -> None:
        response = client.get("/v1/dashboard/stats", headers={"X-API-Key": REVOKED_KEY})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_api_key"

    def test_non_ascii_api_key_is_401(self, client: TestClient) -> None:
        # Header bytes arrive latin-1 decoded
        response = client.get(
            "/v1/dashboard/stats",
            headers={"X-API-Key": (PRODUCTION_KEY[:-1] + "\xe9").encode("latin-1")},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "invalid_api_key"

    def test_api_key_use_stamps_last_used(self, client: TestClient, admin_headers: dict) -> None:
        before = client.get("/v1/settings/api-keys", headers=admin_headers).json()["data"]
        client.get("/v1/dashboard/stats", headers={"X-API-Key": DEVELOPMENT_KEY})
        after = client.get("/v1/settings/api-keys", headers=admin_headers).json()["data"]

        def last_used(keys: list, key_id: str) -> str:
            return next(k["last_used_at"] for k in keys if k["id"] == key_id)

        assert last_used(after, "2") > last_used(before, "2")
