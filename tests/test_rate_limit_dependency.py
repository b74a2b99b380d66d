"""Integration tests for the per-caller rate limit on API routes."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import AppSettings, Settings, settings
from tests.conftest import DEVELOPMENT_KEY, bearer, login


@pytest.fixture
def app() -> FastAPI:
    """An app built with rate limiting switched on."""
    return create_app(Settings(app=AppSettings(rate_limit_enabled=True)))


@pytest.fixture
def limited(client: TestClient, admin_headers: dict) -> TestClient:
    """Client with rate limiting on and a budget of 3 requests per minute."""
    response = client.patch(
        "/v1/settings",
        headers=admin_headers,
        json={"rate_limit_requests": 3, "rate_limit_window": 60},
    )
    assert response.status_code == 200
    return client


def test_headers_count_down_then_429(limited: TestClient, admin_headers: dict) -> None:
    remaining = []
    for _ in range(3):
        response = limited.get("/v1/dashboard/revenue", headers=admin_headers)
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "3"
        remaining.append(response.headers["X-RateLimit-Remaining"])

    blocked = limited.get("/v1/dashboard/revenue", headers=admin_headers)

    assert remaining == ["2", "1", "0"]
    assert blocked.status_code == 429
    body = blocked.json()
    assert body["error"]["code"] == "rate_limit_exceeded"
    assert body["error"]["details"]["limit"] == 3
    assert 0 < int(blocked.headers["Retry-After"]) <= 60
    assert blocked.headers["X-RateLimit-Remaining"] == "0"


def test_budgets_are_per_principal(limited: TestClient, admin_headers: dict, moderator_headers: dict) -> None:
    for _ in range(3):
        limited.get("/v1/dashboard/revenue", headers=admin_headers)

    assert limited.get("/v1/dashboard/revenue", headers=admin_headers).status_code == 429
    assert limited.get("/v1/dashboard/revenue", headers=moderator_headers).status_code == 200
    assert limited.get("/v1/dashboard/revenue", headers={"X-API-Key": DEVELOPMENT_KEY}).status_code == 200


def test_status_endpoint_reflects_usage(limited: TestClient, admin_headers: dict) -> None:
    limited.get("/v1/dashboard/revenue", headers=admin_headers)

    data = limited.get("/v1/settings/rate-limit", headers=admin_headers).json()["data"]

    assert data["enabled"] is True
    assert data["limit"] == 3
    assert data["remaining"] == 1
    assert data["window_seconds"] == 60


def test_changing_limits_starts_fresh_budget(limited: TestClient, admin_headers: dict) -> None:
    for _ in range(3):
        limited.get("/v1/dashboard/revenue", headers=admin_headers)
    assert limited.get("/v1/dashboard/revenue", headers=admin_headers).status_code == 429

    # The admin's budget is spent, so raise the limit from an API key with write access.
    response = limited.patch(
        "/v1/settings",
        headers={"X-API-Key": DEVELOPMENT_KEY},
        json={"rate_limit_requests": 10},
    )
    assert response.status_code == 200

    assert limited.get("/v1/dashboard/revenue", headers=admin_headers).status_code == 200


def test_limiter_follows_app_config_not_process_settings(client: TestClient, admin_headers: dict) -> None:
    assert settings.app.rate_limit_enabled is False

    response = client.get("/v1/dashboard/revenue", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "100"
    assert response.headers["X-RateLimit-Remaining"] == "99"


def test_disabled_limiter_sends_no_headers() -> None:
    client = TestClient(create_app(Settings(app=AppSettings(rate_limit_enabled=False))))

    response = client.get("/v1/dashboard/revenue", headers=bearer(login(client)))
    status = client.get("/v1/settings/rate-limit", headers=bearer(login(client))).json()["data"]

    assert response.status_code == 200
    assert "X-RateLimit-Limit" not in response.headers
    assert status["enabled"] is False


def test_429_omits_budget_headers_when_disabled_in_app_config() -> None:
    client = TestClient(
        create_app(Settings(app=AppSettings(rate_limit_enabled=True, rate_limit_include_headers=False)))
    )
    headers = bearer(login(client))
    client.patch("/v1/settings", headers=headers, json={"rate_limit_requests": 1})

    client.get("/v1/dashboard/revenue", headers=headers)
    blocked = client.get("/v1/dashboard/revenue", headers=headers)

    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers
    assert "X-RateLimit-Limit" not in blocked.headers
