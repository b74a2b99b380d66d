"""HTTP tests for the overview, analytics and navigation endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.services.dashboard_service import server_load_status


class TestDashboard:
    def test_stats_jitter_stays_in_range(self, client: TestClient, admin_headers: dict) -> None:
        for _ in range(5):
            data = client.get("/v1/dashboard/stats", headers=admin_headers).json()["data"]
            assert data["total_users"] == 24593
            assert 1100 <= data["active_sessions"] <= 1399
            assert 35 <= data["server_load"] <= 64
            assert data["server_load_status"] == "stable"

    @pytest.mark.parametrize(
        "path, first",
        [
            ("/v1/dashboard/user-growth", {"name": "Jan", "value": 15000, "value2": 12000}),
            ("/v1/dashboard/traffic", {"name": "Direct", "value": 35}),
            ("/v1/dashboard/revenue", {"name": "Mon", "value": 4200}),
        ],
    )
    def test_chart_series(self, client: TestClient, user_headers: dict, path: str, first: dict) -> None:
        response = client.get(path, headers=user_headers)

        assert response.status_code == 200
        point = response.json()["data"][0]
        assert {k: point[k] for k in first} == first

    def test_activities_newest_first(self, client: TestClient, admin_headers: dict) -> None:
        data = client.get("/v1/dashboard/activities?limit=3", headers=admin_headers).json()["data"]

        assert len(data) == 3
        assert data[0]["type"] == "login"
        timestamps = [item["timestamp"] for item in data]
        assert timestamps == sorted(timestamps, reverse=True)

    def test_activities_limit_is_bounded(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/v1/dashboard/activities?limit=0", headers=admin_headers)

        assert response.status_code == 422


@pytest.mark.parametrize(
    "load, expected",
    [(0, "stable"), (69, "stable"), (70, "warning"), (89, "warning"), (90, "critical"), (100, "critical")],
)
def test_server_load_status_thresholds(load: int, expected: str) -> None:
    assert server_load_status(load) == expected


class TestAnalytics:
    def test_overview(self, client: TestClient, moderator_headers: dict) -> None:
        data = client.get("/v1/analytics/overview", headers=moderator_headers).json()["data"]

        assert data["page_views"] == 45200
        assert data["bounce_rate_change"] == -3.1

    @pytest.mark.parametrize("series, length", [("page-views", 7), ("bounce-rate", 5), ("devices", 3), ("browsers", 4)])
    def test_series(self, client: TestClient, admin_headers: dict, series: str, length: int) -> None:
        response = client.get(f"/v1/analytics/{series}", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()["data"]) == length

    def test_unknown_series(self, client: TestClient, admin_headers: dict) -> None:
        response = client.get("/v1/analytics/heatmap", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "analytics_series_not_found"

    def test_tables(self, client: TestClient, admin_headers: dict) -> None:
        pages = client.get("/v1/analytics/top-pages", headers=admin_headers).json()["data"]
        geo = client.get("/v1/analytics/geography", headers=admin_headers).json()["data"]

        assert pages[0] == {"path": "/", "views": 12500, "avg_time": "2:45"}
        assert geo[0]["country"] == "United States"

    def test_plain_user_forbidden(self, client: TestClient, user_headers: dict) -> None:
        assert client.get("/v1/analytics/overview", headers=user_headers).status_code == 403


class TestNavigation:
    @pytest.mark.parametrize(
        "fixture, expected",
        [
            ("admin_headers", ["dashboard", "users", "analytics", "reports", "settings"]),
            ("moderator_headers", ["dashboard", "users", "analytics", "settings"]),
            ("user_headers", ["dashboard", "settings"]),
        ],
    )
    def test_items_follow_role(
        self, client: TestClient, request: pytest.FixtureRequest, fixture: str, expected: list
    ) -> None:
        headers = request.getfixturevalue(fixture)

        data = client.get("/v1/navigation", headers=headers).json()["data"]

        assert [item["id"] for item in data] == expected

    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/v1/navigation").status_code == 401
