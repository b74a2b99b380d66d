"""HTTP tests for the toast notification feed."""

from fastapi.testclient import TestClient


def feed(client: TestClient, headers: dict, **params) -> list[dict]:
    response = client.get("/v1/notifications", headers=headers, params=params)
    assert response.status_code == 200
    return response.json()["data"]


def test_seeded_feed_is_newest_first(client: TestClient, user_headers: dict) -> None:
    items = feed(client, user_headers)

    assert [n["id"] for n in items] == ["1", "2", "3"]
    assert items[2]["duration"] == 0


def test_push_uses_type_defaults(client: TestClient, user_headers: dict) -> None:
    response = client.post(
        "/v1/notifications",
        headers=user_headers,
        json={"type": "error", "message": "Something broke"},
    )

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["title"] == "Error"
    assert created["duration"] == 8000
    assert feed(client, user_headers)[0]["id"] == created["id"]


def test_push_requires_message(client: TestClient, user_headers: dict) -> None:
    response = client.post("/v1/notifications", headers=user_headers, json={"type": "info", "message": ""})

    assert response.status_code == 422


def test_mark_read_and_unread_filter(client: TestClient, user_headers: dict) -> None:
    response = client.post("/v1/notifications/2/read", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["data"]["read"] is True
    assert [n["id"] for n in feed(client, user_headers, unread_only=True)] == ["1", "3"]


def test_dismiss(client: TestClient, user_headers: dict) -> None:
    assert client.delete("/v1/notifications/3", headers=user_headers).status_code == 200
    assert [n["id"] for n in feed(client, user_headers)] == ["1", "2"]

    response = client.delete("/v1/notifications/3", headers=user_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "notification_not_found"


def test_clear_all(client: TestClient, user_headers: dict) -> None:
    response = client.delete("/v1/notifications", headers=user_headers)

    assert response.json()["data"] == {"cleared": 3}
    assert feed(client, user_headers) == []
