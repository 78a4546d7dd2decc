"""Integration tests for the notification inbox endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from arsana.api.app import app
from arsana.notifications import NotificationCreate, NotificationRepository


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seeded(db):
    def notify(title, user_id=None):
        return NotificationRepository.create(
            NotificationCreate(title=title, message=f"{title} body", user_id=user_id)
        )

    return {
        "alice": notify("Reminder for alice", "alice"),
        "bob": notify("Reminder for bob", "bob"),
        "global": notify("Weekly Summary"),
    }


def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-ID": user_id}


def test_list_notifications(client, seeded):
    response = client.get("/api/notifications", headers=as_user("alice"))

    assert response.status_code == 200
    body = response.json()
    assert {n["title"] for n in body["notifications"]} == {"Reminder for alice", "Weekly Summary"}
    assert body["pagination"] == {"current": 1, "limit": 20, "total": 2, "pages": 1}
    assert body["unreadCount"] == 2

    first = body["notifications"][0]
    assert set(first) >= {"id", "title", "message", "type", "isRead", "userId", "createdAt"}


def test_list_pagination_params(client, seeded):
    response = client.get(
        "/api/notifications", params={"page": "2", "limit": "1"}, headers=as_user("alice")
    )

    body = response.json()
    assert len(body["notifications"]) == 1
    assert body["pagination"] == {"current": 2, "limit": 1, "total": 2, "pages": 2}


def test_mark_own_notification_read(client, seeded):
    notification_id = seeded["alice"].id

    response = client.put(f"/api/notifications/{notification_id}/read", headers=as_user("alice"))

    assert response.status_code == 204
    assert NotificationRepository.get_by_id(notification_id).is_read is True

    body = client.get(
        "/api/notifications", params={"unreadOnly": "true"}, headers=as_user("alice")
    ).json()
    assert [n["title"] for n in body["notifications"]] == ["Weekly Summary"]
    assert body["unreadCount"] == 1


def test_mark_global_notification_read(client, seeded):
    response = client.put(
        f"/api/notifications/{seeded['global'].id}/read", headers=as_user("bob")
    )

    assert response.status_code == 204


def test_cannot_mark_someone_elses_notification(client, seeded):
    response = client.put(f"/api/notifications/{seeded['bob'].id}/read", headers=as_user("alice"))

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized"}
    assert NotificationRepository.get_by_id(seeded["bob"].id).is_read is False


def test_mark_missing_notification(client, seeded):
    response = client.put("/api/notifications/does-not-exist/read", headers=as_user("alice"))

    assert response.status_code == 404
    assert response.json() == {"error": "Notification not found"}


def test_mark_all_read(client, seeded):
    response = client.put("/api/notifications/read-all", headers=as_user("alice"))

    assert response.status_code == 204
    assert client.get("/api/notifications", headers=as_user("alice")).json()["unreadCount"] == 0
    assert client.get("/api/notifications", headers=as_user("bob")).json()["unreadCount"] == 1


def test_storage_failure_returns_generic_500(client, tmp_path, monkeypatch):
    from arsana.infrastructure.database import reset_pool

    monkeypatch.setenv("ARSANA_DB_PATH", str(tmp_path / "missing.db"))
    reset_pool()

    response = client.get("/api/notifications", headers=as_user("alice"))

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    reset_pool()


def test_root_and_health(client, db):
    root = client.get("/").json()
    assert root["service"] == "Arsana Letter Archive API"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["scheduler"] == {"running": False, "jobs": []}


def test_huge_page_and_limit_are_clamped(client, seeded):
    response = client.get(
        "/api/notifications",
        params={"page": "99999999999999999999", "limit": "99999999999999999999"},
        headers=as_user("alice"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["notifications"] == []
    assert body["pagination"]["current"] == 1_000_000
    assert body["pagination"]["limit"] == 100
    assert body["pagination"]["total"] == 2
