"""
Integration tests for the calendar endpoints.

The app's lifespan is not entered, so no scheduler is started; the `db`
fixture provides the schema instead.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from arsana.api.app import app
from arsana.api.dependencies import get_calendar_service
from arsana.calendar import CalendarService
from arsana.letters import LetterKind


class FailingCalendarService:
    def get_calendar_events(self, date_range=None):
        raise RuntimeError("no such table: incoming_letters")

    def get_upcoming_events(self, limit=10):
        raise RuntimeError("no such table: incoming_letters")


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_events_response_shape(client, add_letter):
    add_letter(
        LetterKind.OUTGOING,
        event_date=datetime(2023, 12, 15, 10, tzinfo=UTC),
        subject="Rapat Koordinasi",
        letter_number="OUT-001",
        event_location="Aula",
        description="Agenda akhir tahun",
    )

    response = client.get("/api/calendar/events")

    assert response.status_code == 200
    (event,) = response.json()["events"]
    assert event["title"] == "Rapat Koordinasi"
    assert event["letterNumber"] == "OUT-001"
    assert event["type"] == "outgoing"
    assert event["location"] == "Aula"
    assert event["description"] == "Agenda akhir tahun"
    assert event["date"].startswith("2023-12-15T10:00:00")


def test_events_filtered_by_date_range(client, add_letter):
    add_letter(event_date=datetime(2023, 12, 15, 10, tzinfo=UTC), subject="In range")
    add_letter(event_date=datetime(2023, 12, 17, 10, tzinfo=UTC), subject="Out of range")

    response = client.get(
        "/api/calendar/events", params={"start": "2023-12-15", "end": "2023-12-16"}
    )

    assert response.status_code == 200
    assert [e["title"] for e in response.json()["events"]] == ["In range"]


@pytest.mark.parametrize(
    "params",
    [
        {"start": "2023-12-16", "end": "2023-12-15"},
        {"start": "yesterday"},
        {"end": "2023-02-30"},
        {"start": "0001-01-01T00:00:00+01:00"},
        {"end": "9999-12-31T23:00:00-05:00"},
    ],
)
def test_invalid_range_returns_400(client, db, params):
    response = client.get("/api/calendar/events", params=params)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid date range"}


def test_events_storage_failure_returns_generic_500(client):
    app.dependency_overrides[get_calendar_service] = FailingCalendarService

    response = client.get("/api/calendar/events")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_upcoming_storage_failure_returns_generic_500(client):
    app.dependency_overrides[get_calendar_service] = FailingCalendarService

    response = client.get("/api/calendar/upcoming")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_upcoming_limit(client, add_letter):
    for day in (15, 16, 17):
        add_letter(event_date=datetime(2023, 12, day, tzinfo=UTC), subject=f"Day {day}")

    app.dependency_overrides[get_calendar_service] = lambda: CalendarService(
        clock=lambda: datetime(2023, 12, 14, tzinfo=UTC)
    )

    response = client.get("/api/calendar/upcoming", params={"limit": "2"})

    assert response.status_code == 200
    assert [e["title"] for e in response.json()["events"]] == ["Day 15", "Day 16"]


@pytest.mark.parametrize("limit", ["abc", "0", "-5"])
def test_upcoming_bad_limit_falls_back_to_default(client, add_letter, limit):
    for day in range(1, 13):
        add_letter(event_date=datetime(2024, 1, day, tzinfo=UTC))

    app.dependency_overrides[get_calendar_service] = lambda: CalendarService(
        clock=lambda: datetime(2023, 12, 14, tzinfo=UTC)
    )

    response = client.get("/api/calendar/upcoming", params={"limit": limit})

    assert response.status_code == 200
    assert len(response.json()["events"]) == 10


def test_security_headers_present(client, db):
    response = client.get("/api/calendar/events")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Request-ID" in response.headers


def test_upcoming_huge_limit_is_clamped(client, add_letter):
    add_letter(event_date=datetime(2099, 1, 1, tzinfo=UTC), subject="Far future")

    response = client.get("/api/calendar/upcoming", params={"limit": "99999999999999999999"})

    assert response.status_code == 200
    assert [e["title"] for e in response.json()["events"]] == ["Far future"]
