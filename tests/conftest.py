"""
Pytest configuration for Arsana tests

Every test that touches storage gets its own temporary SQLite database
through ARSANA_DB_PATH, with the global connection pool reset around it.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import datetime

import pytest

from arsana.infrastructure.database import init_database, reset_pool
from arsana.letters import Letter, LetterCreate, LetterKind, LetterRepository
from arsana.observability.telemetry import reset_counters


@pytest.fixture(autouse=True)
def _clean_counters():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Fresh, initialized database for one test."""
    db_path = tmp_path / "arsana.db"
    monkeypatch.setenv("ARSANA_DB_PATH", str(db_path))
    reset_pool()
    init_database()
    yield db_path
    reset_pool()


@pytest.fixture
def add_letter(db) -> Callable[..., Letter]:
    """
    Factory storing a letter in the test database.

    Usage:
        add_letter(LetterKind.OUTGOING, event_date=datetime(...), subject="Rapat")
    """
    numbers = itertools.count(1)

    def _add(
        kind: LetterKind = LetterKind.INCOMING,
        *,
        event_date: datetime | None = None,
        is_invitation: bool | None = None,
        subject: str = "Undangan Rapat",
        letter_number: str | None = None,
        event_location: str | None = None,
        description: str | None = None,
        user_id: str = "user-1",
        created_at: datetime | None = None,
    ) -> Letter:
        n = next(numbers)
        return LetterRepository(kind).create(
            LetterCreate(
                letter_number=letter_number or f"{kind.value[:2].upper()}-{n:03d}",
                subject=subject,
                sender="Dinas Pendidikan",
                recipient="Sekretariat",
                user_id=user_id,
                is_invitation=event_date is not None if is_invitation is None else is_invitation,
                event_date=event_date,
                event_location=event_location,
                description=description,
                created_at=created_at,
            )
        )

    return _add
