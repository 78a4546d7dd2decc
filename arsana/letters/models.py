"""
Letter domain models for the Arsana archive.

Incoming and outgoing letters share one shape; the kind decides which table
they live in. Only outgoing letters carry a free-text description.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from arsana.utils.dates import from_db_timestamp, to_db_timestamp, utc_now


class LetterKind(str, Enum):
    """Which letter table a record belongs to.

    Extends str so JSON serialization produces raw strings ("incoming").
    """

    INCOMING = "incoming"
    OUTGOING = "outgoing"

    @property
    def table(self) -> str:
        return f"{self.value}_letters"


class Letter(BaseModel):
    """A stored letter, incoming or outgoing."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(..., description="Unique identifier (UUID)")
    kind: LetterKind
    letter_number: str
    subject: str
    sender: str
    recipient: str = ""
    processor: str = ""
    letter_date: datetime | None = None
    note: str | None = None
    description: str | None = Field(default=None, description="Outgoing letters only")

    # Invitation fields
    is_invitation: bool = False
    event_date: datetime | None = None
    event_time: str | None = Field(default=None, description="Free text, e.g. '09:00 WIB'")
    event_location: str | None = None
    event_notes: str | None = None
    event_handled_at: datetime | None = None

    user_id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def is_calendar_event(self) -> bool:
        """Only flagged invitations with a date show up on the calendar."""
        return self.is_invitation and self.event_date is not None

    def to_db_dict(self) -> dict[str, Any]:
        """Convert to dict for database storage."""

        def fmt(value: datetime | None) -> str | None:
            return to_db_timestamp(value) if value else None

        data = {
            "id": self.id,
            "letter_number": self.letter_number,
            "subject": self.subject,
            "sender": self.sender,
            "recipient": self.recipient,
            "processor": self.processor,
            "letter_date": fmt(self.letter_date),
            "note": self.note,
            "is_invitation": 1 if self.is_invitation else 0,
            "event_date": fmt(self.event_date),
            "event_time": self.event_time,
            "event_location": self.event_location,
            "event_notes": self.event_notes,
            "event_handled_at": fmt(self.event_handled_at),
            "user_id": self.user_id,
            "created_at": to_db_timestamp(self.created_at),
            "updated_at": to_db_timestamp(self.updated_at),
        }
        if self.kind == LetterKind.OUTGOING:
            data["description"] = self.description
        return data

    @classmethod
    def from_db_row(cls, row: dict[str, Any], kind: LetterKind) -> Letter:
        """Create Letter from database row."""
        return cls(
            id=row["id"],
            kind=kind,
            letter_number=row["letter_number"],
            subject=row["subject"],
            sender=row["sender"],
            recipient=row.get("recipient") or "",
            processor=row.get("processor") or "",
            letter_date=from_db_timestamp(row.get("letter_date")),
            note=row.get("note"),
            description=row.get("description"),
            is_invitation=bool(row.get("is_invitation")),
            event_date=from_db_timestamp(row.get("event_date")),
            event_time=row.get("event_time"),
            event_location=row.get("event_location"),
            event_notes=row.get("event_notes"),
            event_handled_at=from_db_timestamp(row.get("event_handled_at")),
            user_id=row["user_id"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )


class LetterCreate(BaseModel):
    """Fields needed to store a new letter."""

    letter_number: str
    subject: str
    sender: str
    user_id: str
    recipient: str = ""
    processor: str = ""
    letter_date: datetime | None = None
    note: str | None = None
    description: str | None = None
    is_invitation: bool = False
    event_date: datetime | None = None
    event_time: str | None = None
    event_location: str | None = None
    event_notes: str | None = None
    created_at: datetime | None = None

    @field_validator("letter_number", "subject")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def invitation_needs_date(self) -> LetterCreate:
        if self.is_invitation and self.event_date is None:
            raise ValueError("invitation letters require an event_date")
        return self
