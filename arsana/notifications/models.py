"""
Notification domain models.

Notifications are written by the scheduled jobs and read/acknowledged by
users. A notification without a user_id is global and visible to everyone.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arsana.utils.dates import from_db_timestamp, to_db_timestamp, utc_now


class NotificationType(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class Notification(BaseModel):
    """A stored notification."""

    model_config = ConfigDict(frozen=False, use_enum_values=True)

    id: str = Field(..., description="Unique identifier (UUID)")
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    is_read: bool = False
    user_id: str | None = Field(default=None, description="None = global notification")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def is_visible_to(self, user_id: str | None) -> bool:
        return self.user_id is None or self.user_id == user_id

    def to_db_dict(self) -> dict[str, Any]:
        """Convert to dict for database storage."""
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type if isinstance(self.type, str) else self.type.value,
            "is_read": 1 if self.is_read else 0,
            "user_id": self.user_id,
            "created_at": to_db_timestamp(self.created_at),
            "updated_at": to_db_timestamp(self.updated_at),
        }

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> Notification:
        return cls(
            id=row["id"],
            title=row["title"],
            message=row["message"],
            type=NotificationType(row["type"]),
            is_read=bool(row["is_read"]),
            user_id=row.get("user_id"),
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )


class NotificationCreate(BaseModel):
    """Fields needed to record a new notification."""

    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    user_id: str | None = None

    @field_validator("title", "message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v


class NotificationPage(BaseModel):
    """One page of a user's notifications with counters."""

    notifications: list[Notification]
    page: int
    limit: int
    total: int
    unread_count: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
