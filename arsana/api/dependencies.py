"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

from fastapi import Header

from arsana.calendar.service import CalendarService
from arsana.notifications.repository import NotificationRepository


def get_calendar_service() -> CalendarService:
    return CalendarService()


def get_notification_repository() -> type[NotificationRepository]:
    return NotificationRepository


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """
    Caller identity as forwarded by the authenticating gateway.

    Authentication happens upstream; a missing header means an anonymous
    caller, who only sees global notifications.
    """
    if x_user_id is None:
        return None
    return x_user_id.strip() or None
