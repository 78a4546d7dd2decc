"""
Notification API endpoints.

Lists a user's notifications (own + global) and flips their read flag.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from arsana.api.dependencies import get_current_user_id, get_notification_repository
from arsana.api.responses import error_response, internal_error
from arsana.config import (
    NOTIFICATIONS_PAGE_LIMIT_DEFAULT,
    NOTIFICATIONS_PAGE_LIMIT_MAX,
    NOTIFICATIONS_PAGE_MAX,
)
from arsana.notifications import Notification, NotificationRepository
from arsana.observability.logging import get_logger
from arsana.utils.query import parse_positive_int

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = get_logger(__name__)


# ============================================================================
# Response Models
# ============================================================================


class NotificationResponse(BaseModel):
    """API response for a single notification."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    message: str
    type: str
    is_read: bool = Field(alias="isRead")
    user_id: str | None = Field(alias="userId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_notification(cls, notification: Notification) -> NotificationResponse:
        return cls(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=str(notification.type),
            is_read=notification.is_read,
            user_id=notification.user_id,
            created_at=notification.created_at,
            updated_at=notification.updated_at,
        )


class PaginationResponse(BaseModel):
    current: int
    limit: int
    total: int
    pages: int


class NotificationListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notifications: list[NotificationResponse]
    pagination: PaginationResponse
    unread_count: int = Field(alias="unreadCount")


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    unread_only: str | None = Query(None, alias="unreadOnly"),
    user_id: str | None = Depends(get_current_user_id),
    repository: type[NotificationRepository] = Depends(get_notification_repository),
) -> NotificationListResponse | JSONResponse:
    """List notifications for the caller, newest first."""
    page_number = parse_positive_int(page, default=1, maximum=NOTIFICATIONS_PAGE_MAX)
    page_size = parse_positive_int(
        limit, default=NOTIFICATIONS_PAGE_LIMIT_DEFAULT, maximum=NOTIFICATIONS_PAGE_LIMIT_MAX
    )

    try:
        result = repository.list_for_user(
            user_id,
            page=page_number,
            limit=page_size,
            unread_only=unread_only == "true",
        )
    except Exception as e:
        logger.error("Get notifications error: %s", e)
        return internal_error()

    return NotificationListResponse(
        notifications=[NotificationResponse.from_notification(n) for n in result.notifications],
        pagination=PaginationResponse(
            current=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
        unread_count=result.unread_count,
    )


@router.put("/read-all", status_code=status.HTTP_204_NO_CONTENT)
async def mark_all_as_read(
    user_id: str | None = Depends(get_current_user_id),
    repository: type[NotificationRepository] = Depends(get_notification_repository),
) -> Response:
    """Mark every unread notification visible to the caller as read."""
    try:
        repository.mark_all_as_read(user_id)
    except Exception as e:
        logger.error("Mark all notifications as read error: %s", e)
        return internal_error()

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_as_read(
    notification_id: str,
    user_id: str | None = Depends(get_current_user_id),
    repository: type[NotificationRepository] = Depends(get_notification_repository),
) -> Response:
    """
    Mark one notification as read.

    Global notifications can be acknowledged by anyone; personal ones only
    by their owner.
    """
    try:
        notification = repository.get_by_id(notification_id)
        if notification is None:
            return error_response(status.HTTP_404_NOT_FOUND, "Notification not found")

        if not notification.is_visible_to(user_id):
            return error_response(status.HTTP_403_FORBIDDEN, "Unauthorized")

        repository.mark_as_read(notification_id)
    except Exception as e:
        logger.error("Mark notification as read error: %s", e)
        return internal_error()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
