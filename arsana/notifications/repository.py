"""
Notification Repository - CRUD operations for the notifications table.

Follows the database patterns in arsana/infrastructure/database.py.
"""

from __future__ import annotations

import uuid

from arsana.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from arsana.notifications.models import Notification, NotificationCreate, NotificationPage
from arsana.observability.logging import get_logger
from arsana.utils.dates import to_db_timestamp, utc_now

logger = get_logger(__name__)

# Own notifications plus global ones (user_id IS NULL)
_VISIBLE_TO_USER = "(user_id = ? OR user_id IS NULL)"


class NotificationRepository:
    """
    Repository for Notification CRUD operations.

    All methods use connection pooling and proper transaction handling.
    """

    @staticmethod
    @retry_on_db_lock()
    def create(notification: NotificationCreate) -> Notification:
        """
        Record a new notification.

        Side Effects:
            - Inserts row into notifications table
            - Commits transaction
        """
        now = utc_now()
        record = Notification(
            id=str(uuid.uuid4()),
            title=notification.title,
            message=notification.message,
            type=notification.type,
            user_id=notification.user_id,
            created_at=now,
            updated_at=now,
        )

        with db_transaction() as conn:
            conn.execute(
                """
                INSERT INTO notifications (
                    id, title, message, type, is_read, user_id, created_at, updated_at
                ) VALUES (
                    :id, :title, :message, :type, :is_read, :user_id, :created_at, :updated_at
                )
                """,
                record.to_db_dict(),
            )

        logger.info("Created %s notification %s: %s", record.type, record.id, record.title)
        return record

    @staticmethod
    def get_by_id(notification_id: str) -> Notification | None:
        with get_db_connection() as conn:
            row = conn.execute(
                "SELECT * FROM notifications WHERE id = ?",
                (notification_id,),
            ).fetchone()

        if not row:
            return None

        return Notification.from_db_row(dict(row))

    @staticmethod
    def list_for_user(
        user_id: str | None,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
    ) -> NotificationPage:
        """
        List notifications visible to a user, newest first.

        Args:
            user_id: Requesting user (None sees only global notifications)
            page: 1-based page number
            limit: Page size
            unread_only: Only return unread notifications

        Returns:
            NotificationPage with the page items, total matching and unread count
        """
        page = max(page, 1)
        where = _VISIBLE_TO_USER
        if unread_only:
            where += " AND is_read = 0"

        with get_db_connection() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM notifications
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT ? OFFSET ?
                """,
                (user_id, limit, (page - 1) * limit),
            ).fetchall()

            total = conn.execute(
                f"SELECT COUNT(*) FROM notifications WHERE {where}",
                (user_id,),
            ).fetchone()[0]

            unread_count = conn.execute(
                f"SELECT COUNT(*) FROM notifications WHERE {_VISIBLE_TO_USER} AND is_read = 0",
                (user_id,),
            ).fetchone()[0]

        return NotificationPage(
            notifications=[Notification.from_db_row(dict(row)) for row in rows],
            page=page,
            limit=limit,
            total=total,
            unread_count=unread_count,
        )

    @staticmethod
    @retry_on_db_lock()
    def mark_as_read(notification_id: str) -> bool:
        """
        Set the read flag on one notification.

        Returns:
            True if a row was updated
        """
        with db_transaction() as conn:
            cursor = conn.execute(
                "UPDATE notifications SET is_read = 1, updated_at = ? WHERE id = ?",
                (to_db_timestamp(utc_now()), notification_id),
            )
            updated = cursor.rowcount > 0

        return updated

    @staticmethod
    @retry_on_db_lock()
    def mark_all_as_read(user_id: str | None) -> int:
        """
        Mark every unread notification visible to the user as read.

        Returns:
            Number of notifications updated
        """
        with db_transaction() as conn:
            cursor = conn.execute(
                f"""
                UPDATE notifications
                SET is_read = 1, updated_at = ?
                WHERE {_VISIBLE_TO_USER} AND is_read = 0
                """,
                (to_db_timestamp(utc_now()), user_id),
            )
            updated = cursor.rowcount

        logger.info("Marked %d notifications read for user %s", updated, user_id)
        return updated
