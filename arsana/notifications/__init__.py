"""
Notifications module - reminders and summaries written by the scheduler.
"""

from arsana.notifications.models import (
    Notification,
    NotificationCreate,
    NotificationPage,
    NotificationType,
)
from arsana.notifications.repository import NotificationRepository

__all__ = [
    "Notification",
    "NotificationCreate",
    "NotificationPage",
    "NotificationRepository",
    "NotificationType",
]
