"""
Scheduled notifier - the three periodic jobs over the invitation sources.

Schedule overview (defaults, see arsana.config):
  - 09:00 daily  - Upcoming-events check (reminders for tomorrow's events)
  - 18:00 daily  - Overdue-invitations check (logged, no notification)
  - 08:00 Monday - Weekly summary notification

Every job recomputes its window from the clock on each run and keeps no state
between runs. Failures are caught and logged inside the job.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo

from arsana.calendar.sources import InvitationSource, default_sources
from arsana.config import (
    OVERDUE_SCAN_LIMIT,
    SCHEDULER_TIMEZONE,
    UPCOMING_WINDOW_DAYS,
    WEEKLY_SUMMARY_DAYS,
)
from arsana.letters.models import Letter, LetterKind
from arsana.notifications.models import Notification, NotificationCreate, NotificationType
from arsana.notifications.repository import NotificationRepository
from arsana.observability.logging import get_logger
from arsana.observability.telemetry import counter, log_event
from arsana.utils.dates import start_of_next_day, utc_now

logger = get_logger(__name__)

REMINDER_TITLE = "Upcoming Event Reminder"
SYSTEM_ERROR_TITLE = "System Error"
UPCOMING_FAILURE_MESSAGE = "Failed to check upcoming events. Please contact administrator."
WEEKLY_SUMMARY_TITLE = "Weekly Summary"
WEEKLY_SUMMARY_TEMPLATE = (
    "This week: {incoming} incoming letters, {outgoing} outgoing letters processed."
)


class NotificationSink(Protocol):
    def create(self, notification: NotificationCreate) -> Notification: ...


class ScheduledNotifier:
    """Runs the reminder, overdue and weekly-summary checks."""

    def __init__(
        self,
        sources: Sequence[InvitationSource] | None = None,
        notifications: NotificationSink = NotificationRepository,
        clock: Callable[[], datetime] = utc_now,
        timezone: tzinfo | None = None,
        window_days: int = UPCOMING_WINDOW_DAYS,
        overdue_limit: int = OVERDUE_SCAN_LIMIT,
    ) -> None:
        self.sources = list(sources) if sources is not None else default_sources()
        self.notifications = notifications
        self.clock = clock
        self.timezone = timezone or ZoneInfo(SCHEDULER_TIMEZONE)
        self.window_days = max(window_days, 1)
        self.overdue_limit = overdue_limit

    # ------------------------------------------------------------------
    # Upcoming events
    # ------------------------------------------------------------------

    def upcoming_window(self) -> tuple[datetime, datetime]:
        """[local midnight tomorrow, + window_days) expressed in UTC."""
        start = start_of_next_day(self.clock(), self.timezone)
        return start, start + timedelta(days=self.window_days)

    def reminder_message(self, letter: Letter) -> str:
        if self.window_days == 1:
            when = "tomorrow"
        else:
            when = letter.event_date.astimezone(self.timezone).date().isoformat()
        location = letter.event_location or "TBA"
        return f'Event "{letter.subject}" is scheduled for {when} at {location}'

    def check_upcoming_events(self) -> list[Letter]:
        """
        Write a reminder for every invitation inside the upcoming window.

        Returns:
            The letters a reminder was written for (empty on failure)

        Side Effects:
            - Inserts one INFO notification per letter, addressed to its owner
            - On failure inserts one global ERROR notification
        """
        try:
            start, end = self.upcoming_window()
            letters: list[Letter] = []
            for source in self.sources:
                letters.extend(source.list_letters_between(start, end))

            for letter in letters:
                self.notifications.create(
                    NotificationCreate(
                        title=REMINDER_TITLE,
                        message=self.reminder_message(letter),
                        type=NotificationType.INFO,
                        user_id=letter.user_id,
                    )
                )

            logger.info("Processed %d event reminders", len(letters))
            return letters

        except Exception as e:
            logger.error("Error checking upcoming events: %s", e)
            counter("scheduler.upcoming_events.failures")
            self._record_system_error(UPCOMING_FAILURE_MESSAGE)
            return []

    def _record_system_error(self, message: str) -> None:
        try:
            self.notifications.create(
                NotificationCreate(
                    title=SYSTEM_ERROR_TITLE,
                    message=message,
                    type=NotificationType.ERROR,
                )
            )
        except Exception as e:
            logger.error("Failed to record system error notification: %s", e)

    # ------------------------------------------------------------------
    # Overdue invitations
    # ------------------------------------------------------------------

    def check_overdue_invitations(self) -> list[Letter]:
        """
        Log invitations whose event has passed without being handled.

        At most `overdue_limit` letters are read per source so a backlog
        does not flood the log.

        Returns:
            The overdue letters found (empty on failure)
        """
        try:
            now = self.clock()
            overdue: list[Letter] = []
            for source in self.sources:
                overdue.extend(source.list_overdue(now, self.overdue_limit))

            for letter in overdue:
                logger.warning(
                    "Overdue invitation: %s letter %s (%s) was scheduled for %s",
                    letter.kind.value,
                    letter.letter_number,
                    letter.subject,
                    letter.event_date.isoformat(),
                )
                log_event(
                    "letters.overdue_invitation",
                    kind=letter.kind.value,
                    letter_id=letter.id,
                    user_id=letter.user_id,
                )

            logger.info("Found %d overdue invitations", len(overdue))
            return overdue

        except Exception as e:
            logger.error("Error checking overdue invitations: %s", e)
            counter("scheduler.overdue_invitations.failures")
            return []

    # ------------------------------------------------------------------
    # Weekly summary
    # ------------------------------------------------------------------

    def weekly_counts(self) -> dict[LetterKind, int]:
        """Letters created in the trailing window [now - 7 days, now], per kind."""
        end = self.clock()
        start = end - timedelta(days=WEEKLY_SUMMARY_DAYS)
        counts = {kind: 0 for kind in LetterKind}
        for source in self.sources:
            counts[source.kind] += source.count_created(start, end)
        return counts

    def generate_weekly_summary(self) -> Notification | None:
        """
        Write one global notification with this week's letter counts.

        Returns:
            The created notification, or None on failure
        """
        try:
            counts = self.weekly_counts()
            message = WEEKLY_SUMMARY_TEMPLATE.format(
                incoming=counts[LetterKind.INCOMING],
                outgoing=counts[LetterKind.OUTGOING],
            )
            notification = self.notifications.create(
                NotificationCreate(
                    title=WEEKLY_SUMMARY_TITLE,
                    message=message,
                    type=NotificationType.INFO,
                )
            )
            logger.info("Weekly summary written: %s", message)
            return notification

        except Exception as e:
            logger.error("Error generating weekly summary: %s", e)
            counter("scheduler.weekly_summary.failures")
            return None
