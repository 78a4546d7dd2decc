"""
Tests for the scheduled notifier jobs.

Validates:
1. Reminders are written only for events inside tomorrow's window
2. A failing check records a global system error instead of raising
3. Overdue check logs unhandled past invitations without notifying
4. Weekly summary message counts letters per table
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from arsana.calendar import IncomingInvitationSource, OutgoingInvitationSource
from arsana.letters import LetterKind
from arsana.notifications import Notification, NotificationRepository, NotificationType
from arsana.observability.telemetry import get_counter
from arsana.scheduler import ScheduledNotifier
from arsana.scheduler.jobs import SYSTEM_ERROR_TITLE, UPCOMING_FAILURE_MESSAGE

NOW = datetime(2023, 12, 14, 9, 0, tzinfo=UTC)


class RecordingSink:
    """Collects notifications instead of storing them."""

    def __init__(self):
        self.created = []

    def create(self, notification):
        self.created.append(notification)
        return Notification(id=str(len(self.created)), **notification.model_dump())


class BrokenSource:
    kind = LetterKind.INCOMING

    def list_letters_between(self, start, end):
        raise RuntimeError("database is locked")

    def list_overdue(self, before, limit):
        raise RuntimeError("database is locked")

    def count_created(self, start, end):
        raise RuntimeError("database is locked")


def make_notifier(sink=None, sources=None, now=NOW, tz=UTC, **kwargs) -> ScheduledNotifier:
    return ScheduledNotifier(
        sources=sources,
        notifications=sink or RecordingSink(),
        clock=lambda: now,
        timezone=tz,
        **kwargs,
    )


def test_upcoming_window_is_tomorrow_in_local_time():
    notifier = make_notifier(now=datetime(2023, 12, 14, 20, tzinfo=UTC), tz=ZoneInfo("Asia/Jakarta"))

    start, end = notifier.upcoming_window()

    # 20:00 UTC is already Dec 15 03:00 in Jakarta (UTC+7)
    assert start == datetime(2023, 12, 15, 17, tzinfo=UTC)
    assert end - start == timedelta(days=1)


def test_reminders_written_for_tomorrow_only(add_letter):
    add_letter(
        event_date=datetime(2023, 12, 15, 10, tzinfo=UTC),
        subject="Rapat Koordinasi",
        event_location="Aula",
        user_id="alice",
    )
    add_letter(
        LetterKind.OUTGOING,
        event_date=datetime(2023, 12, 15, 23, tzinfo=UTC),
        subject="Kunjungan Kerja",
        user_id="bob",
    )
    add_letter(event_date=datetime(2023, 12, 16, 10, tzinfo=UTC), subject="Lusa")
    add_letter(event_date=datetime(2023, 12, 14, 10, tzinfo=UTC), subject="Hari ini")

    sink = RecordingSink()
    letters = make_notifier(sink).check_upcoming_events()

    assert [letter.subject for letter in letters] == ["Rapat Koordinasi", "Kunjungan Kerja"]
    assert [n.message for n in sink.created] == [
        'Event "Rapat Koordinasi" is scheduled for tomorrow at Aula',
        'Event "Kunjungan Kerja" is scheduled for tomorrow at TBA',
    ]
    assert [n.user_id for n in sink.created] == ["alice", "bob"]
    assert all(n.type == NotificationType.INFO for n in sink.created)
    assert all(n.title == "Upcoming Event Reminder" for n in sink.created)


def test_wider_window_names_the_date(add_letter):
    add_letter(event_date=datetime(2023, 12, 16, 10, tzinfo=UTC), subject="Seminar")

    sink = RecordingSink()
    make_notifier(sink, window_days=3).check_upcoming_events()

    assert sink.created[0].message == 'Event "Seminar" is scheduled for 2023-12-16 at TBA'


def test_reminders_are_stored(add_letter):
    add_letter(event_date=datetime(2023, 12, 15, 10, tzinfo=UTC), user_id="alice")

    make_notifier(NotificationRepository).check_upcoming_events()

    page = NotificationRepository.list_for_user("alice")
    assert page.total == 1
    assert page.notifications[0].title == "Upcoming Event Reminder"


def test_upcoming_failure_records_system_error():
    sink = RecordingSink()

    result = make_notifier(sink, sources=[BrokenSource()]).check_upcoming_events()

    assert result == []
    assert len(sink.created) == 1
    error = sink.created[0]
    assert error.title == SYSTEM_ERROR_TITLE
    assert error.message == UPCOMING_FAILURE_MESSAGE
    assert error.type == NotificationType.ERROR
    assert error.user_id is None
    assert get_counter("scheduler.upcoming_events.failures") == 1


def test_no_reminders_means_no_notifications(db):
    sink = RecordingSink()

    assert make_notifier(sink).check_upcoming_events() == []
    assert sink.created == []


def test_overdue_check_logs_without_notifying(add_letter, caplog):
    pending = add_letter(event_date=datetime(2023, 12, 1, tzinfo=UTC), letter_number="IN-77")
    add_letter(LetterKind.OUTGOING, event_date=datetime(2023, 12, 20, tzinfo=UTC))

    sink = RecordingSink()
    with caplog.at_level("WARNING", logger="arsana.scheduler.jobs"):
        overdue = make_notifier(sink).check_overdue_invitations()

    assert [letter.id for letter in overdue] == [pending.id]
    assert sink.created == []
    assert "IN-77" in caplog.text


def test_overdue_limit_applies_per_source(add_letter):
    for day in (1, 2, 3):
        add_letter(LetterKind.INCOMING, event_date=datetime(2023, 12, day, tzinfo=UTC))
        add_letter(LetterKind.OUTGOING, event_date=datetime(2023, 12, day, tzinfo=UTC))

    overdue = make_notifier(overdue_limit=2).check_overdue_invitations()

    assert len(overdue) == 4


def test_overdue_failure_is_swallowed():
    notifier = make_notifier(sources=[BrokenSource()])

    assert notifier.check_overdue_invitations() == []
    assert get_counter("scheduler.overdue_invitations.failures") == 1


def test_weekly_summary_counts_last_seven_days(add_letter):
    now = datetime(2023, 12, 18, 8, tzinfo=UTC)
    add_letter(LetterKind.INCOMING, created_at=now - timedelta(days=1))
    add_letter(LetterKind.INCOMING, created_at=now - timedelta(days=7))
    add_letter(LetterKind.INCOMING, created_at=now - timedelta(days=8))
    add_letter(LetterKind.OUTGOING, created_at=now - timedelta(hours=2))

    notifier = make_notifier(NotificationRepository, now=now)
    notification = notifier.generate_weekly_summary()

    assert notification is not None
    assert notification.title == "Weekly Summary"
    assert notification.message == "This week: 2 incoming letters, 1 outgoing letters processed."
    assert notification.user_id is None

    # Global: visible to every user
    assert NotificationRepository.list_for_user("anyone").total == 1


def test_weekly_summary_with_no_letters(db):
    sink = RecordingSink()

    make_notifier(sink).generate_weekly_summary()

    assert sink.created[0].message == "This week: 0 incoming letters, 0 outgoing letters processed."


def test_weekly_summary_failure_returns_none():
    sink = RecordingSink()

    assert make_notifier(sink, sources=[BrokenSource()]).generate_weekly_summary() is None
    assert sink.created == []


def test_default_sources_cover_both_tables():
    notifier = ScheduledNotifier(notifications=RecordingSink())

    assert [type(s) for s in notifier.sources] == [
        IncomingInvitationSource,
        OutgoingInvitationSource,
    ]
