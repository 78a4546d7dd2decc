"""
Invitation sources - one per letter table.

The calendar service and the scheduled notifier only talk to sources, so the
invitation queries and the letter -> CalendarEvent projection are written once
here instead of once per table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from arsana.calendar.models import CalendarEvent, DateRange
from arsana.infrastructure.database import get_db_connection
from arsana.letters.models import Letter, LetterKind
from arsana.utils.dates import to_db_timestamp

_INVITATION_CLAUSE = "is_invitation = 1 AND event_date IS NOT NULL"


class InvitationSource:
    """
    Reads invitation letters from a single letter table.

    Subclasses pick the table through `kind` and may enrich the projection.
    """

    kind: LetterKind

    def _query_letters(
        self, where: str, params: tuple[Any, ...], limit: int | None = None
    ) -> list[Letter]:
        sql = f"SELECT * FROM {self.kind.table} WHERE {_INVITATION_CLAUSE}"
        if where:
            sql += f" AND {where}"
        sql += " ORDER BY event_date ASC, letter_number ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params = (*params, limit)

        with get_db_connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [Letter.from_db_row(dict(row), self.kind) for row in rows]

    def describe(self, letter: Letter) -> str | None:
        return None

    def to_event(self, letter: Letter) -> CalendarEvent:
        """Project a stored invitation letter onto the calendar."""
        return CalendarEvent(
            id=letter.id,
            title=letter.subject,
            date=letter.event_date,
            location=letter.event_location or None,
            type=self.kind,
            letter_number=letter.letter_number,
            description=self.describe(letter),
        )

    def list_invitations(self, date_range: DateRange | None = None) -> list[CalendarEvent]:
        """
        Invitation events whose date lies inside the inclusive range.

        Args:
            date_range: Optional bounds; None (or an open range) returns every invitation
        """
        clauses: list[str] = []
        params: list[str] = []
        if date_range is not None and date_range.start is not None:
            clauses.append("event_date >= ?")
            params.append(to_db_timestamp(date_range.start))
        if date_range is not None and date_range.end is not None:
            clauses.append("event_date <= ?")
            params.append(to_db_timestamp(date_range.end))

        letters = self._query_letters(" AND ".join(clauses), tuple(params))
        return [self.to_event(letter) for letter in letters]

    def list_upcoming(self, since: datetime, limit: int) -> list[CalendarEvent]:
        """The `limit` earliest invitations dated at or after `since`."""
        letters = self._query_letters("event_date >= ?", (to_db_timestamp(since),), limit=limit)
        return [self.to_event(letter) for letter in letters]

    def list_letters_between(self, start: datetime, end: datetime) -> list[Letter]:
        """Invitation letters with start <= event_date < end (reminder window)."""
        return self._query_letters(
            "event_date >= ? AND event_date < ?",
            (to_db_timestamp(start), to_db_timestamp(end)),
        )

    def list_overdue(self, before: datetime, limit: int) -> list[Letter]:
        """Unhandled invitations whose event date has passed."""
        return self._query_letters(
            "event_date < ? AND event_handled_at IS NULL",
            (to_db_timestamp(before),),
            limit=limit,
        )

    def count_created(self, start: datetime, end: datetime) -> int:
        """Letters (invitation or not) created within [start, end]."""
        with get_db_connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) FROM {self.kind.table} WHERE created_at >= ? AND created_at <= ?",
                (to_db_timestamp(start), to_db_timestamp(end)),
            ).fetchone()
        return int(row[0])


class IncomingInvitationSource(InvitationSource):
    kind = LetterKind.INCOMING


class OutgoingInvitationSource(InvitationSource):
    kind = LetterKind.OUTGOING

    def describe(self, letter: Letter) -> str | None:
        return letter.description or None


def default_sources() -> list[InvitationSource]:
    """Incoming first: the merge order is the tie-break for equal dates."""
    return [IncomingInvitationSource(), OutgoingInvitationSource()]
