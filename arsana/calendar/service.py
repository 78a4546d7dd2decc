"""Calendar service - merges the invitation sources into one event feed."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from arsana.calendar.models import CalendarEvent, DateRange
from arsana.calendar.sources import InvitationSource, default_sources
from arsana.config import UPCOMING_LIMIT_DEFAULT, UPCOMING_LIMIT_MAX
from arsana.observability.logging import get_logger
from arsana.observability.telemetry import time_block
from arsana.utils.dates import utc_now
from arsana.utils.query import parse_positive_int

logger = get_logger(__name__)


def parse_limit(raw: str | None) -> int:
    """
    Parse the `limit` query parameter of the upcoming-events feed.

    Absent, non-numeric and non-positive values fall back to the default;
    oversized values are clamped to UPCOMING_LIMIT_MAX.
    """
    return parse_positive_int(raw, default=UPCOMING_LIMIT_DEFAULT, maximum=UPCOMING_LIMIT_MAX)


class CalendarService:
    """Read-only view of invitation letters as calendar events.

    Storage errors propagate to the caller; nothing is returned partially.
    """

    def __init__(
        self,
        sources: Sequence[InvitationSource] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.sources = list(sources) if sources is not None else default_sources()
        self.clock = clock

    def get_calendar_events(self, date_range: DateRange | None = None) -> list[CalendarEvent]:
        """All invitation events inside the inclusive range, earliest first."""
        with time_block("calendar.events"):
            events: list[CalendarEvent] = []
            for source in self.sources:
                events.extend(source.list_invitations(date_range))

        events.sort(key=lambda event: event.date)
        return events

    def get_upcoming_events(self, limit: int = UPCOMING_LIMIT_DEFAULT) -> list[CalendarEvent]:
        """
        The `limit` nearest invitation events dated now or later.

        Each source contributes at most `limit` events; the merged list is
        stable-sorted so equal dates keep source order (incoming first).
        """
        limit = min(limit, UPCOMING_LIMIT_MAX)
        now = self.clock()
        with time_block("calendar.upcoming"):
            merged: list[CalendarEvent] = []
            for source in self.sources:
                merged.extend(source.list_upcoming(now, limit))

        merged.sort(key=lambda event: event.date)
        return merged[:limit]
