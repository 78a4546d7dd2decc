"""
Calendar domain types.

CalendarEvent is a derived, never-persisted projection of an invitation
letter. DateRange carries the optional inclusive bounds of a calendar query.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from arsana.letters.models import LetterKind
from arsana.utils.dates import ensure_utc, parse_query_datetime


class CalendarEvent(BaseModel):
    """One invitation letter as shown on the calendar."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    date: datetime
    location: str | None = None
    type: LetterKind
    letter_number: str = Field(..., alias="letterNumber")
    description: str | None = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] window. A None bound is open."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", ensure_utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", ensure_utc(self.end))
        if self.start and self.end and self.start > self.end:
            raise ValueError("start must not be after end")

    def contains(self, moment: datetime) -> bool:
        moment = ensure_utc(moment)
        if self.start is not None and moment < self.start:
            return False
        return not (self.end is not None and moment > self.end)

    @classmethod
    def from_query(cls, start: str | None, end: str | None) -> DateRange | None:
        """
        Build a range from raw query-string values.

        Returns None when neither bound is given. A date-only end covers the
        whole day.

        Raises:
            ValueError: If a bound is not ISO-8601 or start is after end
        """
        if not start and not end:
            return None
        return cls(
            start=parse_query_datetime(start) if start else None,
            end=parse_query_datetime(end, end_of_day=True) if end else None,
        )
