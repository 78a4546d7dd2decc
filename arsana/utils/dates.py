"""
Timestamp helpers shared by repositories, the calendar and the scheduler.

All timestamps are persisted as naive UTC ISO-8601 strings with a fixed
microsecond precision, so SQL string comparison orders them chronologically.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_db_timestamp(value: datetime) -> str:
    return ensure_utc(value).replace(tzinfo=None).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def parse_query_datetime(value: str, *, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO date or datetime taken from a query string.

    Naive values are treated as UTC. A date-only value maps to the start of
    that day, or to its last microsecond when end_of_day is set.

    Raises:
        ValueError: If the value is not ISO-8601 or falls outside the
            representable UTC range (e.g. year 1 with a positive offset)
    """
    value = value.strip()
    if not value:
        raise ValueError("empty date")

    if len(value) == 10:
        day = date.fromisoformat(value)
        moment = time.max if end_of_day else time.min
        return datetime.combine(day, moment, tzinfo=UTC)

    parsed = datetime.fromisoformat(value)
    try:
        return ensure_utc(parsed)
    except OverflowError as e:
        raise ValueError(f"date out of range: {value}") from e


def start_of_next_day(now: datetime, tz) -> datetime:
    """Midnight of the day after `now`, in timezone `tz`, returned in UTC."""
    local = now.astimezone(tz)
    tomorrow = local.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=tz).astimezone(UTC)
