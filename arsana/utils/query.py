"""Query-string helpers shared by the route modules."""

from __future__ import annotations


def parse_positive_int(raw: str | None, default: int, maximum: int | None = None) -> int:
    """
    Parse a positive integer query parameter.

    Absent, non-numeric and non-positive values fall back to `default`;
    values above `maximum` are clamped to it.
    """
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    if value <= 0:
        return default
    if maximum is not None:
        return min(value, maximum)
    return value
