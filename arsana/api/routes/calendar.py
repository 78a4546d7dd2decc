"""
Calendar API endpoints.

Invitation letters from both letter tables, served as one event feed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from arsana.api.dependencies import get_calendar_service
from arsana.api.responses import error_response, internal_error
from arsana.calendar import CalendarEvent, CalendarService, DateRange, parse_limit
from arsana.observability.logging import get_logger
from arsana.observability.telemetry import counter

router = APIRouter(prefix="/api/calendar", tags=["calendar"])
logger = get_logger(__name__)


class CalendarEventsResponse(BaseModel):
    events: list[CalendarEvent]


@router.get("/events", response_model=CalendarEventsResponse)
async def get_calendar_events(
    start: str | None = Query(None, description="ISO date/datetime, inclusive"),
    end: str | None = Query(None, description="ISO date/datetime, inclusive"),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEventsResponse | JSONResponse:
    """
    List invitation events, optionally limited to [start, end].

    Without bounds every invitation letter is returned.
    """
    try:
        date_range = DateRange.from_query(start, end)
    except (ValueError, OverflowError) as e:
        logger.warning("Rejected calendar range start=%r end=%r: %s", start, end, e)
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid date range")

    try:
        events = service.get_calendar_events(date_range)
    except Exception as e:
        logger.error("Get calendar events error: %s", e)
        counter("api.calendar.events.errors")
        return internal_error()

    return CalendarEventsResponse(events=events)


@router.get("/upcoming", response_model=CalendarEventsResponse)
async def get_upcoming_events(
    limit: str | None = Query(None, description="Maximum number of events (default 10)"),
    service: CalendarService = Depends(get_calendar_service),
) -> CalendarEventsResponse | JSONResponse:
    """Nearest invitation events from now on, earliest first."""
    try:
        events = service.get_upcoming_events(parse_limit(limit))
    except Exception as e:
        logger.error("Get upcoming events error: %s", e)
        counter("api.calendar.upcoming.errors")
        return internal_error()

    return CalendarEventsResponse(events=events)
