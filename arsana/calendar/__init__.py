"""
Calendar module - invitation letters projected into a unified event feed.
"""

from arsana.calendar.models import CalendarEvent, DateRange
from arsana.calendar.service import CalendarService, parse_limit
from arsana.calendar.sources import (
    IncomingInvitationSource,
    InvitationSource,
    OutgoingInvitationSource,
    default_sources,
)

__all__ = [
    "CalendarEvent",
    "CalendarService",
    "DateRange",
    "IncomingInvitationSource",
    "InvitationSource",
    "OutgoingInvitationSource",
    "default_sources",
    "parse_limit",
]
