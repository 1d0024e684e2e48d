"""
multicalendar: named, timezone-scoped calendars with recurring events.

Calendars hold events keyed by subject and start. Recurring events share a
series id; edits apply to one event, to a series from a date onward, or to a
whole series. Events can be copied between calendars with timezone
conversion.
"""

from .calendars import Calendar
from .config import AppConfig, CalendarSettings, load_config
from .copier import CrossCalendarCopier
from .editing import EditScope, EditScopeResolver
from .errors import (
    CalendarError,
    DuplicateCalendarName,
    DuplicateEvent,
    InvalidPropertyValue,
    InvalidTimezone,
    NoCurrentCalendar,
    NotFound,
    UnknownCalendar,
    UnknownProperty,
    ValidationError,
)
from .manager import CalendarManager
from .models import Event, EventKey, EventLocation, EventStatus, Weekday
from .recurrence import RecurrenceExpander, RecurrenceRule
from .store import EventStore, SeriesIdAllocator

__all__ = [
    "AppConfig",
    "Calendar",
    "CalendarError",
    "CalendarManager",
    "CalendarSettings",
    "CrossCalendarCopier",
    "DuplicateCalendarName",
    "DuplicateEvent",
    "EditScope",
    "EditScopeResolver",
    "Event",
    "EventKey",
    "EventLocation",
    "EventStatus",
    "EventStore",
    "InvalidPropertyValue",
    "InvalidTimezone",
    "NoCurrentCalendar",
    "NotFound",
    "RecurrenceExpander",
    "RecurrenceRule",
    "SeriesIdAllocator",
    "UnknownCalendar",
    "UnknownProperty",
    "ValidationError",
    "Weekday",
    "load_config",
]
