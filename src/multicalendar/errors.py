"""Exception types raised by calendar operations.

Every error is a caller-input fault: raised synchronously, never retried.
All of them subclass ValueError so callers that only care about "bad input"
can catch that.
"""

from __future__ import annotations


class CalendarError(ValueError):
    """Base class for all calendar errors."""


class ValidationError(CalendarError):
    """Blank subject, missing timestamp, end not after start, bad recurrence bounds."""


class DuplicateEvent(CalendarError):
    """An event with the same subject and start already exists."""


class NotFound(CalendarError):
    """No event matches the given subject and start."""


class UnknownProperty(CalendarError):
    """The property name is not editable."""


class InvalidPropertyValue(CalendarError):
    """The new value cannot be coerced to the property's type."""


class UnknownCalendar(CalendarError):
    """No calendar is registered under the given name."""


class DuplicateCalendarName(CalendarError):
    """Another calendar is already registered under the given name."""


class InvalidTimezone(CalendarError):
    """The timezone is not a valid IANA zone id."""


class NoCurrentCalendar(CalendarError):
    """An operation needs a current calendar but none is selected."""
