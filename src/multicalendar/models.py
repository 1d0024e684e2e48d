"""Event value type and its enums."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum, IntEnum
from typing import Iterable, NamedTuple

from .errors import ValidationError

# All-day events occupy a fixed business-hours block, not midnight to midnight.
ALL_DAY_START = time(8, 0)
ALL_DAY_END = time(17, 0)


class EventLocation(Enum):
    PHYSICAL = "physical"
    ONLINE = "online"


class EventStatus(Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class Weekday(IntEnum):
    """Days of the week, numbered like ``date.weekday()``."""

    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    @classmethod
    def parse(cls, codes: str) -> frozenset[Weekday]:
        """Parse letter codes such as ``"MWF"`` (R = Thursday, U = Sunday)."""
        days = set()
        for letter in codes.upper():
            if letter not in _WEEKDAY_CODES:
                raise ValidationError(f"Unknown weekday code '{letter}' in '{codes}'")
            days.add(_WEEKDAY_CODES[letter])
        return frozenset(days)


_WEEKDAY_CODES = {
    "M": Weekday.MON,
    "T": Weekday.TUE,
    "W": Weekday.WED,
    "R": Weekday.THU,
    "F": Weekday.FRI,
    "S": Weekday.SAT,
    "U": Weekday.SUN,
}


class EventKey(NamedTuple):
    """Identity of an event within one store: subject plus start.

    Only used for duplicate rejection and lookup. Two events with the same key
    can still differ in every other field.
    """

    subject: str
    start: datetime


@dataclass(frozen=True)
class Event:
    """A single occurrence, timed or all-day.

    Start and end are naive wall-clock times in the owning calendar's zone.
    ``series_id`` is set iff the event belongs to a recurrence.
    """

    subject: str
    start: datetime
    end: datetime
    description: str | None = None
    location: EventLocation | None = None
    status: EventStatus | None = None
    series_id: int | None = None
    all_day: bool = False

    @property
    def key(self) -> EventKey:
        return EventKey(self.subject, self.start)

    @property
    def duration(self):
        return self.end - self.start


def all_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Start and end of the business-hours block on ``day``."""
    return datetime.combine(day, ALL_DAY_START), datetime.combine(day, ALL_DAY_END)


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def validate_subject(subject: str | None) -> None:
    if subject is None or not str(subject).strip():
        raise ValidationError("Subject cannot be empty")


def validate_timestamp(value: datetime | None, field_name: str) -> None:
    if value is None:
        raise ValidationError(f"{field_name} cannot be empty")
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is not None:
        raise ValidationError(f"{field_name} must be a naive wall-clock time: {value.isoformat()}")


def validate_interval(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError(
            f"End time {end.isoformat()} must be after start time {start.isoformat()}"
        )


def validate_weekdays(weekdays: Iterable[int] | None) -> frozenset[Weekday]:
    if not weekdays:
        raise ValidationError("At least one weekday must be specified")
    try:
        return frozenset(Weekday(day) for day in weekdays)
    except ValueError as e:
        raise ValidationError(f"Invalid weekday in {weekdays!r}") from e


def new_timed_event(subject: str, start: datetime, end: datetime, **fields) -> Event:
    """Validate and build a timed event."""
    validate_subject(subject)
    validate_timestamp(start, "Start time")
    validate_timestamp(end, "End time")
    validate_interval(start, end)
    return Event(subject=subject, start=start, end=end, **fields)


def new_all_day_event(subject: str, day: date | datetime | None, **fields) -> Event:
    """Validate and build an all-day event on ``day``."""
    validate_subject(subject)
    if day is None:
        raise ValidationError("Date cannot be empty")
    start, end = all_day_bounds(as_date(day))
    return Event(subject=subject, start=start, end=end, all_day=True, **fields)
