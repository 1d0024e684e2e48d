"""Expansion of weekly recurrence rules into concrete events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Callable, Iterable

from dateutil.rrule import WEEKLY, rrule

from .errors import ValidationError
from .models import (
    Event,
    Weekday,
    all_day_bounds,
    as_date,
    validate_interval,
    validate_subject,
    validate_timestamp,
    validate_weekdays,
)
from .store import SeriesIdAllocator

logger = logging.getLogger("multicalendar")


@dataclass(frozen=True)
class RecurrenceRule:
    """One weekly recurrence: which days, from which anchor, until when.

    Exactly one of ``count`` and ``until`` terminates the rule. ``end`` is
    None for all-day rules.
    """

    subject: str
    start: datetime
    end: datetime | None
    weekdays: frozenset[Weekday]
    count: int | None = None
    until: date | None = None
    all_day: bool = False

    @classmethod
    def timed(
        cls,
        subject: str,
        start: datetime,
        end: datetime,
        weekdays: Iterable[int],
        count: int | None = None,
        until: date | None = None,
    ) -> RecurrenceRule:
        validate_subject(subject)
        validate_timestamp(start, "Start time")
        validate_timestamp(end, "End time")
        validate_interval(start, end)
        if start.date() != end.date():
            raise ValidationError("Events in a series must start and end on the same day")
        rule = cls(subject, start, end, validate_weekdays(weekdays), count, until)
        rule._validate_termination()
        return rule

    @classmethod
    def all_day_from(
        cls,
        subject: str,
        day: date | datetime,
        weekdays: Iterable[int],
        count: int | None = None,
        until: date | None = None,
    ) -> RecurrenceRule:
        validate_subject(subject)
        if day is None:
            raise ValidationError("Date cannot be empty")
        start, _ = all_day_bounds(as_date(day))
        rule = cls(subject, start, None, validate_weekdays(weekdays), count, until, all_day=True)
        rule._validate_termination()
        return rule

    def _validate_termination(self) -> None:
        if (self.count is None) == (self.until is None):
            raise ValidationError("Exactly one of count or until date must be given")
        if self.count is not None:
            if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count <= 0:
                raise ValidationError(f"Count must be positive, got {self.count!r}")
        else:
            if not isinstance(self.until, date):
                raise ValidationError(f"Until date must be a date, got {self.until!r}")
            if as_date(self.until) <= self.start.date():
                raise ValidationError(
                    f"Until date {as_date(self.until).isoformat()} must be after "
                    f"start date {self.start.date().isoformat()}"
                )


class RecurrenceExpander:
    """Turns a RecurrenceRule into events sharing one freshly allocated series id."""

    def __init__(self, allocator: SeriesIdAllocator):
        self._allocator = allocator

    def expand(
        self,
        rule: RecurrenceRule,
        check: Callable[[list[Event]], None] | None = None,
    ) -> list[Event]:
        """Expand ``rule`` and stamp the occurrences with a new series id.

        ``check`` runs on the unstamped occurrences before an id is allocated,
        so a rejected expansion consumes no id.
        """
        occurrences = occurrences_of(rule)
        if not occurrences:
            raise ValidationError(
                f"No occurrences of '{rule.subject}' between "
                f"{rule.start.date().isoformat()} and {as_date(rule.until).isoformat()}"
            )
        if check is not None:
            check(occurrences)
        series_id = self._allocator.allocate()
        occurrences = [replace(e, series_id=series_id) for e in occurrences]
        logger.debug(
            "Expanded '%s' into %d occurrence(s), series %d",
            rule.subject, len(occurrences), series_id,
        )
        return occurrences


def occurrences_of(rule: RecurrenceRule) -> list[Event]:
    """Occurrences of ``rule`` from its anchor day onward.

    The anchor day itself is skipped when its weekday is not listed.
    """
    until = None
    if rule.until is not None:
        until = datetime.combine(as_date(rule.until), time.max)
    starts = rrule(
        WEEKLY,
        dtstart=rule.start,
        byweekday=sorted(int(d) for d in rule.weekdays),
        count=rule.count,
        until=until,
    )

    occurrences: list[Event] = []
    for start in starts:
        if rule.all_day:
            start, end = all_day_bounds(start.date())
        else:
            end = start + (rule.end - rule.start)
        occurrences.append(
            Event(subject=rule.subject, start=start, end=end, all_day=rule.all_day)
        )
    return occurrences
