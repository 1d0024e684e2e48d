"""A named, timezone-scoped calendar and its event API."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable

from .editing import EditScopeResolver
from .models import Event, new_all_day_event, new_timed_event
from .recurrence import RecurrenceExpander, RecurrenceRule
from .store import EventStore, SeriesIdAllocator
from .timezones import validate_timezone

logger = logging.getLogger("multicalendar")


class Calendar:
    """One calendar: a name, an IANA zone, an event store and its series ids.

    Event times are wall-clock values in ``timezone``. Changing the zone only
    relabels the calendar; stored times are left as they are.
    """

    def __init__(self, name: str, timezone: str):
        self.name = name
        self.timezone = validate_timezone(timezone)
        self.store = EventStore()
        self.series_ids = SeriesIdAllocator()
        self._expander = RecurrenceExpander(self.series_ids)
        self._editor = EditScopeResolver(self.store, self.series_ids)

    def __repr__(self) -> str:
        return f"Calendar(name={self.name!r}, timezone={self.timezone!r}, events={len(self.store)})"

    # -- create -----------------------------------------------------------

    def create_single_timed(self, subject: str, start: datetime, end: datetime) -> Event:
        event = self.store.add(new_timed_event(subject, start, end))
        logger.debug("Created '%s' at %s in '%s'", subject, start.isoformat(), self.name)
        return event

    def create_single_all_day(self, subject: str, day: date | datetime) -> Event:
        event = self.store.add(new_all_day_event(subject, day))
        logger.debug("Created all-day '%s' on %s in '%s'", subject, event.start.date(), self.name)
        return event

    def create_recurring_timed(
        self,
        subject: str,
        start: datetime,
        end: datetime,
        weekdays: Iterable[int],
        *,
        count: int | None = None,
        until: date | None = None,
    ) -> list[Event]:
        rule = RecurrenceRule.timed(subject, start, end, weekdays, count=count, until=until)
        return self._add_series(rule)

    def create_recurring_all_day(
        self,
        subject: str,
        day: date | datetime,
        weekdays: Iterable[int],
        *,
        count: int | None = None,
        until: date | None = None,
    ) -> list[Event]:
        rule = RecurrenceRule.all_day_from(subject, day, weekdays, count=count, until=until)
        return self._add_series(rule)

    def _add_series(self, rule: RecurrenceRule) -> list[Event]:
        with self.store.lock:
            events = self._expander.expand(rule, check=self.store.check_insertable)
            self.store.add_all(events)
        logger.info(
            "Created series %d in '%s': '%s' x%d",
            events[0].series_id, self.name, rule.subject, len(events),
        )
        return events

    # -- edit -------------------------------------------------------------

    def edit_single(
        self, subject: str, start: datetime, property_name: str, new_value: Any,
        end: datetime | None = None,
    ) -> list[Event]:
        return self._editor.edit_single(subject, start, property_name, new_value, end)

    def edit_from_date(
        self, subject: str, start: datetime, property_name: str, new_value: Any,
        end: datetime | None = None,
    ) -> list[Event]:
        return self._editor.edit_from_date(subject, start, property_name, new_value, end)

    def edit_series(
        self, subject: str, start: datetime, property_name: str, new_value: Any,
        end: datetime | None = None,
    ) -> list[Event]:
        return self._editor.edit_series(subject, start, property_name, new_value, end)

    # -- query ------------------------------------------------------------

    def events_on_date(self, day: date | datetime) -> list[Event]:
        return self.store.on_date(day)

    def events_in_range(self, start: datetime | date, end: datetime | date) -> list[Event]:
        return self.store.in_range(start, end)

    def is_busy_at(self, instant: datetime) -> bool:
        return self.store.is_busy_at(instant)

    def all_events(self) -> list[Event]:
        return self.store.all_events()

    def find_event(self, subject: str, start: datetime) -> Event | None:
        return self.store.find(subject, start)

    def get_event(self, subject: str, start: datetime) -> Event:
        return self.store.get(subject, start)

    def series(self, series_id: int) -> list[Event]:
        return self.store.series(series_id)
