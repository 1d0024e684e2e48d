"""Copying events between calendars with timezone conversion."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable

from .calendars import Calendar
from .errors import ValidationError
from .models import Event, all_day_bounds, as_date, validate_timestamp
from .timezones import convert_wall_clock

logger = logging.getLogger("multicalendar")


class CrossCalendarCopier:
    """Copies events from ``source`` into ``target``.

    Bulk copies are all-or-nothing: if any copied event would collide with an
    event already in the target, or with another event of the same batch,
    DuplicateEvent is raised and the target is left unchanged. The target
    store's lock is held for the whole batch; the source is only read.
    """

    def __init__(self, source: Calendar, target: Calendar):
        self.source = source
        self.target = target

    def copy_event(self, subject: str, source_start: datetime, target_start: datetime) -> Event:
        """Copy one event to start at ``target_start``.

        ``target_start`` is a wall-clock time in the target calendar's zone
        and is used as given, without conversion from the source zone.
        """
        validate_timestamp(target_start, "Target start time")
        event = self.source.get_event(subject, source_start)
        if event.all_day:
            start, end = all_day_bounds(target_start.date())
        else:
            start, end = target_start, target_start + event.duration
        copied = replace(event, start=start, end=end, series_id=None)
        self.target.store.add(copied)
        logger.info(
            "Copied '%s' from '%s' to '%s' at %s",
            subject, self.source.name, self.target.name, start.isoformat(),
        )
        return copied

    def copy_events_on_date(self, day: date | datetime, target_day: date | datetime) -> list[Event]:
        """Copy every event starting on ``day`` onto ``target_day``.

        Timed events keep their converted time of day and their duration.
        """
        day, target_day = as_date(day), as_date(target_day)

        def place(event: Event) -> tuple[datetime, datetime]:
            if event.all_day:
                return all_day_bounds(target_day)
            converted = self._convert(event.start)
            start = datetime.combine(target_day, converted.time())
            return start, start + event.duration

        return self._copy_batch(self.source.events_on_date(day), place)

    def copy_events_between_dates(
        self,
        start_day: date | datetime,
        end_day: date | datetime,
        target_start_day: date | datetime,
    ) -> list[Event]:
        """Copy events starting in ``[start_day, end_day]``, shifted to begin at ``target_start_day``."""
        start_day, end_day = as_date(start_day), as_date(end_day)
        if end_day < start_day:
            raise ValidationError(
                f"End date {end_day.isoformat()} is before start date {start_day.isoformat()}"
            )
        offset = timedelta(days=(as_date(target_start_day) - start_day).days)

        def place(event: Event) -> tuple[datetime, datetime]:
            if event.all_day:
                return all_day_bounds(event.start.date() + offset)
            start = self._convert(event.start + offset)
            return start, start + event.duration

        return self._copy_batch(self.source.store.starting_between(start_day, end_day), place)

    def _convert(self, dt: datetime) -> datetime:
        return convert_wall_clock(dt, self.source.timezone, self.target.timezone)

    def _copy_batch(
        self,
        events: list[Event],
        place: Callable[[Event], tuple[datetime, datetime]],
    ) -> list[Event]:
        placed = []
        for event in events:
            start, end = place(event)
            placed.append(replace(event, start=start, end=end))

        with self.target.store.lock:
            # Duplicate checks ignore series ids, so validate before allocating.
            self.target.store.check_insertable(placed)
            series_map: dict[int, int] = {}
            copies = []
            for event in placed:
                series_id = None
                if event.series_id is not None:
                    if event.series_id not in series_map:
                        series_map[event.series_id] = self.target.series_ids.allocate()
                    series_id = series_map[event.series_id]
                copies.append(replace(event, series_id=series_id))
            self.target.store.add_all(copies)

        logger.info(
            "Copied %d event(s) from '%s' to '%s' (%d series remapped)",
            len(copies), self.source.name, self.target.name, len(series_map),
        )
        return copies
