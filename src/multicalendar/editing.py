"""Editing events under single, from-date and whole-series scopes."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from .errors import InvalidPropertyValue, NotFound, UnknownProperty, ValidationError
from .models import Event, EventLocation, EventStatus, validate_interval, validate_subject
from .store import EventStore, SeriesIdAllocator

logger = logging.getLogger("multicalendar")

EDITABLE_PROPERTIES = ("subject", "start", "end", "description", "location", "status")


class EditScope(Enum):
    SINGLE = "single"
    FROM_DATE = "from_date"
    SERIES = "series"


def _parse_datetime(value: Any) -> datetime:
    """Parse an ISO 8601 style timestamp. Datetimes pass through."""
    if isinstance(value, datetime):
        dt = value
    else:
        from dateutil.parser import ParserError, parse as parse_dt
        try:
            dt = parse_dt(str(value))
        except (ParserError, ValueError, OverflowError) as e:
            raise InvalidPropertyValue(f"Invalid date/time: {value!r}") from e
    if dt.tzinfo is not None:
        raise InvalidPropertyValue(f"Expected a wall-clock time without zone: {value!r}")
    return dt


def _parse_enum(enum_cls: type[Enum], value: Any, property_name: str):
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value == text:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise InvalidPropertyValue(f"Invalid {property_name} '{value}'. Must be one of: {allowed}")


def coerce_property(name: str, value: Any) -> tuple[str, Any]:
    """Normalize a property name and coerce its new value to the stored type."""
    prop = str(name).strip().lower()
    if prop not in EDITABLE_PROPERTIES:
        raise UnknownProperty(
            f"Unknown property '{name}'. Must be one of: {', '.join(EDITABLE_PROPERTIES)}"
        )
    if prop == "subject":
        validate_subject(value)
        return prop, str(value)
    if prop in ("start", "end"):
        return prop, _parse_datetime(value)
    if prop == "description":
        return prop, None if value is None else str(value)
    if prop == "location":
        return prop, _parse_enum(EventLocation, value, "location")
    return prop, _parse_enum(EventStatus, value, "status")


class EditScopeResolver:
    """Applies one property change to the events selected by an edit scope.

    All verbs build every replacement event first and then swap them into the
    store in one atomic step, so a failure leaves the store unchanged.
    """

    def __init__(self, store: EventStore, allocator: SeriesIdAllocator):
        self._store = store
        self._allocator = allocator

    def edit(
        self,
        scope: EditScope,
        subject: str,
        start: datetime,
        property_name: str,
        new_value: Any,
        end: datetime | None = None,
    ) -> list[Event]:
        prop, value = coerce_property(property_name, new_value)
        with self._store.lock:
            anchor = self._resolve_anchor(subject, start, end)
            if scope is EditScope.SINGLE or anchor.series_id is None:
                targets = [anchor]
            elif scope is EditScope.SERIES:
                targets = self._store.series(anchor.series_id)
            else:
                anchor_day = anchor.start.date()
                targets = [
                    e for e in self._store.series(anchor.series_id)
                    if e.start.date() >= anchor_day
                ]

            change = _make_change(anchor, prop, value)
            pairs = [(old, change(old)) for old in targets]

            if scope is EditScope.FROM_DATE and anchor.series_id is not None:
                self._store.check_replace(pairs)
                series_id = self._allocator.allocate()
                edited = self._store.replace_all(
                    (old, replace(new, series_id=series_id)) for old, new in pairs
                )
                logger.info(
                    "Split series %d at %s: %d event(s) moved to series %d",
                    anchor.series_id, anchor.start.date().isoformat(), len(edited), series_id,
                )
            else:
                edited = self._store.replace_all(pairs)
                logger.debug(
                    "Edited %s of %d event(s) ('%s' at %s, scope %s)",
                    prop, len(edited), anchor.subject, anchor.start.isoformat(), scope.value,
                )
        return edited

    def edit_single(self, subject, start, property_name, new_value, end=None) -> list[Event]:
        return self.edit(EditScope.SINGLE, subject, start, property_name, new_value, end)

    def edit_from_date(self, subject, start, property_name, new_value, end=None) -> list[Event]:
        return self.edit(EditScope.FROM_DATE, subject, start, property_name, new_value, end)

    def edit_series(self, subject, start, property_name, new_value, end=None) -> list[Event]:
        return self.edit(EditScope.SERIES, subject, start, property_name, new_value, end)

    def _resolve_anchor(self, subject: str, start: datetime, end: datetime | None) -> Event:
        anchor = self._store.get(subject, start)
        if end is not None and anchor.end != end:
            raise NotFound(
                f"Event not found with subject '{subject}', start time '{start}' and end time '{end}'"
            )
        return anchor


def _make_change(anchor: Event, prop: str, value: Any) -> Callable[[Event], Event]:
    """Build the per-event transformation for one property change.

    Start and end edits move the anchor to exactly ``value`` and shift every
    other member by the same delta, keeping members apart.
    """
    if prop in ("start", "end"):
        delta = value - getattr(anchor, prop)

        def shift(event: Event) -> Event:
            moved = value if event is anchor else getattr(event, prop) + delta
            updated = replace(event, all_day=False, **{prop: moved})
            _validate_bounds(updated, prop)
            return updated

        return shift

    return lambda event: replace(event, **{prop: value})


def _validate_bounds(event: Event, prop: str) -> None:
    try:
        validate_interval(event.start, event.end)
    except ValidationError as e:
        raise ValidationError(f"Cannot change {prop} of '{event.subject}': {e}") from e
