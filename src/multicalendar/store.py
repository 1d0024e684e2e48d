"""Per-calendar event storage with duplicate rejection."""

from __future__ import annotations

import threading
from datetime import date, datetime, time
from typing import Iterable, Iterator

from .errors import DuplicateEvent, NotFound, ValidationError
from .models import Event, EventKey


class SeriesIdAllocator:
    """Monotonically increasing series ids for one calendar. Ids are never reused."""

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def allocate(self) -> int:
        with self._lock:
            series_id = self._next
            self._next += 1
            return series_id

    @property
    def next_id(self) -> int:
        return self._next


class EventStore:
    """Events of one calendar, keyed by (subject, start).

    Every mutating call either applies completely or raises and leaves the
    store untouched. ``lock`` serializes writers; callers running a
    multi-step sequence (check, allocate, insert) hold it for the whole
    sequence.
    """

    def __init__(self) -> None:
        self._events: dict[EventKey, Event] = {}
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.all_events())

    def __contains__(self, key: object) -> bool:
        if isinstance(key, Event):
            key = key.key
        return key in self._events

    # -- mutation ---------------------------------------------------------

    def add(self, event: Event) -> Event:
        with self.lock:
            if event.key in self._events:
                raise DuplicateEvent(_duplicate_message(event.key))
            self._events[event.key] = event
        return event

    def add_all(self, events: Iterable[Event]) -> list[Event]:
        """Insert a batch atomically. Any collision rejects the whole batch."""
        batch = list(events)
        with self.lock:
            self._check_insertable(batch, replaced=())
            for event in batch:
                self._events[event.key] = event
        return batch

    def replace_all(self, pairs: Iterable[tuple[Event, Event]]) -> list[Event]:
        """Swap each old event for its new version atomically.

        Collisions are checked against the store without the replaced events,
        so an event may keep its own key.
        """
        pairs = list(pairs)
        with self.lock:
            self.check_replace(pairs)
            for old, _ in pairs:
                del self._events[old.key]
            for _, new in pairs:
                self._events[new.key] = new
        return [new for _, new in pairs]

    def check_replace(self, pairs: Iterable[tuple[Event, Event]]) -> None:
        """Raise the error ``replace_all`` would raise, without changing anything."""
        pairs = list(pairs)
        with self.lock:
            for old, _ in pairs:
                if self._events.get(old.key) != old:
                    raise NotFound(f"Event not found: '{old.subject}' at {old.start.isoformat()}")
            replaced = {old.key for old, _ in pairs}
            self._check_insertable([new for _, new in pairs], replaced=replaced)

    def check_insertable(self, events: Iterable[Event]) -> None:
        """Raise the error ``add_all`` would raise, without changing anything."""
        with self.lock:
            self._check_insertable(list(events), replaced=())

    def _check_insertable(self, batch: list[Event], replaced: Iterable[EventKey]) -> None:
        replaced = set(replaced)
        seen: set[EventKey] = set()
        for event in batch:
            key = event.key
            if key in seen or (key in self._events and key not in replaced):
                raise DuplicateEvent(_duplicate_message(key))
            seen.add(key)

    # -- lookup -----------------------------------------------------------

    def find(self, subject: str, start: datetime) -> Event | None:
        return self._events.get(EventKey(subject, start))

    def get(self, subject: str, start: datetime) -> Event:
        event = self.find(subject, start)
        if event is None:
            raise NotFound(f"Event not found with subject '{subject}' and start time '{start}'")
        return event

    def series(self, series_id: int) -> list[Event]:
        return _sorted(e for e in self._events.values() if e.series_id == series_id)

    def known_series_ids(self) -> set[int]:
        return {e.series_id for e in self._events.values() if e.series_id is not None}

    # -- queries ----------------------------------------------------------

    def all_events(self) -> list[Event]:
        return _sorted(self._events.values())

    def on_date(self, day: date) -> list[Event]:
        """Events whose start falls on ``day``."""
        if isinstance(day, datetime):
            day = day.date()
        return _sorted(e for e in self._events.values() if e.start.date() == day)

    def starting_between(self, first: date, last: date) -> list[Event]:
        """Events whose start date lies in ``[first, last]``."""
        return _sorted(e for e in self._events.values() if first <= e.start.date() <= last)

    def in_range(self, start: datetime | date, end: datetime | date) -> list[Event]:
        """Events overlapping the inclusive window ``[start, end]``.

        Plain dates widen to the start and end of their day.
        """
        if not isinstance(start, datetime):
            start = datetime.combine(start, time.min)
        if not isinstance(end, datetime):
            end = datetime.combine(end, time.max)
        if end < start:
            raise ValidationError(
                f"Range end {end.isoformat()} is before range start {start.isoformat()}"
            )
        return _sorted(e for e in self._events.values() if e.start <= end and e.end >= start)

    def is_busy_at(self, instant: datetime) -> bool:
        return any(e.start <= instant <= e.end for e in self._events.values())


def _sorted(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.start, e.subject))


def _duplicate_message(key: EventKey) -> str:
    return f"An event '{key.subject}' starting at {key.start.isoformat()} already exists"
