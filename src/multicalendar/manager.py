"""Registry of named calendars and the current selection."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .calendars import Calendar
from .copier import CrossCalendarCopier
from .errors import (
    DuplicateCalendarName,
    NoCurrentCalendar,
    UnknownCalendar,
    UnknownProperty,
    ValidationError,
)
from .models import Event
from .timezones import validate_timezone

if TYPE_CHECKING:
    from .config import AppConfig

logger = logging.getLogger("multicalendar")

CALENDAR_PROPERTIES = ("name", "timezone")


class CalendarManager:
    """Owns calendars by name and tracks which one is current.

    The current selection is a reference into the registry; selecting a
    calendar neither copies nor locks it.
    """

    def __init__(self) -> None:
        self._calendars: dict[str, Calendar] = {}
        self._current: Calendar | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> CalendarManager:
        """Build a manager from loaded configuration, in file order."""
        manager = cls()
        for settings in config.calendars.values():
            manager.create_calendar(settings.name, settings.timezone)
        if config.current:
            manager.use_calendar(config.current)
        logger.info(
            "Loaded %d calendar(s): %s", len(manager._calendars), manager.calendar_names()
        )
        return manager

    # -- registry ---------------------------------------------------------

    @property
    def current(self) -> Calendar:
        if self._current is None:
            raise NoCurrentCalendar("No calendar is currently in use. Select one with use_calendar first.")
        return self._current

    @property
    def has_current(self) -> bool:
        return self._current is not None

    def get_calendar(self, name: str) -> Calendar:
        if isinstance(name, str):
            name = name.strip()
        if name not in self._calendars:
            raise UnknownCalendar(
                f"Unknown calendar '{name}'. Available: {self.calendar_names()}"
            )
        return self._calendars[name]

    def calendar_names(self) -> list[str]:
        return list(self._calendars.keys())

    def list_calendars(self) -> list[dict[str, Any]]:
        return [
            {
                "name": cal.name,
                "timezone": cal.timezone,
                "events": len(cal.store),
                "current": cal is self._current,
            }
            for cal in self._calendars.values()
        ]

    def create_calendar(self, name: str, timezone: str) -> Calendar:
        name = _validate_name(name)
        if name in self._calendars:
            raise DuplicateCalendarName(f"Calendar '{name}' already exists")
        calendar = Calendar(name, timezone)
        self._calendars[name] = calendar
        logger.info("Created calendar '%s' (%s)", name, calendar.timezone)
        return calendar

    def use_calendar(self, name: str) -> Calendar:
        self._current = self.get_calendar(name)
        logger.debug("Using calendar '%s'", name)
        return self._current

    def edit_calendar(self, name: str, property_name: str, new_value: str) -> Calendar:
        """Rename or re-zone a calendar.

        Re-zoning changes only the calendar's zone label. Stored event times
        are not converted.
        """
        calendar = self.get_calendar(name)
        prop = str(property_name).strip().lower()
        if prop == "name":
            new_name = _validate_name(new_value)
            old_name = calendar.name
            existing = self._calendars.get(new_name)
            if existing is not None and existing is not calendar:
                raise DuplicateCalendarName(f"Calendar '{new_name}' already exists")
            # Rebuild to keep registry order stable under rename.
            self._calendars = {
                (new_name if cal is calendar else key): cal for key, cal in self._calendars.items()
            }
            calendar.name = new_name
            logger.info("Renamed calendar '%s' to '%s'", old_name, new_name)
        elif prop == "timezone":
            old_zone = calendar.timezone
            calendar.timezone = validate_timezone(new_value)
            logger.info(
                "Calendar '%s': timezone changed from %s to %s (events not converted)",
                calendar.name, old_zone, calendar.timezone,
            )
        else:
            raise UnknownProperty(
                f"Unknown calendar property '{property_name}'. Must be one of: {', '.join(CALENDAR_PROPERTIES)}"
            )
        return calendar

    # -- copy -------------------------------------------------------------

    def _copier(self, target_calendar_name: str) -> CrossCalendarCopier:
        source = self.current
        return CrossCalendarCopier(source, self.get_calendar(target_calendar_name))

    def copy_event(
        self,
        subject: str,
        source_start: datetime,
        target_calendar_name: str,
        target_start: datetime,
    ) -> Event:
        return self._copier(target_calendar_name).copy_event(subject, source_start, target_start)

    def copy_events_on_date(
        self,
        day: date | datetime,
        target_calendar_name: str,
        target_day: date | datetime,
    ) -> list[Event]:
        return self._copier(target_calendar_name).copy_events_on_date(day, target_day)

    def copy_events_between_dates(
        self,
        start_day: date | datetime,
        end_day: date | datetime,
        target_calendar_name: str,
        target_start_day: date | datetime,
    ) -> list[Event]:
        return self._copier(target_calendar_name).copy_events_between_dates(
            start_day, end_day, target_start_day
        )


def _validate_name(name: str) -> str:
    if name is None or not str(name).strip():
        raise ValidationError("Calendar name cannot be empty")
    return str(name).strip()
