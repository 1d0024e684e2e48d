"""YAML configuration loading for calendars."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import yaml

from .timezones import validate_timezone

logger = logging.getLogger("multicalendar")

CONFIG_PATH = os.environ.get("CALENDAR_CONFIG", "/config/calendars.yaml")


@dataclass
class CalendarSettings:
    """A single configured calendar."""

    name: str
    timezone: str  # IANA zone id, e.g. America/New_York


@dataclass
class AppConfig:
    calendars: dict[str, CalendarSettings] = field(default_factory=dict)
    current: str | None = None  # calendar selected at startup


def load_config(path: str | None = None) -> AppConfig:
    """Load and validate calendars.yaml.

    Returns an empty AppConfig if the file or its 'calendars' key is missing.
    """
    path = path or CONFIG_PATH
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return AppConfig()

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    if not raw or "calendars" not in raw:
        logger.warning("No 'calendars' key in config file")
        return AppConfig()

    calendars: dict[str, CalendarSettings] = {}

    for entry in raw["calendars"] or []:
        name = str(entry.get("name") or "").strip()
        if not name:
            raise ValueError("Calendar missing 'name' field")
        if name in calendars:
            raise ValueError(f"Duplicate calendar name: '{name}'")

        timezone = str(entry.get("timezone") or "").strip()
        if not timezone:
            raise ValueError(f"Calendar '{name}': 'timezone' is required")
        timezone = validate_timezone(timezone)

        calendars[name] = CalendarSettings(name=name, timezone=timezone)

    current = raw.get("current")
    if current is not None:
        current = str(current).strip()
        if current not in calendars:
            raise ValueError(
                f"Current calendar '{current}' is not configured. Available: {list(calendars)}"
            )

    return AppConfig(calendars=calendars, current=current)
