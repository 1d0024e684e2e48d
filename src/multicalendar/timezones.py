"""IANA timezone validation and wall-clock conversion.

Event times are naive wall-clock values in their calendar's zone. Converting
between calendars attaches the source zone, moves to the target zone, and
strips the zone again.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidTimezone


def get_zone(timezone: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA id, raising InvalidTimezone if unknown."""
    if not isinstance(timezone, str) or not timezone.strip():
        raise InvalidTimezone(f"Invalid timezone: {timezone!r}. IANA timezone format is expected.")
    try:
        return ZoneInfo(timezone.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezone(
            f"Invalid timezone: {timezone!r}. IANA timezone format is expected."
        ) from e


def validate_timezone(timezone: str) -> str:
    """Return the normalized zone id, raising InvalidTimezone if unknown."""
    return get_zone(timezone).key


def convert_wall_clock(dt: datetime, from_zone: str, to_zone: str) -> datetime:
    """Convert a naive wall-clock time in ``from_zone`` to one in ``to_zone``."""
    if from_zone == to_zone:
        return dt
    aware = dt.replace(tzinfo=get_zone(from_zone))
    return aware.astimezone(get_zone(to_zone)).replace(tzinfo=None)
