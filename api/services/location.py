"""Coordinate validation, polar classification and timezone resolution."""

from __future__ import annotations

import logging
import math
import os
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

from ..schemas.location import CoordinateValidation, Location, TimezoneInfo
from .errors import InvalidCoordinatesError

logger = logging.getLogger(__name__)

POLAR_CIRCLE_LAT = 66.5
HIGH_LATITUDE_LAT = 60.0
LOCALTIME_PATH = "/etc/localtime"

# Nominal zone for each whole-hour offset band, keyed on round(lon / 15).
OFFSET_ZONES: Dict[int, str] = {
    -12: "Pacific/Kwajalein",
    -11: "Pacific/Midway",
    -10: "Pacific/Honolulu",
    -9: "America/Anchorage",
    -8: "America/Los_Angeles",
    -7: "America/Denver",
    -6: "America/Chicago",
    -5: "America/New_York",
    -4: "America/Halifax",
    -3: "America/Sao_Paulo",
    -2: "Atlantic/South_Georgia",
    -1: "Atlantic/Azores",
    0: "Europe/London",
    1: "Europe/Paris",
    2: "Europe/Berlin",
    3: "Europe/Moscow",
    4: "Asia/Dubai",
    5: "Asia/Karachi",
    6: "Asia/Dhaka",
    7: "Asia/Bangkok",
    8: "Asia/Shanghai",
    9: "Asia/Tokyo",
    10: "Australia/Sydney",
    11: "Pacific/Noumea",
    12: "Pacific/Auckland",
}

@lru_cache(maxsize=1)
def _finder() -> TimezoneFinder:
    return TimezoneFinder()


def validate_coordinates(lat: float, lon: float) -> CoordinateValidation:
    """Check a coordinate pair, reporting one message per offending axis."""

    errors: List[str] = []
    if lat is None or math.isnan(lat):
        errors.append("Latitude must be a number")
    elif not -90.0 <= lat <= 90.0:
        errors.append("Latitude must be between -90 and 90 degrees")

    if lon is None or math.isnan(lon):
        errors.append("Longitude must be a number")
    elif not -180.0 <= lon <= 180.0:
        errors.append("Longitude must be between -180 and 180 degrees")

    return CoordinateValidation(valid=not errors, errors=errors)


def require_valid_coordinates(lat: float, lon: float) -> None:
    result = validate_coordinates(lat, lon)
    if not result.valid:
        raise InvalidCoordinatesError(result.errors)


def is_polar_region(lat: float) -> bool:
    return abs(lat) > POLAR_CIRCLE_LAT


def is_high_latitude(lat: float) -> bool:
    """Between 60 degrees and the polar circle."""
    return HIGH_LATITUDE_LAT < abs(lat) <= POLAR_CIRCLE_LAT


def is_valid_timezone(name: Optional[str]) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _polygon_lookup(lat: float, lon: float) -> Optional[str]:
    if os.getenv("TIMEZONE_LOOKUP", "polygon").strip().lower() == "offset":
        return None
    name = _finder().timezone_at(lng=lon, lat=lat)
    return name if is_valid_timezone(name) else None


def offset_zone(lon: float) -> Optional[str]:
    offset = int(round(lon / 15.0))
    offset = max(-12, min(12, offset))
    name = OFFSET_ZONES.get(offset)
    return name if is_valid_timezone(name) else None


def _system_zone() -> Optional[str]:
    """IANA name of the host's local zone from /etc/localtime, if it links into zoneinfo."""

    try:
        target = os.path.realpath(LOCALTIME_PATH)
    except OSError:
        return None
    marker = "zoneinfo" + os.sep
    if marker not in target:
        return None
    return target.split(marker, 1)[1]


def _host_zone() -> Optional[str]:
    for name in (os.getenv("TZ"), _system_zone()):
        if name and name.startswith(":"):
            name = name[1:]
        if is_valid_timezone(name):
            return name
    return None


def resolve_timezone(lat: float, lon: float, supplied: Optional[str] = None) -> str:
    """Resolve an IANA zone for a coordinate pair.

    The chain is: a valid caller-supplied zone, the timezonefinder polygon
    lookup, the nominal zone of the ``round(lon / 15)`` offset band, the
    host zone from ``TZ`` or ``/etc/localtime`` and finally ``UTC``.
    """

    require_valid_coordinates(lat, lon)

    if is_valid_timezone(supplied):
        return supplied  # type: ignore[return-value]
    if supplied:
        logger.debug("ignoring unknown timezone %r", supplied)

    name = _polygon_lookup(lat, lon)
    if name:
        return name

    name = offset_zone(lon)
    if name:
        logger.warning("timezone for %.4f,%.4f taken from offset table: %s", lat, lon, name)
        return name

    name = _host_zone()
    if name:
        return name
    return "UTC"


def _format_offset(minutes: int) -> str:
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def timezone_info(iana_id: str, instant: Optional[datetime] = None) -> TimezoneInfo:
    """Offset, DST flag and abbreviation of a zone at ``instant`` (default now)."""

    zone = ZoneInfo(iana_id)
    moment = instant or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(zone)
    offset = local.utcoffset()
    dst = local.dst()
    offset_minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    return TimezoneInfo(
        timezone=iana_id,
        offset_minutes=offset_minutes,
        is_dst=bool(dst and dst.total_seconds() != 0),
        abbreviation=local.tzname() or iana_id,
        utc_offset=_format_offset(offset_minutes),
    )


def enrich_location(location: Location) -> Location:
    """Return a copy of ``location`` with timezone and elevation filled in."""

    require_valid_coordinates(location.latitude, location.longitude)
    tz = resolve_timezone(location.latitude, location.longitude, location.timezone)
    return location.model_copy(
        update={
            "timezone": tz,
            "elevation": location.elevation if location.elevation is not None else 0.0,
        }
    )


def location_zone(location: Location) -> ZoneInfo:
    return ZoneInfo(resolve_timezone(location.latitude, location.longitude, location.timezone))
