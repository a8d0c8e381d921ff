"""Julian Day helpers shared by the lunar, solar and calendar services."""

from __future__ import annotations

from datetime import date, datetime, timezone
from math import floor

J2000 = 2451545.0
UNIX_EPOCH_JD = 2440587.5


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def julian_day(dt_utc: datetime) -> float:
    """Return the astronomical Julian Day number for a UTC moment."""

    dt_utc = ensure_aware(dt_utc).astimezone(timezone.utc)

    year = dt_utc.year
    month = dt_utc.month
    day = dt_utc.day + (
        dt_utc.hour / 24.0
        + dt_utc.minute / 1440.0
        + dt_utc.second / 86400.0
        + dt_utc.microsecond / 86400_000_000.0
    )

    if month <= 2:
        year -= 1
        month += 12

    a = floor(year / 100)
    b = 2 - a + floor(a / 4)

    return (
        floor(365.25 * (year + 4716))
        + floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
    )


def julian_centuries(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - J2000) / 36525.0


def datetime_from_julian(jd: float) -> datetime:
    seconds = (jd - UNIX_EPOCH_JD) * 86400.0
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def julian_day_number(day: date) -> int:
    """Integer Julian Day Number of a Gregorian calendar date (noon based)."""
    return day.toordinal() + 1721425


def date_from_julian_day_number(jdn: int) -> date:
    return date.fromordinal(jdn - 1721425)
