"""Sunrise, sunset, noon, golden hour and twilight times for a place and date."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from math import acos, cos, degrees, radians, sin
from typing import Optional
from zoneinfo import ZoneInfo

from ..schemas.solar import SolarTimesData
from .ephem import sun_declination, sunrise_after, sunset_after, transit
from .lunar_ephemeris import equation_of_time_minutes
from .location import resolve_timezone

logger = logging.getLogger(__name__)

GOLDEN_HOUR_ALTITUDE = 6.0
CIVIL_TWILIGHT = -6.0
NAUTICAL_TWILIGHT = -12.0
ASTRONOMICAL_TWILIGHT = -18.0


def _local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=tz)


def _on_day(moment: Optional[datetime], day: date, tz: ZoneInfo) -> Optional[datetime]:
    if moment is None:
        return None
    local = moment.astimezone(tz)
    return local if local.date() == day else None


def solar_noon(day: date, lon: float, tz: ZoneInfo, lat: float = 0.0) -> datetime:
    """Upper transit of the Sun on ``day``; mean-time estimate if the search fails."""

    noon = _on_day(transit(_local_midnight(day, tz), lat, lon), day, tz)
    if noon is not None:
        return noon
    utc_noon = datetime.combine(day, time(12, 0), tzinfo=timezone.utc)
    offset = lon * 4.0 + equation_of_time_minutes(utc_noon)
    return (utc_noon - timedelta(minutes=offset)).astimezone(tz)


def hour_angle(lat: float, declination: float, altitude: float) -> Optional[float]:
    """Hour angle in degrees at which the Sun stands at ``altitude``; None if never."""

    phi = radians(lat)
    dec = radians(declination)
    denominator = cos(phi) * cos(dec)
    if abs(denominator) < 1e-12:
        return None
    cos_h = (sin(radians(altitude)) - sin(phi) * sin(dec)) / denominator
    if cos_h < -1.0 or cos_h > 1.0:
        return None
    return degrees(acos(cos_h))


def time_at_sun_altitude(
    day: date,
    lat: float,
    lon: float,
    altitude: float,
    rising: bool,
    tz: ZoneInfo,
    noon: Optional[datetime] = None,
) -> Optional[datetime]:
    """Moment the Sun's centre crosses ``altitude`` before (rising) or after solar noon."""

    noon = noon or solar_noon(day, lon, tz, lat)
    direction = -1.0 if rising else 1.0
    moment = noon
    for _ in range(3):
        ha = hour_angle(lat, sun_declination(moment), altitude)
        if ha is None:
            return None
        moment = noon + timedelta(hours=direction * ha / 15.0)
    return moment.astimezone(tz)


def _day_length(
    sunrise: Optional[datetime], sunset: Optional[datetime], lat: float, noon: datetime
) -> float:
    if sunrise is not None and sunset is not None:
        return round((sunset - sunrise).total_seconds() / 60.0, 2)
    dec = sun_declination(noon)
    ha = hour_angle(lat, dec, -0.833)
    if ha is not None:
        return round(2.0 * ha / 15.0 * 60.0, 2)
    noon_altitude = 90.0 - abs(lat - dec)
    return 1440.0 if noon_altitude > 0 else 0.0


def get_solar_times(
    day: date,
    lat: float,
    lon: float,
    *,
    elevation: float = 0.0,
    timezone: Optional[str] = None,
) -> SolarTimesData:
    """Daylight-anchored times on a local date.

    Golden hour follows the usual photographic convention: it ends in the
    morning when the Sun climbs past 6 degrees and starts in the evening
    when it drops below 6 degrees.
    """

    tz_name = resolve_timezone(lat, lon, timezone)
    tz = ZoneInfo(tz_name)
    midnight = _local_midnight(day, tz)

    noon = solar_noon(day, lon, tz, lat)
    sunrise = _on_day(sunrise_after(midnight, lat, lon, elevation), day, tz)
    sunset = _on_day(sunset_after(midnight, lat, lon, elevation), day, tz)
    if sunrise is None or sunset is None:
        logger.debug("no complete sunrise/sunset on %s at %.3f,%.3f", day, lat, lon)

    def at(altitude: float, rising: bool) -> Optional[datetime]:
        return time_at_sun_altitude(day, lat, lon, altitude, rising, tz, noon=noon)

    return SolarTimesData(
        date=day,
        timezone=tz_name,
        sunrise=sunrise,
        sunset=sunset,
        solar_noon=noon,
        golden_hour_end=at(GOLDEN_HOUR_ALTITUDE, True),
        golden_hour_start=at(GOLDEN_HOUR_ALTITUDE, False),
        civil_dawn=at(CIVIL_TWILIGHT, True),
        civil_dusk=at(CIVIL_TWILIGHT, False),
        nautical_dawn=at(NAUTICAL_TWILIGHT, True),
        nautical_dusk=at(NAUTICAL_TWILIGHT, False),
        astronomical_dawn=at(ASTRONOMICAL_TWILIGHT, True),
        astronomical_dusk=at(ASTRONOMICAL_TWILIGHT, False),
        day_length_minutes=_day_length(sunrise, sunset, lat, noon),
    )
