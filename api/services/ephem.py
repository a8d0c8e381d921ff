"""Swiss Ephemeris helpers used by the solar and precision lunar services."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional, Tuple

import swisseph as swe

from .julian import datetime_from_julian, julian_day

logger = logging.getLogger(__name__)


# Engine version for API responses
try:
    ENGINE_VERSION = f"swisseph-{swe.version}"
except AttributeError:
    ENGINE_VERSION = "swisseph-2.10"


def _backend_flag() -> int:
    """Return the Swiss Ephemeris backend flag based on environment configuration.

    Moshier is the default because it needs no ephemeris files on disk.
    """

    raw_backend = os.getenv("EPHEMERIS_BACKEND")
    backend = raw_backend.strip().lower() if raw_backend else "moseph"
    return swe.FLG_MOSEPH if backend == "moseph" else swe.FLG_SWIEPH


def init_paths(ephe_dir: str | os.PathLike[str] | None) -> None:
    """Set the Swiss Ephemeris file search path when available."""

    if not ephe_dir:
        return

    path = os.fspath(ephe_dir)
    if os.path.isdir(path):
        swe.set_ephe_path(path)
    else:
        logger.warning("ephemeris path %s does not exist, keeping built-in data", path)


def to_jd(moment: datetime) -> float:
    return julian_day(moment)


def body_position(moment: datetime, body: int, equatorial: bool = False) -> Tuple[float, float, float]:
    """Return (longitude|RA, latitude|declination, distance) in degrees/AU for a body."""

    flag = _backend_flag()
    if equatorial:
        flag |= swe.FLG_EQUATORIAL
    values, _ = swe.calc_ut(to_jd(moment), body, flag)
    return values[0] % 360.0, values[1], values[2]


def sun_longitude(moment: datetime) -> float:
    return body_position(moment, swe.SUN)[0]


def moon_longitude(moment: datetime) -> float:
    return body_position(moment, swe.MOON)[0]


def moon_sun_elongation(moment: datetime) -> float:
    """Return the ecliptic longitude difference Moon minus Sun in [0, 360)."""
    return (moon_longitude(moment) - sun_longitude(moment)) % 360.0


def sun_declination(moment: datetime) -> float:
    return body_position(moment, swe.SUN, equatorial=True)[1]


def rise_or_set(
    start: datetime,
    rsmi: int,
    lat: float,
    lon: float,
    elevation: float = 0.0,
    body: int = swe.SUN,
) -> Optional[datetime]:
    """First rise/set/transit of ``body`` after ``start``; ``None`` when it does not occur."""

    geopos = (lon, lat, elevation)
    try:
        result, times = swe.rise_trans(
            to_jd(start), body, rsmi | swe.BIT_DISC_CENTER, geopos, 0.0, 0.0, _backend_flag()
        )
    except swe.Error:  # type: ignore[attr-defined]
        return None
    if result < 0 or not times:
        return None
    event_utc = datetime_from_julian(times[0])
    return event_utc.astimezone(start.tzinfo or timezone.utc)


def transit(start: datetime, lat: float, lon: float, elevation: float = 0.0) -> Optional[datetime]:
    return rise_or_set(start, swe.CALC_MTRANSIT, lat, lon, elevation)


def sunrise_after(start: datetime, lat: float, lon: float, elevation: float = 0.0) -> Optional[datetime]:
    return rise_or_set(start, swe.CALC_RISE, lat, lon, elevation)


def sunset_after(start: datetime, lat: float, lon: float, elevation: float = 0.0) -> Optional[datetime]:
    return rise_or_set(start, swe.CALC_SET, lat, lon, elevation)
