"""Closed-form lunar ephemeris: phase, illumination, distance and libration.

The Moon's geocentric longitude, latitude and distance come from a
truncated version of the ELP-2000/82 periodic series as tabulated by
Meeus (Astronomical Algorithms, ch. 47); the Sun's longitude from the
low precision solar series (ch. 25). Libration is the optical libration of
ch. 53. Accuracy is a few arcminutes in longitude, which translates into
cardinal phase times good to a few minutes.

Every function here is a pure function of its arguments.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from math import asin, atan2, cos, degrees, radians, sin
from typing import Callable, List, Optional, Sequence, Tuple

from ..schemas.location import Location
from ..schemas.lunar import (
    EnhancedLunarEvent,
    EnhancedLunarIllumination,
    LibrationData,
    LunarEvent,
)
from . import accuracy, precision_lunar
from .errors import InvalidDateRangeError
from .julian import ensure_aware, julian_centuries, julian_day
from .location import is_polar_region, require_valid_coordinates

logger = logging.getLogger(__name__)

SYNODIC_MONTH_DAYS = 29.530588853
MEAN_DISTANCE_KM = 385000.56
MEAN_DIAMETER_ARCMIN = 31.05
LUNAR_EQUATOR_INCLINATION = 1.54242

# Degrees either side of a cardinal elongation that still carry its name.
CARDINAL_WINDOW_DEG = 6.1

CARDINAL_EVENTS: Tuple[Tuple[float, str], ...] = (
    (0.0, "New"),
    (90.0, "FirstQuarter"),
    (180.0, "Full"),
    (270.0, "ThirdQuarter"),
)

PHASE_NAMES = {
    "New": "New Moon",
    "FirstQuarter": "First Quarter",
    "Full": "Full Moon",
    "ThirdQuarter": "Third Quarter",
}

# (D, M, M', F, sum_l [1e-6 deg], sum_r [1e-3 km])
_LR_TERMS: Tuple[Tuple[int, int, int, int, int, int], ...] = (
    (0, 0, 1, 0, 6288774, -20905355),
    (2, 0, -1, 0, 1274027, -3699111),
    (2, 0, 0, 0, 658314, -2955968),
    (0, 0, 2, 0, 213618, -569925),
    (0, 1, 0, 0, -185116, 48888),
    (0, 0, 0, 2, -114332, -3149),
    (2, 0, -2, 0, 58793, 246158),
    (2, -1, -1, 0, 57066, -152138),
    (2, 0, 1, 0, 53322, -170733),
    (2, -1, 0, 0, 45758, -204586),
    (0, 1, -1, 0, -40923, -129620),
    (1, 0, 0, 0, -34720, 108743),
    (0, 1, 1, 0, -30383, 104755),
    (2, 0, 0, -2, 15327, 10321),
    (0, 0, 1, 2, -12528, 0),
    (0, 0, 1, -2, 10980, 79661),
    (4, 0, -1, 0, 10675, -34782),
    (0, 0, 3, 0, 10034, -23210),
    (4, 0, -2, 0, 8548, -21636),
    (2, 1, -1, 0, -7888, 24208),
    (2, 1, 0, 0, -6766, 30824),
    (1, 0, -1, 0, -5163, -8379),
    (1, 1, 0, 0, 4987, -16675),
    (2, -1, 1, 0, 4036, -12831),
)

# (D, M, M', F, sum_b [1e-6 deg])
_B_TERMS: Tuple[Tuple[int, int, int, int, int], ...] = (
    (0, 0, 0, 1, 5128122),
    (0, 0, 1, 1, 280602),
    (0, 0, 1, -1, 277693),
    (2, 0, 0, -1, 173237),
    (2, 0, -1, 1, 55413),
    (2, 0, -1, -1, 46271),
    (2, 0, 0, 1, 32573),
    (0, 0, 2, 1, 17198),
    (2, 0, 1, -1, 9266),
    (0, 0, 2, -1, 8822),
    (2, -1, 0, -1, 8216),
    (2, 0, -2, -1, 4324),
    (2, 0, 1, 1, 4200),
)


def _fundamental_arguments(t: float) -> Tuple[float, float, float, float, float]:
    """Mean longitude L', elongation D, solar anomaly M, lunar anomaly M', latitude argument F."""

    lp = 218.3164477 + 481267.88123421 * t - 0.0015786 * t * t
    d = 297.8501921 + 445267.1114034 * t - 0.0018819 * t * t
    m = 357.5291092 + 35999.0502909 * t - 0.0001536 * t * t
    mp = 134.9633964 + 477198.8675055 * t + 0.0087414 * t * t
    f = 93.2720950 + 483202.0175233 * t - 0.0036539 * t * t
    return lp % 360.0, d % 360.0, m % 360.0, mp % 360.0, f % 360.0


def _eccentricity_factor(m_coeff: int, e: float) -> float:
    return e ** abs(m_coeff)


def moon_position(jd: float) -> Tuple[float, float, float]:
    """Geocentric ecliptic longitude, latitude (degrees) and distance (km)."""

    t = julian_centuries(jd)
    lp, d, m, mp, f = _fundamental_arguments(t)
    e = 1.0 - 0.002516 * t - 0.0000074 * t * t
    a1 = radians((119.75 + 131.849 * t) % 360.0)
    a2 = radians((53.09 + 479264.290 * t) % 360.0)
    a3 = radians((313.45 + 481266.484 * t) % 360.0)

    sum_l = 0.0
    sum_r = 0.0
    for cd, cm, cmp_, cf, coeff_l, coeff_r in _LR_TERMS:
        arg = radians(cd * d + cm * m + cmp_ * mp + cf * f)
        factor = _eccentricity_factor(cm, e)
        sum_l += coeff_l * factor * sin(arg)
        sum_r += coeff_r * factor * cos(arg)

    sum_b = 0.0
    for cd, cm, cmp_, cf, coeff_b in _B_TERMS:
        arg = radians(cd * d + cm * m + cmp_ * mp + cf * f)
        sum_b += coeff_b * _eccentricity_factor(cm, e) * sin(arg)

    lp_r, mp_r, f_r = radians(lp), radians(mp), radians(f)
    sum_l += 3958 * sin(a1) + 1962 * sin(lp_r - f_r) + 318 * sin(a2)
    sum_b += (
        -2235 * sin(lp_r)
        + 382 * sin(a3)
        + 175 * sin(a1 - f_r)
        + 175 * sin(a1 + f_r)
        + 127 * sin(lp_r - mp_r)
        - 115 * sin(lp_r + mp_r)
    )

    longitude = (lp + sum_l / 1_000_000.0) % 360.0
    latitude = sum_b / 1_000_000.0
    distance = MEAN_DISTANCE_KM + sum_r / 1000.0
    return longitude, latitude, distance


def sun_longitude(jd: float) -> float:
    """Apparent geocentric longitude of the Sun in degrees."""

    t = julian_centuries(jd)
    l0 = 280.46646 + 36000.76983 * t + 0.0003032 * t * t
    m = radians(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    c = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * sin(m)
        + (0.019993 - 0.000101 * t) * sin(2 * m)
        + 0.000289 * sin(3 * m)
    )
    omega = radians(125.04 - 1934.136 * t)
    return (l0 + c - 0.00569 - 0.00478 * sin(omega)) % 360.0


def phase_angle(moment: datetime) -> float:
    """Moon-Sun elongation in [0, 360): 0 new, 90 first quarter, 180 full."""

    jd = julian_day(moment)
    moon_lon, _, _ = moon_position(jd)
    return (moon_lon - sun_longitude(jd)) % 360.0


def illuminated_fraction(angle: float) -> float:
    return (1.0 - cos(radians(angle))) / 2.0


def phase_name(angle: float) -> str:
    """Map an elongation onto one of the eight conventional phase names."""

    angle %= 360.0
    for target, key in CARDINAL_EVENTS:
        delta = abs((angle - target + 180.0) % 360.0 - 180.0)
        if delta <= CARDINAL_WINDOW_DEG:
            return PHASE_NAMES[key]
    if angle < 90.0:
        return "Waxing Crescent"
    if angle < 180.0:
        return "Waxing Gibbous"
    if angle < 270.0:
        return "Waning Gibbous"
    return "Waning Crescent"


def calculate_distance(moment: datetime) -> float:
    return moon_position(julian_day(moment))[2]


def calculate_apparent_diameter(distance_km: float) -> float:
    """Apparent angular diameter in arcminutes for a geocentric distance."""
    return MEAN_DIAMETER_ARCMIN * (MEAN_DISTANCE_KM / distance_km)


def calculate_libration(moment: datetime) -> LibrationData:
    """Optical libration in longitude and latitude at ``moment``."""

    jd = julian_day(moment)
    t = julian_centuries(jd)
    longitude, latitude, distance = moon_position(jd)
    _, _, _, _, f = _fundamental_arguments(t)
    omega = (125.0445479 - 1934.1362891 * t + 0.0020754 * t * t) % 360.0

    inc = radians(LUNAR_EQUATOR_INCLINATION)
    w = radians(longitude - omega)
    beta = radians(latitude)

    a = atan2(
        sin(w) * cos(beta) * cos(inc) - sin(beta) * sin(inc),
        cos(w) * cos(beta),
    )
    lib_lon = (degrees(a) - f + 180.0) % 360.0 - 180.0
    lib_lat = degrees(asin(-sin(w) * cos(beta) * sin(inc) - sin(beta) * cos(inc)))

    return LibrationData(
        longitude_libration=round(lib_lon, 6),
        latitude_libration=round(lib_lat, 6),
        apparent_diameter=round(calculate_apparent_diameter(distance), 6),
    )


def calculate_illumination(instant: datetime) -> EnhancedLunarIllumination:
    instant = ensure_aware(instant)
    jd = julian_day(instant)
    moon_lon, _, distance = moon_position(jd)
    angle = (moon_lon - sun_longitude(jd)) % 360.0
    diameter = calculate_apparent_diameter(distance)
    return EnhancedLunarIllumination(
        fraction=round(illuminated_fraction(angle), 6),
        phase_name=phase_name(angle),
        phase_angle=round(angle, 6) % 360.0,
        libration_data=calculate_libration(instant),
        apparent_diameter=round(diameter, 6),
        distance=round(distance, 3),
        is_waxing=angle < 180.0,
        age_days=round(angle / 360.0 * SYNODIC_MONTH_DAYS, 4),
    )


def equation_of_time_minutes(moment: datetime) -> float:
    """Approximate equation of time (apparent minus mean solar time) in minutes."""

    doy = moment.timetuple().tm_yday
    b = radians(360.0 / 365.242 * (doy - 81))
    return 9.87 * sin(2 * b) - 7.53 * cos(b) - 1.5 * sin(b)


def local_solar_time(instant: datetime, longitude: float) -> datetime:
    """Apparent local solar time at ``longitude`` as a fixed-offset datetime."""

    instant = ensure_aware(instant).astimezone(timezone.utc)
    offset_minutes = longitude * 4.0 + equation_of_time_minutes(instant)
    offset = timedelta(seconds=round(offset_minutes * 60.0))
    return instant.astimezone(timezone(offset))


def _unwrap(value: float, reference: float) -> float:
    """Unwrap an elongation so it is not behind ``reference``."""
    while value < reference:
        value += 360.0
    return value


def _bisect_crossing(
    low: datetime,
    high: datetime,
    reference: float,
    target: float,
    getter: Callable[[datetime], float],
    iterations: int = 36,
) -> datetime:
    for _ in range(iterations):
        midpoint = low + (high - low) / 2
        if _unwrap(getter(midpoint), reference) < target:
            low = midpoint
        else:
            high = midpoint
    return high


def find_phase_events(start: datetime, end: datetime) -> List[Tuple[str, datetime]]:
    """Return ``(event_name, utc_time)`` for every cardinal phase in ``[start, end]``.

    The range is walked in one-day steps; the Moon gains about 12 degrees of
    elongation per day so each step crosses at most one cardinal angle.
    """

    start = ensure_aware(start).astimezone(timezone.utc)
    end = ensure_aware(end).astimezone(timezone.utc)
    events: List[Tuple[str, datetime]] = []

    step = timedelta(days=1)
    left = start
    left_value = phase_angle(left)
    while left < end:
        right = min(left + step, end)
        right_value = _unwrap(phase_angle(right), left_value)
        for target, name in CARDINAL_EVENTS:
            crossing = target if target > left_value else target + 360.0
            if left_value < crossing <= right_value:
                moment = _bisect_crossing(left, right, left_value, crossing, phase_angle)
                events.append((name, moment.replace(microsecond=0)))
        left, left_value = right, right_value % 360.0

    events.sort(key=lambda item: item[1])
    return events


def _accuracy_note(location: Optional[Location]) -> str:
    note = "Truncated periodic series; cardinal times typically within a few minutes."
    if location is not None and is_polar_region(location.latitude):
        note += " Polar location: local observation conditions may differ."
    return note


def build_lunar_event(name: str, moment: datetime, location: Optional[Location] = None) -> LunarEvent:
    local = local_solar_time(moment, location.longitude) if location is not None else moment
    return LunarEvent(
        event_name=name,
        utc_date=moment,
        local_solar_date=local,
        julian_date=round(julian_day(moment), 6),
        accuracy_note=_accuracy_note(location),
    )


def atmospheric_correction(location: Optional[Location]) -> float:
    """Refraction allowance in minutes; thinner air at altitude shrinks it."""

    if location is None:
        return 0.0
    elevation = location.elevation or 0.0
    return round(2.0 * max(0.5, 1.0 - elevation / 10000.0) * 0.3, 4)


def calculate_lunar_events(
    range_start: datetime,
    range_end: datetime,
    location: Optional[Location] = None,
    *,
    confidence_level: float = 0.95,
    methods: Optional[Sequence[str]] = None,
) -> List[EnhancedLunarEvent]:
    """Cardinal phase events in a range annotated with accuracy metadata."""

    range_start = ensure_aware(range_start)
    range_end = ensure_aware(range_end)
    if range_end < range_start:
        raise InvalidDateRangeError(["End date must not be before start date"])
    if location is not None:
        require_valid_coordinates(location.latitude, location.longitude)

    correction = atmospheric_correction(location)
    enhanced: List[EnhancedLunarEvent] = []
    for name, moment in find_phase_events(range_start, range_end):
        event = build_lunar_event(name, moment, location)
        alternatives = precision_lunar.get_alternative_calculations(event, methods=methods)
        estimate = accuracy.calculate_accuracy_estimate(
            event, alternatives, confidence_level=confidence_level
        )
        enhanced.append(
            EnhancedLunarEvent(
                **event.model_dump(),
                accuracy_estimate=estimate,
                alternative_calculations=alternatives,
                atmospheric_correction=correction,
                libration_data=calculate_libration(moment),
            )
        )
    logger.debug("computed %d lunar events between %s and %s", len(enhanced), range_start, range_end)
    return enhanced


def sample_distances(
    start: datetime, end: datetime, step_hours: float = 24.0
) -> List[Tuple[datetime, float]]:
    """Geocentric distance sampled every ``step_hours`` from ``start`` to ``end``."""

    start = ensure_aware(start)
    end = ensure_aware(end)
    if end < start:
        raise InvalidDateRangeError(["End date must not be before start date"])
    if step_hours <= 0:
        raise InvalidDateRangeError(["Sampling step must be positive"])

    samples: List[Tuple[datetime, float]] = []
    moment = start
    step = timedelta(hours=step_hours)
    while moment <= end:
        samples.append((moment, round(calculate_distance(moment), 3)))
        moment += step
    return samples

