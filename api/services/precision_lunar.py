"""Independent approximations of cardinal lunar phase times.

Each method takes the primary ``LunarEvent`` and produces its own estimate
of the same event, so deviations between methods can be used as an error
model. ``swiss_ephemeris`` is the reference: a root-find on the Moon-Sun
elongation computed by pyswisseph.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from math import cos, radians, sin
from typing import Callable, Dict, List, Optional, Sequence

from ..schemas.lunar import AlternativeCalculation, LunarEvent
from .ephem import moon_sun_elongation
from .errors import CalculationInputError
from .julian import datetime_from_julian, ensure_aware, julian_centuries, julian_day

logger = logging.getLogger(__name__)

EVENT_TARGETS: Dict[str, float] = {
    "New": 0.0,
    "FirstQuarter": 90.0,
    "Full": 180.0,
    "ThirdQuarter": 270.0,
}

MEAN_NEW_MOON_JDE = 2451550.09766
SYNODIC_MONTH = 29.530588861


def delta_t_seconds(year: float) -> float:
    """TT minus UT, from the Espenak-Meeus polynomials."""

    if 2005 <= year < 2050:
        t = year - 2000
        return 62.92 + 0.32217 * t + 0.005589 * t * t
    if 1986 <= year < 2005:
        t = year - 2000
        return (
            63.86 + 0.3345 * t - 0.060374 * t ** 2 + 0.0017275 * t ** 3
            + 0.000651814 * t ** 4 + 0.00002373599 * t ** 5
        )
    if 2050 <= year < 2150:
        return -20 + 32 * ((year - 1820) / 100) ** 2 - 0.5628 * (2150 - year)
    u = (year - 1820) / 100
    return -20 + 32 * u * u


def _deviation_minutes(result: datetime, primary: datetime) -> float:
    return round((result - primary).total_seconds() / 60.0, 3)


def _new_full_correction(m: float, mp: float, f: float, om: float, e: float, full: bool) -> float:
    s = sin
    return (
        (-0.40614 if full else -0.40720) * s(mp)
        + (0.17302 if full else 0.17241) * e * s(m)
        + (0.01614 if full else 0.01608) * s(2 * mp)
        + (0.01043 if full else 0.01039) * s(2 * f)
        + (0.00734 if full else 0.00739) * e * s(mp - m)
        - (0.00515 if full else 0.00514) * e * s(mp + m)
        + (0.00209 if full else 0.00208) * e * e * s(2 * m)
        - 0.00111 * s(mp - 2 * f)
        - 0.00057 * s(mp + 2 * f)
        + 0.00056 * e * s(2 * mp + m)
        - 0.00042 * s(3 * mp)
        + 0.00042 * e * s(m + 2 * f)
        + 0.00038 * e * s(m - 2 * f)
        - 0.00024 * e * s(2 * mp - m)
        - 0.00017 * s(om)
    )


def _quarter_correction(m: float, mp: float, f: float, om: float, e: float, first: bool) -> float:
    s = sin
    correction = (
        -0.62801 * s(mp)
        + 0.17172 * e * s(m)
        - 0.01183 * e * s(mp + m)
        + 0.00862 * s(2 * mp)
        + 0.00804 * s(2 * f)
        + 0.00454 * e * s(mp - m)
        + 0.00204 * e * e * s(2 * m)
        - 0.00180 * s(mp - 2 * f)
        - 0.00070 * s(mp + 2 * f)
        - 0.00040 * s(3 * mp)
        - 0.00034 * e * s(2 * mp - m)
        + 0.00032 * e * s(m + 2 * f)
        + 0.00032 * e * s(m - 2 * f)
        - 0.00028 * e * e * s(mp + 2 * m)
        + 0.00027 * e * s(2 * mp + m)
        - 0.00017 * s(om)
    )
    w = (
        0.00306
        - 0.00038 * e * cos(m)
        + 0.00026 * cos(mp)
        - 0.00002 * cos(mp - m)
        + 0.00002 * cos(mp + m)
        + 0.00002 * cos(2 * f)
    )
    return correction + (w if first else -w)


def meeus_mean_phase(event: LunarEvent) -> datetime:
    """Mean phase plus the principal periodic corrections (Meeus ch. 49)."""

    fraction = EVENT_TARGETS[event.event_name] / 360.0
    k = round((event.julian_date - MEAN_NEW_MOON_JDE) / SYNODIC_MONTH - fraction) + fraction
    t = k / 1236.85

    jde = (
        MEAN_NEW_MOON_JDE
        + SYNODIC_MONTH * k
        + 0.00015437 * t * t
        - 0.000000150 * t ** 3
        + 0.00000000073 * t ** 4
    )
    e = 1 - 0.002516 * t - 0.0000074 * t * t
    m = radians((2.5534 + 29.10535670 * k - 0.0000014 * t * t) % 360.0)
    mp = radians((201.5643 + 385.81693528 * k + 0.0107582 * t * t) % 360.0)
    f = radians((160.7108 + 390.67050284 * k - 0.0016118 * t * t) % 360.0)
    om = radians((124.7746 - 1.56375588 * k + 0.0020672 * t * t) % 360.0)

    if event.event_name in ("New", "Full"):
        jde += _new_full_correction(m, mp, f, om, e, full=event.event_name == "Full")
    else:
        jde += _quarter_correction(m, mp, f, om, e, first=event.event_name == "FirstQuarter")

    year = 2000 + k / 12.3685
    return datetime_from_julian(jde - delta_t_seconds(year) / 86400.0)


def vsop87_simplified(event: LunarEvent) -> datetime:
    """Primary time shifted by the leading planetary perturbation terms."""

    t = julian_centuries(julian_day(event.utc_date))
    correction_days = (
        0.000325 * sin(radians(181.979801 + 58517.8156760 * t))
        + 0.000165 * sin(radians(34.351519 + 3034.9056606 * t))
        - 0.000074 * t * t
    )
    return event.utc_date + timedelta(minutes=correction_days * 1440.0)


def brown_lunar_theory(event: LunarEvent) -> datetime:
    """Primary time shifted by Brown-style solar and lunar inequality terms."""

    t = julian_centuries(julian_day(event.utc_date))
    d = radians(297.8502042 + 445267.1115168 * t)
    m = radians(357.5291092 + 35999.0502909 * t)
    mp = radians(134.9634114 + 477198.8676313 * t)
    correction_days = (
        0.000233 * sin(d)
        + 0.000161 * sin(m)
        + 0.000104 * sin(mp)
        + 0.000070 * sin(2 * d)
        + 0.000063 * sin(2 * mp)
    )
    return event.utc_date + timedelta(minutes=correction_days * 1440.0)


def swiss_ephemeris(event: LunarEvent) -> datetime:
    """Bisect the pyswisseph elongation around the primary estimate."""

    target = EVENT_TARGETS[event.event_name]

    def offset(moment: datetime) -> float:
        return (moon_sun_elongation(moment) - target + 180.0) % 360.0 - 180.0

    low = event.utc_date - timedelta(hours=12)
    high = event.utc_date + timedelta(hours=12)
    for _ in range(3):
        if offset(low) < 0 <= offset(high):
            break
        low -= timedelta(hours=12)
        high += timedelta(hours=12)

    for _ in range(36):
        midpoint = low + (high - low) / 2
        if offset(midpoint) < 0:
            low = midpoint
        else:
            high = midpoint
    return high.replace(microsecond=0)


METHODS: "OrderedDict[str, Callable[[LunarEvent], datetime]]" = OrderedDict(
    [
        ("Meeus Mean Phase", meeus_mean_phase),
        ("VSOP87 Simplified", vsop87_simplified),
        ("Brown's Lunar Theory", brown_lunar_theory),
        ("Swiss Ephemeris", swiss_ephemeris),
    ]
)


def get_alternative_calculations(
    event: LunarEvent, methods: Optional[Sequence[str]] = None
) -> List[AlternativeCalculation]:
    """Run the requested alternative methods (all by default) against ``event``."""

    selected = list(METHODS) if methods is None else list(methods)
    unknown = [name for name in selected if name not in METHODS]
    if unknown:
        raise CalculationInputError([f"Unknown calculation method: {name}" for name in unknown])

    if event.utc_date.tzinfo is None:
        event = event.model_copy(update={"utc_date": ensure_aware(event.utc_date)})

    alternatives: List[AlternativeCalculation] = []
    for name in selected:
        result = METHODS[name](event)
        alternatives.append(
            AlternativeCalculation(
                method=name,
                result=result,
                deviation=_deviation_minutes(result, event.utc_date),
            )
        )
    logger.debug(
        "alternatives for %s at %s: %s",
        event.event_name,
        event.utc_date.isoformat(),
        [(alt.method, alt.deviation) for alt in alternatives],
    )
    return alternatives
