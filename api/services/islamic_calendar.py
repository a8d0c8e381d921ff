"""Hijri calendar, Islamic holidays, prayer times and Qibla bearing.

The Hijri conversion is the tabular (arithmetic) civil calendar: 30-year
cycle with 11 leap years, epoch 16 July 622 (Julian). It can differ from
sighting-based calendars by a day or two.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from math import atan, atan2, ceil, cos, degrees, floor, radians, sin, tan
from typing import Dict, List, Optional, Sequence, Tuple

from ..schemas.location import Location
from ..schemas.religious import (
    HijriDate,
    IslamicCalculationConfig,
    PrayerTime,
    RakahBreakdown,
    ReligiousEvent,
)
from .ephem import sun_declination
from .errors import CalculationInputError, InvalidDateRangeError, PolarConditionsError
from .julian import date_from_julian_day_number, julian_day_number
from .location import location_zone, require_valid_coordinates
from .prayer_methods import ASR_SHADOW_FACTOR, RAKAH, PrayerMethod, get_method
from .solar_times import solar_noon, time_at_sun_altitude

logger = logging.getLogger(__name__)

HIJRI_EPOCH_JDN = 1948440
KAABA_LAT = 21.4225
KAABA_LON = 39.8262
HORIZON_ALTITUDE = -0.833

HIJRI_MONTHS = [
    "Muharram",
    "Safar",
    "Rabi al-Awwal",
    "Rabi al-Thani",
    "Jumada al-Awwal",
    "Jumada al-Thani",
    "Rajab",
    "Shaban",
    "Ramadan",
    "Shawwal",
    "Dhul-Qadah",
    "Dhul-Hijjah",
]

# (month, day) -> name, slug, description, significance, astronomical basis, observance type
ISLAMIC_HOLIDAYS: Dict[Tuple[int, int], Tuple[str, str, str, str, str, str]] = {
    (1, 1): (
        "Islamic New Year",
        "new-year",
        "First day of Muharram and of the Hijri year.",
        "Marks the Hijra of the Prophet Muhammad from Mecca to Medina in 622 CE.",
        "New moon of Muharram",
        "holiday",
    ),
    (1, 10): (
        "Day of Ashura",
        "ashura",
        "Tenth day of Muharram, a day of fasting and remembrance.",
        "Recalls several events in Islamic history, among them the martyrdom of Husayn ibn Ali.",
        "Tenth day of Muharram",
        "fast",
    ),
    (3, 12): (
        "Mawlid al-Nabi",
        "mawlid",
        "Birthday of the Prophet Muhammad.",
        "Marked in many communities with gatherings, prayer and charity.",
        "Twelfth day of Rabi al-Awwal",
        "holiday",
    ),
    (7, 27): (
        "Isra and Mi'raj",
        "isra-miraj",
        "The Prophet's night journey to Jerusalem and ascension.",
        "One of the central miraculous events of the Prophet's life.",
        "Twenty-seventh day of Rajab",
        "holiday",
    ),
    (8, 15): (
        "Laylat al-Bara'ah",
        "laylat-al-baraah",
        "Night of the middle of Shaban.",
        "Spent by many in prayer and seeking forgiveness.",
        "Fifteenth day of Shaban, near full moon",
        "holiday",
    ),
    (9, 1): (
        "First Day of Ramadan",
        "ramadan-start",
        "Start of the month of fasting.",
        "Muslims fast from dawn until sunset for the whole month.",
        "New moon of Ramadan",
        "fast",
    ),
    (9, 27): (
        "Laylat al-Qadr",
        "laylat-al-qadr",
        "Night of Power, when the revelation of the Quran began.",
        "Held to be better than a thousand months; commonly observed on the 27th.",
        "Twenty-seventh day of Ramadan",
        "holiday",
    ),
    (10, 1): (
        "Eid al-Fitr",
        "eid-al-fitr",
        "Festival of breaking the fast at the end of Ramadan.",
        "One of the two major Islamic festivals, with special prayer and charity.",
        "New moon of Shawwal",
        "feast",
    ),
    (12, 9): (
        "Day of Arafah",
        "arafah",
        "Pilgrims stand at Mount Arafat during the Hajj.",
        "The central day of the Hajj; many who are not on pilgrimage fast.",
        "Ninth day of Dhul-Hijjah",
        "holiday",
    ),
    (12, 10): (
        "Eid al-Adha",
        "eid-al-adha",
        "Festival of Sacrifice.",
        "Commemorates Abraham's readiness to sacrifice his son; meat is shared with the poor.",
        "Tenth day of Dhul-Hijjah",
        "feast",
    ),
}


# --- C A L E N D A R ---


def is_hijri_leap_year(year: int) -> bool:
    return (14 + 11 * year) % 30 < 11


def hijri_month_length(year: int, month: int) -> int:
    if month == 12 and is_hijri_leap_year(year):
        return 30
    return 30 if month % 2 == 1 else 29


def _hijri_to_jdn(year: int, month: int, day: int) -> int:
    return (
        day
        + ceil(29.5 * (month - 1))
        + (year - 1) * 354
        + floor((3 + 11 * year) / 30)
        + HIJRI_EPOCH_JDN
        - 1
    )


def hijri_to_gregorian(year: int, month: int, day: int) -> date:
    if not 1 <= month <= 12:
        raise CalculationInputError([f"Hijri month must be between 1 and 12, got {month}"])
    if not 1 <= day <= hijri_month_length(year, month):
        raise CalculationInputError([f"Hijri day {day} is out of range for month {month} of {year}"])
    return date_from_julian_day_number(_hijri_to_jdn(year, month, day))


def gregorian_to_hijri(day: date) -> HijriDate:
    jdn = julian_day_number(day)
    year = floor((30 * (jdn - HIJRI_EPOCH_JDN) + 10646) / 10631)
    month = min(12, ceil((jdn - 29 - _hijri_to_jdn(year, 1, 1)) / 29.5) + 1)
    month = max(1, month)
    hday = jdn - _hijri_to_jdn(year, month, 1) + 1
    return HijriDate(year=year, month=month, day=hday, month_name=HIJRI_MONTHS[month - 1])


def is_ramadan(day: date) -> bool:
    return gregorian_to_hijri(day).month == 9


def get_ramadan_dates(gregorian_year: int) -> Tuple[date, date]:
    """First and last day of the (first) Ramadan that begins in ``gregorian_year``."""

    hijri_year = gregorian_to_hijri(date(gregorian_year, 1, 1)).year
    for candidate in (hijri_year, hijri_year + 1):
        start = hijri_to_gregorian(candidate, 9, 1)
        if start.year == gregorian_year:
            end = hijri_to_gregorian(candidate, 9, hijri_month_length(candidate, 9))
            return start, end
    raise ValueError(f"no Ramadan begins in {gregorian_year}")


def get_islamic_holidays(start: date, end: date) -> List[ReligiousEvent]:
    """Fixed-date Hijri holidays falling inside ``[start, end]`` in date order."""

    if end < start:
        raise InvalidDateRangeError(["End date must not be before start date"])

    first_year = gregorian_to_hijri(start).year
    last_year = gregorian_to_hijri(end).year
    events: List[ReligiousEvent] = []
    for hijri_year in range(first_year, last_year + 1):
        for (month, mday), details in ISLAMIC_HOLIDAYS.items():
            name, slug, description, significance, basis, kind = details
            observed = hijri_to_gregorian(hijri_year, month, mday)
            if not start <= observed <= end:
                continue
            events.append(
                ReligiousEvent(
                    id=f"islamic-{slug}-{hijri_year}",
                    name=name,
                    tradition="islam",
                    date=observed,
                    description=description,
                    significance=significance,
                    astronomical_basis=basis,
                    observance_type=kind,
                )
            )
    events.sort(key=lambda event: (event.date, event.name))
    return events


# --- P R A Y E R   T I M E S ---


def get_qibla_direction(location: Location) -> float:
    """Initial great-circle bearing from ``location`` to the Kaaba, degrees from north."""

    require_valid_coordinates(location.latitude, location.longitude)
    phi = radians(location.latitude)
    delta_lon = radians(KAABA_LON - location.longitude)
    bearing = degrees(
        atan2(
            sin(delta_lon),
            cos(phi) * tan(radians(KAABA_LAT)) - sin(phi) * cos(delta_lon),
        )
    )
    return round(bearing % 360.0, 4) % 360.0


def asr_altitude(lat: float, declination: float, madhab: str) -> float:
    """Sun altitude when an object's shadow equals the madhab factor plus the noon shadow."""

    factor = ASR_SHADOW_FACTOR[madhab]
    return degrees(atan(1.0 / (factor + tan(radians(abs(lat - declination))))))


def _round_minute(moment: datetime) -> datetime:
    return (moment + timedelta(seconds=30)).replace(second=0, microsecond=0)


def _night_portion(rule: str, angle: float) -> float:
    if rule == "seventh_of_the_night":
        return 1.0 / 7.0
    if rule == "twilight_angle":
        return angle / 60.0
    return 0.5


def _fajr_isha(
    day: date,
    location: Location,
    method: PrayerMethod,
    config: IslamicCalculationConfig,
    sunrise: datetime,
    sunset: datetime,
    maghrib: datetime,
    noon: datetime,
    tz,
) -> Tuple[datetime, datetime]:
    lat, lon = location.latitude, location.longitude
    night = (sunrise + timedelta(days=1)) - sunset

    fajr = time_at_sun_altitude(day, lat, lon, -method.fajr_angle, True, tz, noon=noon)
    safe_fajr = sunrise - night * _night_portion(config.high_latitude_rule, method.fajr_angle)
    if fajr is None or fajr < safe_fajr:
        logger.debug("fajr on %s limited by %s", day, config.high_latitude_rule)
        fajr = safe_fajr

    if method.isha_interval is not None:
        interval = method.isha_interval
        if method.isha_interval_ramadan is not None and is_ramadan(day):
            interval = method.isha_interval_ramadan
        return fajr, maghrib + timedelta(minutes=interval)

    isha = time_at_sun_altitude(day, lat, lon, -method.isha_angle, False, tz, noon=noon)
    safe_isha = sunset + night * _night_portion(config.high_latitude_rule, method.isha_angle)
    if isha is None or isha > safe_isha:
        logger.debug("isha on %s limited by %s", day, config.high_latitude_rule)
        isha = safe_isha
    return fajr, isha


def compute_prayer_schedule(
    day: date, location: Location, config: Optional[IslamicCalculationConfig] = None
) -> Dict[str, datetime]:
    """Rounded local times for Fajr, Sunrise, Dhuhr, Asr, Maghrib and Isha."""

    config = config or IslamicCalculationConfig()
    require_valid_coordinates(location.latitude, location.longitude)
    method = get_method(config.method)
    tz = location_zone(location)
    lat, lon = location.latitude, location.longitude

    noon = solar_noon(day, lon, tz, lat)
    sunrise = time_at_sun_altitude(day, lat, lon, HORIZON_ALTITUDE, True, tz, noon=noon)
    sunset = time_at_sun_altitude(day, lat, lon, HORIZON_ALTITUDE, False, tz, noon=noon)
    if sunrise is None or sunset is None:
        raise PolarConditionsError(
            [f"The sun does not rise and set at {lat:.4f},{lon:.4f} on {day.isoformat()}"]
        )

    declination = sun_declination(noon)
    asr = time_at_sun_altitude(
        day, lat, lon, asr_altitude(lat, declination, config.madhab), False, tz, noon=noon
    )
    if asr is None:
        raise PolarConditionsError([f"Asr cannot be determined on {day.isoformat()}"])

    if method.maghrib_angle is not None:
        maghrib = time_at_sun_altitude(day, lat, lon, -method.maghrib_angle, False, tz, noon=noon) or sunset
    else:
        maghrib = sunset

    fajr, isha = _fajr_isha(day, location, method, config, sunrise, sunset, maghrib, noon, tz)

    base = {
        "Fajr": fajr,
        "Sunrise": sunrise,
        "Dhuhr": noon,
        "Asr": asr,
        "Maghrib": maghrib,
        "Isha": isha,
    }
    adjustments = config.adjustments.model_dump()
    schedule: Dict[str, datetime] = {}
    for name, moment in base.items():
        key = name.lower()
        minutes = method.offset(key) + adjustments.get(key, 0)
        schedule[name] = _round_minute(moment + timedelta(minutes=minutes)).astimezone(tz)
    return schedule


def get_prayer_times(
    day: date,
    location: Location,
    config: Optional[IslamicCalculationConfig] = None,
    *,
    include_sunrise: bool = False,
) -> List[PrayerTime]:
    """The five daily prayers in chronological order, in the location's zone."""

    config = config or IslamicCalculationConfig()
    schedule = compute_prayer_schedule(day, location, config)
    qibla = get_qibla_direction(location)
    label = f"{config.method} ({config.madhab})"

    prayers: List[PrayerTime] = []
    for name, moment in schedule.items():
        if name == "Sunrise":
            if include_sunrise:
                prayers.append(
                    PrayerTime(name=name, time=moment, tradition="islam", calculation_method=label)
                )
            continue
        before, fard, after, witr = RAKAH[name]
        prayers.append(
            PrayerTime(
                name=name,
                time=moment,
                tradition="islam",
                calculation_method=label,
                qibla_direction=qibla,
                rakah=RakahBreakdown(sunnah_before=before, fard=fard, sunnah_after=after, witr=witr),
            )
        )
    return prayers


def get_next_prayer(prayers: Sequence[PrayerTime], instant: datetime) -> Optional[PrayerTime]:
    for prayer in sorted(prayers, key=lambda p: p.time):
        if prayer.time > instant:
            return prayer
    return None


def get_current_prayer(prayers: Sequence[PrayerTime], instant: datetime) -> Optional[PrayerTime]:
    current = None
    for prayer in sorted(prayers, key=lambda p: p.time):
        if prayer.time <= instant:
            current = prayer
    return current
