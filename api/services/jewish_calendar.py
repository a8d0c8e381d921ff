"""Jewish observances, Shabbat times, zmanim and prayer windows."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..schemas.location import Location
from ..schemas.religious import (
    JewishCalculationConfig,
    PrayerTime,
    ReligiousEvent,
    SabbathTimes,
    Zmanim,
)
from . import hebrew_calendar as hc
from .ephem import sunrise_after, sunset_after
from .errors import InvalidDateRangeError, PolarConditionsError
from .location import location_zone, require_valid_coordinates
from .solar_times import solar_noon, time_at_sun_altitude

logger = logging.getLogger(__name__)

ALOS_DEPRESSION = 16.1
MISHEYAKIR_DEPRESSION = 11.5
TZAIS_DEPRESSION = {"standard": 8.5, "geonim": 6.45, "magen_avraham": 8.5}

SHABBAT_DESCRIPTION = "The Jewish Sabbath, a day of rest."
SHABBAT_SIGNIFICANCE = "The seventh day of the week, set aside for rest, prayer and study."

# name -> observance type, description, significance
HOLIDAY_DETAILS = {
    "Rosh Hashana": (
        "feast",
        "The Jewish New Year, a time of reflection and renewal.",
        "Opens the High Holy Days; the shofar is sounded and the year's judgement begins.",
    ),
    "Fast of Gedaliah": (
        "fast",
        "Minor fast on the day after Rosh Hashana.",
        "Mourns the assassination of Gedaliah ben Ahikam, governor of Judah.",
    ),
    "Yom Kippur": (
        "fast",
        "The Day of Atonement, the holiest day of the year.",
        "A day of fasting, prayer and repentance.",
    ),
    "Sukkot": (
        "feast",
        "The Feast of Tabernacles.",
        "Families dwell in temporary booths, recalling the wandering in the desert and the autumn harvest.",
    ),
    "Shemini Atzeret": (
        "holiday",
        "The eighth day of assembly concluding Sukkot.",
        "Prayer for rain is added to the liturgy.",
    ),
    "Simchat Torah": (
        "holiday",
        "Rejoicing of the Torah.",
        "The annual cycle of Torah readings is completed and begun again.",
    ),
    "Chanukah": (
        "holiday",
        "The Festival of Lights, eight days from 25 Kislev.",
        "Recalls the rededication of the Second Temple; the menorah is lit each night.",
    ),
    "Tu BiShvat": (
        "holiday",
        "New Year of the Trees.",
        "Marks the season in which trees begin a new cycle of fruit-bearing.",
    ),
    "Purim": (
        "feast",
        "Commemorates the deliverance of the Jews of Persia from Haman's plot.",
        "The Megillah is read; gifts to the poor and festive meals follow.",
    ),
    "Pesach": (
        "feast",
        "Passover, commemorating the Exodus from Egypt.",
        "The Seder is held and matzah eaten in memory of the hurried departure.",
    ),
    "Shavuot": (
        "feast",
        "The Feast of Weeks.",
        "Celebrates the giving of the Torah at Sinai and the early harvest.",
    ),
    "Tisha B'Av": (
        "fast",
        "Day of mourning for the destruction of the First and Second Temples.",
        "A full fast on which the Book of Lamentations is read.",
    ),
    "Rosh Chodesh": (
        "holiday",
        "The beginning of a new Hebrew month.",
        "A minor festival marking the new lunar month.",
    ),
    "Shabbat Mevarchim": (
        "sabbath",
        "The Shabbat on which the coming month is blessed.",
        "The new month is announced and blessed in the synagogue.",
    ),
}


# --- H O L I D A Y S ---


def _holiday_names(day: date) -> List[Tuple[str, Optional[str]]]:
    """Holiday names on ``day``; the second item is a display suffix."""

    year, month, mday = hc.hebrew_date_parts(day)
    weekday = day.weekday()
    names: List[Tuple[str, Optional[str]]] = []

    if month == hc.TISHREI:
        if mday in (1, 2):
            names.append(("Rosh Hashana", None if mday == 1 else "Day 2"))
        if (mday == 3 and weekday != 5) or (mday == 4 and weekday == 6):
            names.append(("Fast of Gedaliah", None))
        if mday == 10:
            names.append(("Yom Kippur", None))
        if mday == 15:
            names.append(("Sukkot", None))
        if mday == 22:
            names.append(("Shemini Atzeret", None))
        if mday == 23:
            names.append(("Simchat Torah", None))
    elif month == hc.KISLEV and mday == 25:
        names.append(("Chanukah", None))
    elif month == hc.SHEVAT and mday == 15:
        names.append(("Tu BiShvat", None))
    elif month == hc.last_month_of_year(year) and mday == 14:
        names.append(("Purim", None))
    elif month == hc.NISAN and mday == 15:
        names.append(("Pesach", None))
    elif month == hc.SIVAN and mday == 6:
        names.append(("Shavuot", None))
    elif month == hc.AV and ((mday == 9 and weekday != 5) or (mday == 10 and weekday == 6)):
        names.append(("Tisha B'Av", None))

    if mday == 1 and month != hc.TISHREI:
        names.append(("Rosh Chodesh", hc.month_name(month, year)))
    elif mday == 30:
        next_year, next_month, _ = hc.hebrew_from_fixed(day.toordinal() + 1)
        if next_month != hc.TISHREI:
            names.append(("Rosh Chodesh", hc.month_name(next_month, next_year)))
    return names


def _is_shabbat_mevarchim(day: date) -> Optional[str]:
    """Name of the month blessed on this Shabbat, if any."""

    if not hc.is_shabbat(day):
        return None
    for offset in range(1, 8):
        year, month, mday = hc.hebrew_from_fixed(day.toordinal() + offset)
        if mday == 1 and month != hc.TISHREI:
            return hc.month_name(month, year)
    return None


def _slug(name: str) -> str:
    return "".join(ch if ch.isalnum() else "-" for ch in name.lower()).strip("-")


def _event(name: str, suffix: Optional[str], day: date, local_time: Optional[datetime] = None) -> ReligiousEvent:
    kind, description, significance = HOLIDAY_DETAILS[name]
    if not suffix:
        display = name
    elif name == "Rosh Hashana":
        display = f"{name} ({suffix})"
    else:
        display = f"{name} {suffix}"
    hebrew = hc.gregorian_to_hebrew(day)
    return ReligiousEvent(
        id=f"jewish-{_slug(display)}-{day.isoformat()}",
        name=display,
        tradition="judaism",
        date=day,
        local_time=local_time,
        description=description,
        significance=significance,
        astronomical_basis=f"{hebrew.day} {hebrew.month_name} {hebrew.year}",
        observance_type=kind,
    )


def get_jewish_holiday(day: date) -> List[ReligiousEvent]:
    """Holidays that fall on ``day`` (empty when none)."""
    return [_event(name, suffix, day) for name, suffix in _holiday_names(day)]


# --- S U N - A N C H O R E D   T I M E S ---


def _sun_events(
    day: date, location: Location, config: JewishCalculationConfig
) -> Tuple[datetime, datetime, datetime, ZoneInfo]:
    require_valid_coordinates(location.latitude, location.longitude)
    tz = location_zone(location)
    lat, lon = location.latitude, location.longitude
    elevation = (location.elevation or 0.0) if config.use_elevation else 0.0
    midnight = datetime.combine(day, time(0, 0), tzinfo=tz)

    sunrise = sunrise_after(midnight, lat, lon, elevation)
    sunset = sunset_after(midnight, lat, lon, elevation)
    sunrise = sunrise.astimezone(tz) if sunrise is not None else None
    sunset = sunset.astimezone(tz) if sunset is not None else None
    if sunrise is None or sunset is None or sunrise.date() != day or sunset.date() != day:
        raise PolarConditionsError(
            [f"The sun does not rise and set at {lat:.4f},{lon:.4f} on {day.isoformat()}"]
        )
    return sunrise, sunset, solar_noon(day, lon, tz, lat), tz


def _sunset(day: date, location: Location, config: JewishCalculationConfig) -> datetime:
    return _sun_events(day, location, config)[1]


def resolve_sabbath_week(day: date) -> Tuple[date, date]:
    """Friday and Saturday of the Shabbat a reference date belongs to."""

    weekday = day.weekday()
    if weekday == 5:
        friday = day - timedelta(days=1)
    else:
        friday = day + timedelta(days=(4 - weekday) % 7)
    return friday, friday + timedelta(days=1)


def get_sabbath_times(
    day: date, location: Location, config: Optional[JewishCalculationConfig] = None
) -> SabbathTimes:
    config = config or JewishCalculationConfig()
    friday, saturday = resolve_sabbath_week(day)
    candle_lighting = _sunset(friday, location, config) - timedelta(minutes=config.candle_lighting_minutes)
    havdalah = _sunset(saturday, location, config) + timedelta(minutes=config.havdalah_minutes)
    return SabbathTimes(
        friday=friday,
        saturday=saturday,
        candle_lighting=candle_lighting.replace(microsecond=0),
        havdalah=havdalah.replace(microsecond=0),
    )


def get_zmanim(
    day: date, location: Location, config: Optional[JewishCalculationConfig] = None
) -> Zmanim:
    """Halachic times; hours are twelfths of the method's day, not clock hours."""

    config = config or JewishCalculationConfig()
    sunrise, sunset, noon, tz = _sun_events(day, location, config)
    lat, lon = location.latitude, location.longitude

    def below(depression: float, rising: bool, fallback: datetime) -> datetime:
        moment = time_at_sun_altitude(day, lat, lon, -depression, rising, tz, noon=noon)
        return moment if moment is not None else fallback

    alos = below(ALOS_DEPRESSION, True, sunrise - timedelta(minutes=72))
    misheyakir = below(MISHEYAKIR_DEPRESSION, True, sunrise - timedelta(minutes=60))
    tzais = below(TZAIS_DEPRESSION[config.method], False, sunset + timedelta(minutes=42))
    tzais72 = sunset + timedelta(minutes=72)

    if config.method == "magen_avraham":
        day_start, day_end = sunrise - timedelta(minutes=72), tzais72
    else:
        day_start, day_end = sunrise, sunset
    hour = (day_end - day_start) / 12

    def at(hours: float) -> datetime:
        return (day_start + hour * hours).replace(microsecond=0)

    return Zmanim(
        date=day,
        method=config.method,
        alos=alos.replace(microsecond=0),
        misheyakir=misheyakir.replace(microsecond=0),
        sunrise=sunrise.replace(microsecond=0),
        sof_zman_shma=at(3),
        sof_zman_tfilla=at(4),
        chatzos=at(6),
        mincha_gedola=at(6.5),
        mincha_ketana=at(9.5),
        plag_hamincha=at(10.75),
        sunset=sunset.replace(microsecond=0),
        tzais=tzais.replace(microsecond=0),
        tzais72=tzais72.replace(microsecond=0),
        shaah_zmanit_minutes=round(hour.total_seconds() / 60.0, 3),
    )


def get_jewish_prayer_times(
    day: date, location: Location, config: Optional[JewishCalculationConfig] = None
) -> List[PrayerTime]:
    """Earliest preferred times for Shacharit, Mincha and Maariv."""

    config = config or JewishCalculationConfig()
    zmanim = get_zmanim(day, location, config)
    return [
        PrayerTime(name=name, time=moment, tradition="judaism", calculation_method=config.method)
        for name, moment in (
            ("Shacharit", zmanim.sunrise),
            ("Mincha", zmanim.mincha_gedola),
            ("Maariv", zmanim.tzais),
        )
    ]


# --- O B S E R V A N C E S ---


def _safe_local_time(fn, *args) -> Optional[datetime]:
    try:
        return fn(*args)
    except PolarConditionsError:
        logger.debug("no sun-anchored time for %s", args[0])
        return None


def get_jewish_observances(
    start: date,
    end: date,
    location: Optional[Location] = None,
    config: Optional[JewishCalculationConfig] = None,
) -> List[ReligiousEvent]:
    """Holidays and weekly Shabbat entries in ``[start, end]``, in calendar order.

    With a location, Shabbat carries the Friday candle-lighting time and a
    holiday carries the sunset that begins it the evening before.
    """

    if end < start:
        raise InvalidDateRangeError(["End date must not be before start date"])
    config = config or JewishCalculationConfig()
    if location is not None:
        require_valid_coordinates(location.latitude, location.longitude)

    events: List[ReligiousEvent] = []
    day = start
    while day <= end:
        eve: Optional[datetime] = None
        names = _holiday_names(day)
        if location is not None and names:
            eve = _safe_local_time(_sunset, day - timedelta(days=1), location, config)
        for name, suffix in names:
            events.append(_event(name, suffix, day, eve))

        if hc.is_shabbat(day):
            candle = None
            if location is not None:
                times = _safe_local_time(get_sabbath_times, day, location, config)
                candle = times.candle_lighting if times is not None else None
            events.append(
                ReligiousEvent(
                    id=f"jewish-shabbat-{day.isoformat()}",
                    name="Shabbat",
                    tradition="judaism",
                    date=day,
                    local_time=candle,
                    description=SHABBAT_DESCRIPTION,
                    significance=SHABBAT_SIGNIFICANCE,
                    astronomical_basis="Friday sunset to Saturday nightfall",
                    observance_type="sabbath",
                )
            )
            blessed = _is_shabbat_mevarchim(day)
            if blessed:
                events.append(_event("Shabbat Mevarchim", blessed, day))
        day += timedelta(days=1)

    events.sort(key=lambda event: (event.date, event.name))
    return events
