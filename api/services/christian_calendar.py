"""Western and Orthodox feasts, liturgical seasons and canonical hours."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List, Literal, Tuple

from ..schemas.location import Location
from ..schemas.religious import PrayerTime, ReligiousEvent
from .errors import InvalidDateRangeError, PolarConditionsError
from .location import require_valid_coordinates
from .solar_times import get_solar_times

logger = logging.getLogger(__name__)

ChristianTradition = Literal["western", "orthodox"]

# name -> (offset from Easter in days, observance type, description)
WESTERN_MOVEABLE: Dict[str, Tuple[int, str, str]] = {
    "Ash Wednesday": (-46, "fast", "Beginning of Lent, forty days of fasting and penance."),
    "Palm Sunday": (-7, "feast", "Christ's entry into Jerusalem; Holy Week begins."),
    "Maundy Thursday": (-3, "holiday", "Commemorates the Last Supper."),
    "Good Friday": (-2, "fast", "Commemorates the crucifixion."),
    "Easter Sunday": (0, "feast", "The Resurrection, principal feast of the Christian year."),
    "Ascension": (39, "feast", "Christ's ascension into heaven, forty days after Easter."),
    "Pentecost": (49, "feast", "Descent of the Holy Spirit upon the apostles."),
    "Trinity Sunday": (56, "feast", "Feast of the Holy Trinity."),
    "Corpus Christi": (60, "feast", "Feast of the Body and Blood of Christ."),
}

ORTHODOX_MOVEABLE: Dict[str, Tuple[int, str, str]] = {
    "Clean Monday": (-48, "fast", "First day of Great Lent."),
    "Palm Sunday": (-7, "feast", "Christ's entry into Jerusalem; Holy Week begins."),
    "Holy Thursday": (-3, "holiday", "Commemorates the Mystical Supper."),
    "Good Friday": (-2, "fast", "Commemorates the crucifixion."),
    "Pascha": (0, "feast", "The Resurrection, feast of feasts."),
    "Ascension": (39, "feast", "Christ's ascension into heaven, forty days after Pascha."),
    "Pentecost": (49, "feast", "Descent of the Holy Spirit upon the apostles."),
    "All Saints": (56, "feast", "Commemoration of all saints, the Sunday after Pentecost."),
}

# name -> ((month, day), observance type, description)
WESTERN_FIXED: Dict[str, Tuple[Tuple[int, int], str, str]] = {
    "Epiphany": ((1, 6), "feast", "Manifestation of Christ to the Magi."),
    "Annunciation": ((3, 25), "feast", "The angel Gabriel's announcement to Mary."),
    "Assumption": ((8, 15), "feast", "Mary taken up into heaven."),
    "All Saints": ((11, 1), "feast", "Commemoration of all saints."),
    "Christmas": ((12, 25), "feast", "The Nativity of Christ."),
}

# Julian-calendar feasts expressed as their Gregorian dates in 1900-2099.
ORTHODOX_FIXED: Dict[str, Tuple[Tuple[int, int], str, str]] = {
    "Nativity": ((1, 7), "feast", "The Nativity of Christ."),
    "Theophany": ((1, 19), "feast", "The baptism of Christ in the Jordan."),
    "Annunciation": ((4, 7), "feast", "The angel Gabriel's announcement to the Theotokos."),
    "Dormition": ((8, 28), "feast", "The falling asleep of the Theotokos."),
}

CANONICAL_HOURS = (
    ("Lauds", "sunrise", 0),
    ("Prime", "sunrise", 1),
    ("Terce", "sunrise", 3),
    ("Sext", "sunrise", 6),
    ("None", "sunrise", 9),
    ("Vespers", "sunset", 0),
    ("Compline", "sunset", 2),
)


def western_easter(year: int) -> date:
    """Gregorian Easter Sunday (anonymous Gregorian algorithm)."""

    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def orthodox_easter(year: int) -> date:
    """Julian-computus Pascha, returned as a Gregorian date."""

    a = year % 4
    b = year % 7
    c = year % 19
    d = (19 * c + 15) % 30
    e = (2 * a + 4 * b - d + 34) % 7
    month, day = divmod(d + e + 114, 31)
    julian_gap = year // 100 - year // 400 - 2
    return date(year, month, day + 1) + timedelta(days=julian_gap)


def easter(year: int, tradition: ChristianTradition = "western") -> date:
    return orthodox_easter(year) if tradition == "orthodox" else western_easter(year)


def first_sunday_of_advent(year: int) -> date:
    dec3 = date(year, 12, 3)
    return dec3 - timedelta(days=(dec3.weekday() + 1) % 7)


def _slug(name: str) -> str:
    return "-".join(name.lower().split())


def _observance(name: str, day: date, kind: str, description: str, basis: str) -> ReligiousEvent:
    return ReligiousEvent(
        id=f"christian-{_slug(name)}-{day.isoformat()}",
        name=name,
        tradition="christianity",
        date=day,
        description=description,
        significance=description,
        astronomical_basis=basis,
        observance_type=kind,
    )


def _year_observances(year: int, tradition: ChristianTradition) -> List[ReligiousEvent]:
    pascha = easter(year, tradition)
    moveable = ORTHODOX_MOVEABLE if tradition == "orthodox" else WESTERN_MOVEABLE
    fixed = ORTHODOX_FIXED if tradition == "orthodox" else WESTERN_FIXED
    basis = "First Sunday after the Paschal full moon following the vernal equinox"

    events = [
        _observance(name, pascha + timedelta(days=offset), kind, description, basis)
        for name, (offset, kind, description) in moveable.items()
    ]
    events.extend(
        _observance(name, date(year, month, mday), kind, description, "Fixed date")
        for name, ((month, mday), kind, description) in fixed.items()
    )
    if tradition == "western":
        advent = first_sunday_of_advent(year)
        events.append(
            _observance(
                "First Sunday of Advent", advent, "holiday",
                "Start of the liturgical year, the fourth Sunday before Christmas.", "Fixed to Christmas",
            )
        )
        events.append(
            _observance(
                "Christ the King", advent - timedelta(days=7), "feast",
                "Last Sunday of the liturgical year.", "Fixed to Christmas",
            )
        )
    return events


def get_christian_observances(
    start: date, end: date, tradition: ChristianTradition = "western"
) -> List[ReligiousEvent]:
    if end < start:
        raise InvalidDateRangeError(["End date must not be before start date"])
    events = [
        event
        for year in range(start.year, end.year + 1)
        for event in _year_observances(year, tradition)
        if start <= event.date <= end
    ]
    events.sort(key=lambda event: (event.date, event.name))
    return events


def get_liturgical_season(day: date, tradition: ChristianTradition = "western") -> str:
    """One of advent, christmas, lent, easter, pentecost or ordinary_time."""

    pascha = easter(day.year, tradition)
    lent_start = pascha - timedelta(days=48 if tradition == "orthodox" else 46)
    pentecost = pascha + timedelta(days=49)

    if day >= date(day.year, 12, 25) or day <= date(day.year, 1, 6):
        return "christmas"
    if day >= first_sunday_of_advent(day.year):
        return "advent"
    if lent_start <= day < pascha:
        return "lent"
    if pascha <= day < pentecost:
        return "easter"
    if pentecost <= day < pentecost + timedelta(days=7):
        return "pentecost"
    return "ordinary_time"


def get_canonical_hours(day: date, location: Location) -> List[PrayerTime]:
    """Hours of the Divine Office anchored to local sunrise and sunset."""

    require_valid_coordinates(location.latitude, location.longitude)
    solar = get_solar_times(
        day,
        location.latitude,
        location.longitude,
        elevation=location.elevation or 0.0,
        timezone=location.timezone,
    )
    if solar.sunrise is None or solar.sunset is None:
        raise PolarConditionsError(
            [f"The sun does not rise and set at {location.latitude:.4f},{location.longitude:.4f} on {day.isoformat()}"]
        )
    anchors = {"sunrise": solar.sunrise, "sunset": solar.sunset}
    return [
        PrayerTime(
            name=name,
            time=(anchors[anchor] + timedelta(hours=hours)).replace(microsecond=0),
            tradition="christianity",
            calculation_method="canonical",
        )
        for name, anchor, hours in CANONICAL_HOURS
    ]
