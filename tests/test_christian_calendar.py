from datetime import date

import pytest

from api.schemas.location import Location
from api.services import christian_calendar as cc
from api.services.errors import InvalidDateRangeError


def test_easter_dates():
    assert cc.western_easter(2024) == date(2024, 3, 31)
    assert cc.orthodox_easter(2024) == date(2024, 5, 5)
    assert cc.western_easter(2025) == cc.orthodox_easter(2025) == date(2025, 4, 20)
    assert cc.western_easter(2019) == date(2019, 4, 21)
    assert cc.orthodox_easter(2019) == date(2019, 4, 28)
    for year in range(1990, 2040):
        assert cc.western_easter(year).weekday() == 6
        assert cc.orthodox_easter(year).weekday() == 6
        assert cc.orthodox_easter(year) >= cc.western_easter(year)


def test_advent():
    assert cc.first_sunday_of_advent(2024) == date(2024, 12, 1)
    assert cc.first_sunday_of_advent(2023) == date(2023, 12, 3)


def test_western_observances_2024():
    events = cc.get_christian_observances(date(2024, 1, 1), date(2024, 12, 31))
    by_name = {e.name: e for e in events}
    assert by_name["Ash Wednesday"].date == date(2024, 2, 14)
    assert by_name["Ash Wednesday"].observance_type == "fast"
    assert by_name["Good Friday"].date == date(2024, 3, 29)
    assert by_name["Pentecost"].date == date(2024, 5, 19)
    assert by_name["Christ the King"].date == date(2024, 11, 24)
    assert by_name["Christmas"].id == "christian-christmas-2024-12-25"
    assert all(e.tradition == "christianity" for e in events)
    assert [e.date for e in events] == sorted(e.date for e in events)


def test_orthodox_observances():
    events = cc.get_christian_observances(date(2024, 1, 1), date(2024, 12, 31), "orthodox")
    names = {e.name: e.date for e in events}
    assert names["Pascha"] == date(2024, 5, 5)
    assert names["Nativity"] == date(2024, 1, 7)
    assert "Ash Wednesday" not in names


def test_range_is_respected():
    events = cc.get_christian_observances(date(2024, 3, 25), date(2024, 4, 1))
    assert {e.name for e in events} == {"Maundy Thursday", "Good Friday", "Easter Sunday", "Annunciation"}


def test_reversed_range():
    with pytest.raises(InvalidDateRangeError):
        cc.get_christian_observances(date(2024, 2, 1), date(2024, 1, 1))


@pytest.mark.parametrize(
    "day, season",
    [
        (date(2024, 3, 15), "lent"),
        (date(2024, 4, 10), "easter"),
        (date(2024, 5, 21), "pentecost"),
        (date(2024, 7, 1), "ordinary_time"),
        (date(2024, 12, 10), "advent"),
        (date(2024, 12, 26), "christmas"),
        (date(2025, 1, 3), "christmas"),
    ],
)
def test_liturgical_season(day, season):
    assert cc.get_liturgical_season(day) == season


def test_canonical_hours():
    rome = Location(latitude=41.9028, longitude=12.4964, timezone="Europe/Rome")
    hours = cc.get_canonical_hours(date(2024, 6, 14), rome)
    assert [h.name for h in hours] == ["Lauds", "Prime", "Terce", "Sext", "None", "Vespers", "Compline"]
    assert [h.time for h in hours] == sorted(h.time for h in hours)
    assert all(h.tradition == "christianity" for h in hours)
