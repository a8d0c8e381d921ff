from datetime import date

import pytest

from api.services.solar_times import get_solar_times, hour_angle


def test_london_midsummer():
    times = get_solar_times(date(2024, 6, 21), 51.5074, -0.1278, timezone="Europe/London")
    assert times.timezone == "Europe/London"
    assert times.sunrise.hour == 4
    assert times.sunset.hour == 21
    assert 12 <= times.solar_noon.hour <= 13
    ordered = [
        times.civil_dawn,
        times.sunrise,
        times.golden_hour_end,
        times.solar_noon,
        times.golden_hour_start,
        times.sunset,
        times.civil_dusk,
    ]
    assert ordered == sorted(ordered)
    # The Sun never gets 18 degrees below the horizon in a London June.
    assert times.astronomical_dawn is None and times.astronomical_dusk is None
    assert 16 * 60 < times.day_length_minutes < 17 * 60


def test_timezone_is_resolved_when_omitted():
    times = get_solar_times(date(2024, 3, 20), 35.6762, 139.6503)
    assert times.timezone == "Asia/Tokyo"
    assert times.sunrise.utcoffset().total_seconds() == 9 * 3600


def test_polar_day_has_no_sunset():
    times = get_solar_times(date(2024, 6, 21), 78.2232, 15.6267, timezone="Arctic/Longyearbyen")
    assert times.sunrise is None and times.sunset is None
    assert times.day_length_minutes == 1440.0
    assert times.solar_noon is not None


def test_polar_night_has_zero_day_length():
    times = get_solar_times(date(2024, 12, 21), 78.2232, 15.6267, timezone="Arctic/Longyearbyen")
    assert times.day_length_minutes == 0.0


def test_hour_angle_none_when_altitude_unreachable():
    assert hour_angle(80.0, 23.4, -0.833) is None
    assert hour_angle(0.0, 0.0, 0.0) == pytest.approx(90.0)
