from datetime import datetime, timedelta, timezone

import pytest

from api.schemas.location import Location
from api.services import lunar_ephemeris as le
from api.services.errors import InvalidDateRangeError


UTC = timezone.utc


def test_illumination_bounds_hold_over_a_month():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    for day in range(0, 30, 3):
        result = le.calculate_illumination(start + timedelta(days=day))
        assert 0.0 <= result.fraction <= 1.0
        assert 0.0 <= result.phase_angle < 360.0
        assert 356000 < result.distance < 407000
        assert 29 < result.apparent_diameter < 34
        assert abs(result.libration_data.longitude_libration) < 10
        assert abs(result.libration_data.latitude_libration) < 10


def test_full_moon_january_2024():
    result = le.calculate_illumination(datetime(2024, 1, 25, 17, 54, tzinfo=UTC))
    assert result.fraction > 0.98
    assert result.phase_name == "Full Moon"


def test_new_moon_is_dark():
    result = le.calculate_illumination(datetime(2024, 1, 11, 11, 57, tzinfo=UTC))
    assert result.fraction < 0.02
    assert result.phase_name == "New Moon"


def test_naive_instants_are_utc():
    naive = le.calculate_illumination(datetime(2024, 3, 1, 6, 0))
    aware = le.calculate_illumination(datetime(2024, 3, 1, 6, 0, tzinfo=UTC))
    assert naive == aware


def test_libration_is_deterministic():
    moment = datetime(2023, 8, 14, 3, 30, tzinfo=UTC)
    assert le.calculate_libration(moment) == le.calculate_libration(moment)


def test_apparent_diameter_tracks_distance():
    moment = datetime(2024, 5, 23, tzinfo=UTC)
    distance = le.calculate_distance(moment)
    expected = le.MEAN_DIAMETER_ARCMIN * le.MEAN_DISTANCE_KM / distance
    assert le.calculate_apparent_diameter(distance) == pytest.approx(expected, rel=0.1)


def test_phase_names_cover_the_cycle():
    assert le.phase_name(0.0) == "New Moon"
    assert le.phase_name(45.0) == "Waxing Crescent"
    assert le.phase_name(92.0) == "First Quarter"
    assert le.phase_name(135.0) == "Waxing Gibbous"
    assert le.phase_name(225.0) == "Waning Gibbous"
    assert le.phase_name(315.0) == "Waning Crescent"
    assert le.phase_name(358.0) == "New Moon"


def test_phase_events_january_2024():
    events = le.find_phase_events(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 2, 1, tzinfo=UTC))
    names = [name for name, _ in events]
    assert names == ["ThirdQuarter", "New", "FirstQuarter", "Full"]
    moments = dict(events)
    assert abs(moments["New"] - datetime(2024, 1, 11, 11, 57, tzinfo=UTC)) < timedelta(minutes=30)
    assert abs(moments["Full"] - datetime(2024, 1, 25, 17, 54, tzinfo=UTC)) < timedelta(minutes=30)


def test_phase_events_alternate_in_order():
    cycle = ["New", "FirstQuarter", "Full", "ThirdQuarter"]
    events = le.find_phase_events(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 12, 31, tzinfo=UTC))
    assert len(events) >= 48
    for (first, t1), (second, t2) in zip(events, events[1:]):
        assert cycle[(cycle.index(first) + 1) % 4] == second
        assert t1 < t2


def test_lunar_events_carry_accuracy_metadata():
    location = Location(latitude=40.7128, longitude=-74.0060, elevation=10.0)
    events = le.calculate_lunar_events(
        datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 31, tzinfo=UTC), location
    )
    assert len(events) == 4
    for event in events:
        interval = event.accuracy_estimate.confidence_interval
        assert interval.min <= event.utc_date <= interval.max
        assert 0.0 <= event.accuracy_estimate.reliability_score <= 1.0
        assert len(event.alternative_calculations) == 4
        assert event.libration_data is not None
        assert event.atmospheric_correction > 0
        # Local solar time is about five hours behind UTC in New York.
        offset = event.local_solar_date.utcoffset()
        assert timedelta(hours=-5, minutes=-30) < offset < timedelta(hours=-4, minutes=-30)


def test_lunar_events_subset_of_methods():
    events = le.calculate_lunar_events(
        datetime(2024, 1, 1, tzinfo=UTC),
        datetime(2024, 1, 15, tzinfo=UTC),
        methods=["Meeus Mean Phase"],
    )
    assert events
    assert all(len(e.alternative_calculations) == 1 for e in events)


def test_reversed_range_is_rejected():
    with pytest.raises(InvalidDateRangeError):
        le.calculate_lunar_events(datetime(2024, 2, 1, tzinfo=UTC), datetime(2024, 1, 1, tzinfo=UTC))


def test_distance_samples():
    samples = le.sample_distances(
        datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 3, tzinfo=UTC), step_hours=12
    )
    assert len(samples) == 5
    assert all(356000 < km < 407000 for _, km in samples)
