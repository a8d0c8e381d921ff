from datetime import datetime, timedelta, timezone

import pytest

from api.schemas.location import Location
from api.schemas.lunar import AlternativeCalculation, LunarEvent
from api.services import accuracy, precision_lunar
from api.services.lunar_ephemeris import build_lunar_event


UTC = timezone.utc
EVENT_TIME = datetime(2024, 1, 11, 11, 57, tzinfo=UTC)
NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _alt(method: str, deviation: float) -> AlternativeCalculation:
    return AlternativeCalculation(
        method=method, result=EVENT_TIME + timedelta(minutes=deviation), deviation=deviation
    )


def _event() -> LunarEvent:
    return build_lunar_event("New", EVENT_TIME)


def test_interval_without_alternatives_is_two_hours():
    low, high, half = accuracy.calculate_confidence_interval(EVENT_TIME, [])
    assert half == 120.0
    assert high - low == timedelta(hours=4)


def test_interval_never_narrows_with_higher_confidence():
    alts = [_alt("a", 3.0), _alt("b", -4.0), _alt("c", 10.0)]
    widths = [
        accuracy.calculate_confidence_interval(EVENT_TIME, alts, level)[2]
        for level in (0.8, 0.9, 0.95, 0.97, 0.99)
    ]
    assert widths == sorted(widths)
    assert widths[-1] > widths[0]


def test_single_alternative_interval():
    _, _, half = accuracy.calculate_confidence_interval(EVENT_TIME, [_alt("a", -10.0)], 0.95)
    assert half == pytest.approx(19.6)


def test_accuracy_estimate_contains_event():
    alts = [_alt("a", 2.0), _alt("b", -3.0)]
    estimate = accuracy.calculate_accuracy_estimate(_event(), alts)
    assert estimate.confidence_interval.min <= EVENT_TIME <= estimate.confidence_interval.max
    assert 0.0 <= estimate.reliability_score <= 1.0
    assert estimate.calculation_method.startswith(accuracy.PRIMARY_METHOD)


def test_default_reliability_without_alternatives():
    estimate = accuracy.calculate_accuracy_estimate(_event(), [])
    assert estimate.reliability_score == accuracy.DEFAULT_RELIABILITY
    assert estimate.uncertainty_minutes == 120.0


def test_consensus_needs_two_methods():
    result = accuracy.assess_method_consensus([_alt("a", 1.0)])
    assert result.consensus_level == 0.5
    assert result.outlier_methods == []
    assert "Insufficient methods" in result.recommendation


def test_consensus_flags_a_wild_method():
    alts = [_alt(name, 0.0) for name in "abcde"] + [_alt("wild", 300.0)]
    result = accuracy.assess_method_consensus(alts)
    assert result.outlier_methods == ["wild"]
    assert result.consensus_level == 0.0
    assert result.recommendation.startswith("Poor agreement")


def test_consensus_uses_spread_of_all_methods():
    # 100 minutes out but inside two population standard deviations
    result = accuracy.assess_method_consensus([_alt("a", 0.0), _alt("b", 0.0), _alt("c", 100.0)])
    assert result.outlier_methods == []

    alts = [_alt("a", 1.0), _alt("b", -2.0), _alt("c", 0.5), _alt("d", 240.0)]
    assert accuracy.assess_method_consensus(alts).outlier_methods == []


def test_consensus_needs_an_hour_of_distance():
    alts = [_alt(name, 0.0) for name in "abcdefghi"] + [_alt("late", 30.0)]
    result = accuracy.assess_method_consensus(alts)
    assert result.outlier_methods == []


def test_close_methods_agree():
    alts = [_alt("a", 1.0), _alt("b", -1.0), _alt("c", 0.5)]
    result = accuracy.assess_method_consensus(alts)
    assert result.outlier_methods == []
    assert result.consensus_level > 0.9
    assert result.recommendation.startswith("Excellent agreement")


def test_polar_location_increases_uncertainty():
    alts = [_alt("a", 2.0), _alt("b", -3.0)]
    temperate = accuracy.estimate_uncertainty(EVENT_TIME, Location(latitude=45.0, longitude=0.0), alts, NOW)
    polar = accuracy.estimate_uncertainty(EVENT_TIME, Location(latitude=78.0, longitude=15.0), alts, NOW)
    assert polar.standard_deviation > temperate.standard_deviation
    assert 0.7 <= polar.confidence_level <= 0.99
    assert polar.uncertainty_range.lower < polar.standard_deviation < polar.uncertainty_range.upper


def test_polar_increase_holds_for_identical_methods():
    alts = [_alt("a", 0.0), _alt("b", 0.0)]
    temperate = accuracy.estimate_uncertainty(EVENT_TIME, Location(latitude=10.0, longitude=0.0), alts, NOW)
    polar = accuracy.estimate_uncertainty(EVENT_TIME, Location(latitude=-80.0, longitude=0.0), alts, NOW)
    assert polar.standard_deviation > temperate.standard_deviation


def test_validation_of_ordinary_location_is_clean():
    result = accuracy.validate_lunar_calculation(
        _event(), Location(latitude=40.7128, longitude=-74.0060), reference_time=NOW
    )
    assert result.is_valid
    assert result.confidence == 1.0
    assert result.warnings == []


def test_validation_warns_for_polar_and_far_future():
    far = build_lunar_event("Full", datetime(2040, 6, 1, tzinfo=UTC))
    result = accuracy.validate_lunar_calculation(
        far, Location(latitude=78.2, longitude=15.6, elevation=4500.0), reference_time=NOW
    )
    assert not result.is_valid
    assert result.confidence == pytest.approx(0.7 * 0.9 * 0.7, abs=1e-4)
    assert any("polar region" in w for w in result.warnings)
    assert any("High elevation" in w for w in result.warnings)
    assert any("Long-term predictions" in w for w in result.warnings)
    assert "Consult astronomical almanacs for critical timing" in result.recommendations


def test_alternative_methods_run_against_an_event():
    alts = precision_lunar.get_alternative_calculations(_event())
    assert [alt.method for alt in alts] == list(precision_lunar.METHODS)
    for alt in alts:
        assert abs(alt.deviation) < 180


def test_unknown_method_is_rejected():
    from api.services.errors import CalculationInputError

    with pytest.raises(CalculationInputError):
        precision_lunar.get_alternative_calculations(_event(), methods=["Ouija"])


def test_compare_methods_ignores_outliers():
    alts = [_alt(name, 2.0) for name in "abcde"] + [_alt("wild", 300.0)]
    comparison = accuracy.compare_methods(_event(), alts)
    shift = (comparison.recommended_result - EVENT_TIME).total_seconds() / 60.0
    assert 0.0 < shift < 5.0
    assert comparison.primary_method == accuracy.PRIMARY_METHOD


def test_enhanced_event_validation():
    from api.services.lunar_ephemeris import calculate_lunar_events

    location = Location(latitude=40.7128, longitude=-74.0060)
    events = calculate_lunar_events(
        datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 15, tzinfo=UTC), location
    )
    result = accuracy.validate_enhanced_lunar_event(events[0], location, reference_time=NOW)
    base = accuracy.validate_lunar_calculation(events[0], location, reference_time=NOW)
    assert 0.0 <= result.confidence <= base.confidence
    assert set(base.warnings) <= set(result.warnings)
