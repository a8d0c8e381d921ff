"""Accuracy model for lunar events: intervals, uncertainty, consensus and validation.

Deviations are always in minutes relative to the primary event time.
Degraded accuracy never raises; it is reported through lower scores and
human-readable warnings.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..schemas.location import Location
from ..schemas.lunar import (
    AccuracyEstimate,
    AlternativeCalculation,
    ConsensusAssessment,
    EnhancedLunarEvent,
    LunarEvent,
    MethodComparison,
    TimeInterval,
    UncertaintyEstimate,
    UncertaintyRange,
    ValidationResult,
)
from .julian import ensure_aware
from .location import is_high_latitude, is_polar_region, validate_coordinates

logger = logging.getLogger(__name__)

PRIMARY_METHOD = "Lunar Periodic Series"

DEFAULT_HALF_WIDTH_MINUTES = 120.0
DEFAULT_RELIABILITY = 0.85
BASE_UNCERTAINTY_MINUTES = 60.0

POLAR_PENALTY = 0.7
HIGH_LATITUDE_PENALTY = 0.7
ELEVATION_PENALTY = 0.9
FAR_TIMING_PENALTY = 0.7
NEAR_TIMING_PENALTY = 0.85

INSUFFICIENT_METHODS = (
    "Insufficient methods for consensus analysis. Consider using additional calculation methods."
)


def z_score(confidence_level: float) -> float:
    """Two-sided z-score; levels between the keyed values round down."""

    if confidence_level >= 0.99:
        return 2.576
    if confidence_level >= 0.95:
        return 1.96
    return 1.645


def _deviations(alternatives: Sequence[AlternativeCalculation]) -> np.ndarray:
    return np.array([alt.deviation for alt in alternatives], dtype=float)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _years_between(moment: datetime, reference: datetime) -> float:
    return (ensure_aware(moment) - ensure_aware(reference)).total_seconds() / (365.25 * 86400.0)


def calculate_confidence_interval(
    event_time: datetime,
    alternatives: Sequence[AlternativeCalculation],
    confidence_level: float = 0.95,
) -> Tuple[datetime, datetime, float]:
    """Return ``(min, max, half_width_minutes)`` centred on ``event_time``."""

    z = z_score(confidence_level)
    devs = _deviations(alternatives)
    if devs.size >= 2:
        half_width = z * float(np.std(devs, ddof=1))
    elif devs.size == 1:
        half_width = z * abs(float(devs[0]))
    else:
        half_width = DEFAULT_HALF_WIDTH_MINUTES

    delta = timedelta(minutes=half_width)
    return event_time - delta, event_time + delta, round(half_width, 3)


def calculate_accuracy_estimate(
    event: LunarEvent,
    alternatives: Sequence[AlternativeCalculation],
    confidence_level: float = 0.95,
) -> AccuracyEstimate:
    low, high, half_width = calculate_confidence_interval(
        event.utc_date, alternatives, confidence_level
    )
    devs = _deviations(alternatives)
    if devs.size:
        reliability = _clamp(1.0 - float(np.mean(np.abs(devs))) / 180.0, 0.0, 1.0)
        method = f"{PRIMARY_METHOD} vs " + ", ".join(alt.method for alt in alternatives)
    else:
        reliability = DEFAULT_RELIABILITY
        method = PRIMARY_METHOD

    return AccuracyEstimate(
        confidence_interval=TimeInterval(min=low, max=high),
        uncertainty_minutes=half_width,
        calculation_method=method,
        reliability_score=round(reliability, 4),
    )


def estimate_uncertainty(
    event_time: datetime,
    location: Location,
    alternatives: Sequence[AlternativeCalculation] = (),
    reference_time: Optional[datetime] = None,
) -> UncertaintyEstimate:
    """Uncertainty in minutes after location and time-distance risk factors."""

    uncertainty = BASE_UNCERTAINTY_MINUTES
    devs = _deviations(alternatives)
    if devs.size:
        spread = float(np.std(devs)) if devs.size >= 2 else 0.0
        uncertainty = max(spread, float(np.mean(np.abs(devs))), 1.0)

    if is_polar_region(location.latitude):
        uncertainty *= 2.0
    elif is_high_latitude(location.latitude):
        uncertainty *= 1.5
    if (location.elevation or 0.0) > 4000:
        uncertainty *= 1.3

    years = abs(_years_between(event_time, reference_time or datetime.now(timezone.utc)))
    if years > 10:
        uncertainty *= 1.5
    elif years > 5:
        uncertainty *= 1.2

    return UncertaintyEstimate(
        standard_deviation=round(uncertainty, 3),
        confidence_level=round(_clamp(1.0 - uncertainty / 300.0, 0.7, 0.99), 4),
        uncertainty_range=UncertaintyRange(
            lower=round(uncertainty * 0.5, 3), upper=round(uncertainty * 2.0, 3)
        ),
    )


def _is_outlier(deviation: float, centre: float, spread: float) -> bool:
    distance = abs(deviation - centre)
    return spread > 0 and distance > 2.0 * spread and distance > 60.0


def _consensus_recommendation(level: float) -> str:
    if level > 0.9:
        return "Excellent agreement between methods. High confidence in result."
    if level > 0.7:
        return "Good agreement between methods. Result is reliable."
    if level > 0.5:
        return "Moderate agreement between methods. Consider additional verification."
    return "Poor agreement between methods. Use caution and verify with authoritative sources."


def assess_method_consensus(alternatives: Sequence[AlternativeCalculation]) -> ConsensusAssessment:
    """Agreement between alternative methods and which of them are outliers.

    Outliers sit more than two population standard deviations from the mean
    deviation and more than an hour away from it.
    """

    if len(alternatives) < 2:
        return ConsensusAssessment(
            consensus_level=0.5, outlier_methods=[], recommendation=INSUFFICIENT_METHODS
        )

    devs = _deviations(alternatives)
    centre = float(np.mean(devs))
    spread = float(np.std(devs))
    outliers = [
        alt.method
        for alt, dev in zip(alternatives, devs)
        if _is_outlier(float(dev), centre, spread)
    ]

    level = round(_clamp(1.0 - spread / 60.0, 0.0, 1.0), 4)
    return ConsensusAssessment(
        consensus_level=level,
        outlier_methods=outliers,
        recommendation=_consensus_recommendation(level),
    )


def _location_checks(location: Location) -> Tuple[float, List[str], List[str]]:
    confidence = 1.0
    warnings: List[str] = []
    recommendations: List[str] = []

    if is_polar_region(location.latitude):
        confidence *= POLAR_PENALTY
        warnings.append(
            f"Location is in polar region ({location.latitude:.2f}°). "
            "Lunar calculations may have reduced accuracy."
        )
        recommendations.append("Verify calculations with local astronomical observations or almanacs.")
    elif is_high_latitude(location.latitude):
        confidence *= HIGH_LATITUDE_PENALTY
        warnings.append(
            f"High latitude location ({location.latitude:.2f}°). "
            "Some atmospheric effects may be more pronounced."
        )

    elevation = location.elevation or 0.0
    if elevation > 4000:
        confidence *= ELEVATION_PENALTY
        warnings.append(
            f"High elevation ({elevation:g}m). Atmospheric corrections may have increased uncertainty."
        )
    elif elevation < -100:
        confidence *= ELEVATION_PENALTY
        warnings.append(
            f"Below sea level location ({elevation:g}m). "
            "Unusual atmospheric conditions may affect accuracy."
        )
    return confidence, warnings, recommendations


def _timing_check(event_time: datetime, reference_time: datetime) -> Tuple[float, Optional[str]]:
    years = _years_between(event_time, reference_time)
    direction = "in the future" if years > 0 else "in the past"
    whole = abs(round(years))
    if abs(years) > 10:
        return FAR_TIMING_PENALTY, (
            f"Event is {whole} years {direction}. Long-term predictions have increased uncertainty."
        )
    if abs(years) > 5:
        return NEAR_TIMING_PENALTY, f"Event is {whole} years {direction}. Accuracy may be reduced."
    return 1.0, None


def validate_lunar_calculation(
    event: LunarEvent,
    location: Location,
    reference_time: Optional[datetime] = None,
) -> ValidationResult:
    """Score a lunar event against location and time-distance risk factors."""

    coords = validate_coordinates(location.latitude, location.longitude)
    if not coords.valid:
        return ValidationResult(
            is_valid=False,
            confidence=0.0,
            warnings=list(coords.errors),
            recommendations=["Provide a latitude in [-90, 90] and a longitude in [-180, 180]."],
        )

    confidence, warnings, recommendations = _location_checks(location)

    factor, timing_warning = _timing_check(
        event.utc_date, reference_time or datetime.now(timezone.utc)
    )
    if timing_warning:
        confidence *= factor
        warnings.append(timing_warning)

    is_valid = confidence > 0.5
    if not is_valid:
        recommendations.append("Consider using multiple calculation methods for verification")
        recommendations.append("Consult astronomical almanacs for critical timing")

    return ValidationResult(
        is_valid=is_valid,
        confidence=round(confidence, 4),
        warnings=warnings,
        recommendations=recommendations,
    )


def validate_enhanced_lunar_event(
    event: EnhancedLunarEvent,
    location: Location,
    reference_time: Optional[datetime] = None,
) -> ValidationResult:
    """Base validation plus checks on the attached accuracy metadata."""

    base = validate_lunar_calculation(event, location, reference_time)
    confidence = base.confidence
    warnings = list(base.warnings)
    recommendations = list(base.recommendations)

    estimate = event.accuracy_estimate
    if estimate.reliability_score < 0.7:
        confidence *= 0.9
        warnings.append("Low reliability score in accuracy estimate. Results may have higher uncertainty.")

    if estimate.uncertainty_minutes > 180:
        warnings.append(
            f"High uncertainty ({estimate.uncertainty_minutes:g} minutes). "
            "Consider this when planning time-sensitive activities."
        )
        recommendations.append("Use the confidence interval range for planning purposes.")

    if len(event.alternative_calculations) > 1:
        consensus = assess_method_consensus(event.alternative_calculations)
        if consensus.consensus_level < 0.7:
            confidence *= 0.85
            warnings.append("Low consensus between calculation methods.")
            recommendations.append(consensus.recommendation)

    is_valid = confidence > 0.5
    if base.is_valid and not is_valid:
        recommendations.append("Consider using multiple calculation methods for verification")
        recommendations.append("Consult astronomical almanacs for critical timing")

    return ValidationResult(
        is_valid=is_valid,
        confidence=round(confidence, 4),
        warnings=warnings,
        recommendations=recommendations,
    )


def compare_methods(
    event: LunarEvent, alternatives: Sequence[AlternativeCalculation]
) -> MethodComparison:
    """Blend the primary result with the non-outlier alternatives."""

    consensus = assess_method_consensus(alternatives)
    kept = [0.0] + [
        alt.deviation for alt in alternatives if alt.method not in consensus.outlier_methods
    ]
    shift = float(np.mean(kept))
    return MethodComparison(
        primary_method=PRIMARY_METHOD,
        primary_result=event.utc_date,
        alternative_methods=list(alternatives),
        recommended_result=event.utc_date + timedelta(minutes=shift),
        consensus_level=consensus.consensus_level,
    )
