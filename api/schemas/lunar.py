"""Lunar ephemeris and accuracy schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


LunarEventName = Literal["New", "FirstQuarter", "Full", "ThirdQuarter"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class LibrationData(_Frozen):
    longitude_libration: float = Field(..., description="Degrees, east positive")
    latitude_libration: float = Field(..., description="Degrees, north positive")
    apparent_diameter: float = Field(..., description="Arcminutes")


class LunarIllumination(_Frozen):
    fraction: float = Field(..., ge=0.0, le=1.0)
    phase_name: str
    phase_angle: float = Field(..., ge=0.0, lt=360.0)


class EnhancedLunarIllumination(LunarIllumination):
    libration_data: LibrationData
    apparent_diameter: float
    distance: float
    is_waxing: bool
    age_days: float


class TimeInterval(_Frozen):
    min: datetime
    max: datetime


class AccuracyEstimate(_Frozen):
    confidence_interval: TimeInterval
    uncertainty_minutes: float = Field(..., ge=0.0)
    calculation_method: str
    reliability_score: float = Field(..., ge=0.0, le=1.0)


class AlternativeCalculation(_Frozen):
    method: str
    result: datetime
    deviation: float = Field(..., description="Minutes relative to the primary result")


class LunarEvent(_Frozen):
    event_name: LunarEventName
    utc_date: datetime
    local_solar_date: datetime
    julian_date: float
    accuracy_note: str


class EnhancedLunarEvent(LunarEvent):
    accuracy_estimate: AccuracyEstimate
    alternative_calculations: List[AlternativeCalculation] = Field(default_factory=list)
    atmospheric_correction: float = 0.0
    libration_data: Optional[LibrationData] = None


class ValidationResult(_Frozen):
    is_valid: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class UncertaintyRange(_Frozen):
    lower: float
    upper: float


class UncertaintyEstimate(_Frozen):
    standard_deviation: float
    confidence_level: float
    uncertainty_range: UncertaintyRange


class ConsensusAssessment(_Frozen):
    consensus_level: float = Field(..., ge=0.0, le=1.0)
    outlier_methods: List[str] = Field(default_factory=list)
    recommendation: str


class MethodComparison(_Frozen):
    primary_method: str
    primary_result: datetime
    alternative_methods: List[AlternativeCalculation]
    recommended_result: datetime
    consensus_level: float
