"""Request bodies and the response envelope shared by the routers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .lunar import LunarEvent
from .religious import IslamicCalculationConfig, JewishCalculationConfig


class PlaceIn(BaseModel):
    # Unconstrained; normalize_place range checks and reports every error.
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    elevation: Optional[float] = None
    label: Optional[str] = None


class CoordinatesIn(BaseModel):
    latitude: float
    longitude: float


class LunarEventsRequest(BaseModel):
    start: datetime
    end: datetime
    place: Optional[PlaceIn] = None
    confidence_level: float = Field(default=0.95, ge=0.7, le=0.99)
    methods: Optional[List[str]] = None


class LunarEventCheckRequest(BaseModel):
    event: LunarEvent
    place: Optional[PlaceIn] = None


class IslamicPrayerRequest(BaseModel):
    date: date
    place: Optional[PlaceIn] = None
    config: IslamicCalculationConfig = Field(default_factory=IslamicCalculationConfig)
    include_sunrise: bool = False
    at: Optional[datetime] = Field(default=None, description="Reports the current and next prayer at this instant")


class JewishDayRequest(BaseModel):
    date: date
    place: Optional[PlaceIn] = None
    config: JewishCalculationConfig = Field(default_factory=JewishCalculationConfig)


class JewishObservancesRequest(BaseModel):
    start: date
    end: date
    place: Optional[PlaceIn] = None
    config: JewishCalculationConfig = Field(default_factory=JewishCalculationConfig)


class CanonicalHoursRequest(BaseModel):
    date: date
    place: Optional[PlaceIn] = None


class Envelope(BaseModel):
    data: Any
    meta: Dict[str, Any] = Field(default_factory=dict)
