from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SolarTimesData(BaseModel):
    """Daylight-anchored times for one local date; ``None`` under polar day or night."""

    model_config = ConfigDict(frozen=True)

    date: date
    timezone: str
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    solar_noon: datetime
    golden_hour_start: Optional[datetime] = None
    golden_hour_end: Optional[datetime] = None
    civil_dawn: Optional[datetime] = None
    civil_dusk: Optional[datetime] = None
    nautical_dawn: Optional[datetime] = None
    nautical_dusk: Optional[datetime] = None
    astronomical_dawn: Optional[datetime] = None
    astronomical_dusk: Optional[datetime] = None
    day_length_minutes: Optional[float] = None
