"""Location and timezone schemas shared by every calculation endpoint."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180.0, le=180.0, allow_inf_nan=False)
    elevation: Optional[float] = Field(default=None, description="Metres above sea level")
    timezone: Optional[str] = Field(default=None, description="IANA zone identifier")


class CoordinateValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: List[str] = Field(default_factory=list)


class TimezoneInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    timezone: str
    offset_minutes: int
    is_dst: bool
    abbreviation: str
    utc_offset: str
