"""Calendar, observance and prayer-time schemas for the religious calendars."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Tradition = Literal["islam", "judaism", "christianity"]
ObservanceType = Literal["prayer", "holiday", "fast", "feast", "sabbath"]

PrayerMethodName = Literal[
    "MuslimWorldLeague",
    "Egyptian",
    "Karachi",
    "UmmAlQura",
    "Dubai",
    "MoonsightingCommittee",
    "NorthAmerica",
    "Kuwait",
    "Qatar",
    "Singapore",
    "Tehran",
    "Turkey",
]
Madhab = Literal["shafi", "hanafi"]
HighLatitudeRule = Literal["middle_of_the_night", "seventh_of_the_night", "twilight_angle"]
JewishMethod = Literal["standard", "geonim", "magen_avraham"]


class HijriDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=30)
    month_name: str


class HebrewDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(..., ge=1, le=13, description="Civil numbering, Tishrei = 1")
    day: int = Field(..., ge=1, le=30)
    month_name: str
    is_leap_year: bool = False


class ReligiousEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    tradition: Tradition
    date: date
    local_time: Optional[datetime] = None
    description: str
    significance: str
    astronomical_basis: Optional[str] = None
    observance_type: ObservanceType


class RakahBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    sunnah_before: int = 0
    fard: int
    sunnah_after: int = 0
    witr: int = 0


class PrayerTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    time: datetime
    tradition: Tradition
    calculation_method: str
    qibla_direction: Optional[float] = None
    rakah: Optional[RakahBreakdown] = None


class PrayerAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True)

    fajr: int = 0
    sunrise: int = 0
    dhuhr: int = 0
    asr: int = 0
    maghrib: int = 0
    isha: int = 0


class IslamicCalculationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: PrayerMethodName = "MuslimWorldLeague"
    madhab: Madhab = "shafi"
    adjustments: PrayerAdjustments = Field(default_factory=PrayerAdjustments)
    high_latitude_rule: HighLatitudeRule = "middle_of_the_night"


class JewishCalculationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: JewishMethod = "standard"
    candle_lighting_minutes: int = Field(default=18, ge=0)
    havdalah_minutes: int = Field(default=50, ge=0)
    use_elevation: bool = False


class SabbathTimes(BaseModel):
    model_config = ConfigDict(frozen=True)

    friday: date
    saturday: date
    candle_lighting: datetime
    havdalah: datetime


class Zmanim(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    method: JewishMethod
    alos: datetime
    misheyakir: datetime
    sunrise: datetime
    sof_zman_shma: datetime
    sof_zman_tfilla: datetime
    chatzos: datetime
    mincha_gedola: datetime
    mincha_ketana: datetime
    plag_hamincha: datetime
    sunset: datetime
    tzais: datetime
    tzais72: datetime
    shaah_zmanit_minutes: float
