from .location import CoordinateValidation, Location, TimezoneInfo

from .lunar import (
    AccuracyEstimate,
    AlternativeCalculation,
    ConsensusAssessment,
    EnhancedLunarEvent,
    EnhancedLunarIllumination,
    LibrationData,
    LunarEvent,
    LunarIllumination,
    MethodComparison,
    UncertaintyEstimate,
    ValidationResult,
)
from .religious import (
    HebrewDate,
    HijriDate,
    IslamicCalculationConfig,
    JewishCalculationConfig,
    PrayerTime,
    ReligiousEvent,
    SabbathTimes,
    Zmanim,
)
from .solar import SolarTimesData
