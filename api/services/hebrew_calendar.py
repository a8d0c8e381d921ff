"""Arithmetic Hebrew calendar.

Dates are handled as fixed day numbers equal to ``date.toordinal()``.
Internally months use the biblical numbering (Nisan = 1, Tishrei = 7,
Adar II = 13); ``HebrewDate`` exposes the civil numbering used for display
where Tishrei = 1 and Elul is the last month (12, or 13 in a leap year).
"""

from __future__ import annotations

from datetime import date
from typing import Tuple

from ..schemas.religious import HebrewDate
from .errors import CalculationInputError

HEBREW_EPOCH = -1373427  # fixed day number of 1 Tishrei AM 1

NISAN, IYYAR, SIVAN, TAMMUZ, AV, ELUL = 1, 2, 3, 4, 5, 6
TISHREI, MARHESHVAN, KISLEV, TEVET, SHEVAT, ADAR, ADAR_II = 7, 8, 9, 10, 11, 12, 13

MONTH_NAMES = {
    NISAN: "Nisan",
    IYYAR: "Iyyar",
    SIVAN: "Sivan",
    TAMMUZ: "Tammuz",
    AV: "Av",
    ELUL: "Elul",
    TISHREI: "Tishrei",
    MARHESHVAN: "Cheshvan",
    KISLEV: "Kislev",
    TEVET: "Tevet",
    SHEVAT: "Shevat",
    ADAR: "Adar",
    ADAR_II: "Adar II",
}


def is_hebrew_leap_year(year: int) -> bool:
    return (7 * year + 1) % 19 < 7


def last_month_of_year(year: int) -> int:
    return ADAR_II if is_hebrew_leap_year(year) else ADAR


def _elapsed_days(year: int) -> int:
    """Days from the epoch to the molad-based new year, with the weekday delay applied."""

    months_elapsed = (235 * year - 234) // 19
    parts_elapsed = 12084 + 13753 * months_elapsed
    days = 29 * months_elapsed + parts_elapsed // 25920
    if (3 * (days + 1)) % 7 < 3:
        return days + 1
    return days


def _year_length_correction(year: int) -> int:
    ny0 = _elapsed_days(year - 1)
    ny1 = _elapsed_days(year)
    ny2 = _elapsed_days(year + 1)
    if ny2 - ny1 == 356:
        return 2
    if ny1 - ny0 == 382:
        return 1
    return 0


def hebrew_new_year(year: int) -> int:
    return HEBREW_EPOCH + _elapsed_days(year) + _year_length_correction(year)


def days_in_hebrew_year(year: int) -> int:
    return hebrew_new_year(year + 1) - hebrew_new_year(year)


def _long_marheshvan(year: int) -> bool:
    return days_in_hebrew_year(year) in (355, 385)


def _short_kislev(year: int) -> bool:
    return days_in_hebrew_year(year) in (353, 383)


def hebrew_month_length(year: int, month: int) -> int:
    """Length of a month given in biblical numbering."""

    if month in (IYYAR, TAMMUZ, ELUL, TEVET, ADAR_II):
        return 29
    if month == ADAR and not is_hebrew_leap_year(year):
        return 29
    if month == MARHESHVAN and not _long_marheshvan(year):
        return 29
    if month == KISLEV and _short_kislev(year):
        return 29
    return 30


def fixed_from_hebrew(year: int, month: int, day: int) -> int:
    result = hebrew_new_year(year) + day - 1
    if month < TISHREI:
        for m in range(TISHREI, last_month_of_year(year) + 1):
            result += hebrew_month_length(year, m)
        for m in range(NISAN, month):
            result += hebrew_month_length(year, m)
    else:
        for m in range(TISHREI, month):
            result += hebrew_month_length(year, m)
    return result


def hebrew_from_fixed(fixed: int) -> Tuple[int, int, int]:
    """``(year, biblical month, day)`` for a fixed day number."""

    approx = (fixed - HEBREW_EPOCH) * 98496 // 35975351 + 1
    year = max(y for y in (approx - 1, approx, approx + 1) if hebrew_new_year(y) <= fixed)
    month = TISHREI if fixed < fixed_from_hebrew(year, NISAN, 1) else NISAN
    while fixed > fixed_from_hebrew(year, month, hebrew_month_length(year, month)):
        month += 1
    day = fixed - fixed_from_hebrew(year, month, 1) + 1
    return year, month, day


def civil_month(month: int, year: int) -> int:
    """Biblical month number to civil numbering (Tishrei = 1)."""

    if month >= TISHREI:
        return month - 6
    return month + (7 if is_hebrew_leap_year(year) else 6)


def biblical_month(civil: int, year: int) -> int:
    leap = is_hebrew_leap_year(year)
    if not 1 <= civil <= (13 if leap else 12):
        raise CalculationInputError([f"Hebrew month {civil} does not exist in year {year}"])
    if civil <= (7 if leap else 6):
        return civil + 6
    return civil - (7 if leap else 6)


def month_name(month: int, year: int) -> str:
    if month == ADAR and is_hebrew_leap_year(year):
        return "Adar I"
    return MONTH_NAMES[month]


def hebrew_date_parts(day: date) -> Tuple[int, int, int]:
    return hebrew_from_fixed(day.toordinal())


def gregorian_to_hebrew(day: date) -> HebrewDate:
    year, month, mday = hebrew_date_parts(day)
    return HebrewDate(
        year=year,
        month=civil_month(month, year),
        day=mday,
        month_name=month_name(month, year),
        is_leap_year=is_hebrew_leap_year(year),
    )


def hebrew_to_gregorian(year: int, month: int, day: int) -> date:
    """Gregorian date of a Hebrew date given with civil month numbering."""

    biblical = biblical_month(month, year)
    if not 1 <= day <= hebrew_month_length(year, biblical):
        raise CalculationInputError([f"Day {day} does not exist in {month_name(biblical, year)} {year}"])
    return date.fromordinal(fixed_from_hebrew(year, biblical, day))


def is_shabbat(day: date) -> bool:
    return day.weekday() == 5
