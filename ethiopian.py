"""
ethiopian.py
Ethiopian <-> Gregorian calendar conversion, leap years and month names.

Ethiopian dates are handled as "YYYY-MM-DD" strings. Months 1-12 have 30 days and
month 13 (Pagume) has 5 days, or 6 in a leap year. Conversion anchors on the
Gregorian date of Meskerem 1 and adds a day offset to it. This is exact while
the Gregorian-Julian gap stays at 13 days, i.e. for Ethiopian years 1893-2092
(Gregorian 1900-09-11 to 2100-09-11).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from errors import DateOutOfRange, InvalidFormat, MissingInput

FIRST_YEAR = 1893
LAST_YEAR = 2092

# Ethiopian month names
ETHIOPIAN_MONTHS = [
    "መስከረም",  # 1 - Meskerem
    "ጥቅምት",  # 2 - Tikimt
    "ህዳር",  # 3 - Hidar
    "ታህሳስ",  # 4 - Tahsas
    "ጥር",  # 5 - Tir
    "የካቲት",  # 6 - Yekatit
    "መጋቢት",  # 7 - Megabit
    "ሚያዝያ",  # 8 - Miyazya
    "ግንቦት",  # 9 - Ginbot
    "ሰኔ",  # 10 - Sene
    "ሐምሌ",  # 11 - Hamle
    "ነሐሴ",  # 12 - Nehase
    "ጳጉሜ",  # 13 - Pagume
]

SECONDS_PER_DAY = 24 * 60 * 60


def is_ethiopian_leap_year(year: int) -> bool:
    """Leap years are the ones whose Pagume has 6 days (the year before a Gregorian leap year)."""
    return year % 4 == 3


def pagume_days(year: int) -> int:
    return 6 if is_ethiopian_leap_year(year) else 5


def ethiopian_month_name(month: int) -> str:
    if not 1 <= month <= 13:
        raise InvalidFormat(f"Ethiopian month must be 1-13, got {month}")
    return ETHIOPIAN_MONTHS[month - 1]


@dataclass(frozen=True)
class EthiopianDate:
    year: int
    month: int  # 1-13, 13 = Pagume
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 13:
            raise InvalidFormat(f"Ethiopian month must be 1-13, got {self.month}")
        max_day = pagume_days(self.year) if self.month == 13 else 30
        if not 1 <= self.day <= max_day:
            raise InvalidFormat(
                f"Day {self.day} out of range for Ethiopian month {self.month} of {self.year} (1-{max_day})"
            )

    def isoformat(self) -> str:
        return f"{self.year}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()


def _split_date(date_string: str | None) -> tuple[int, int, int]:
    if date_string is None or not str(date_string).strip():
        raise MissingInput("Missing Ethiopian date")
    parts = [p.strip() for p in str(date_string).strip().split("-")]
    # ASCII digits only; other scripts' digits are not accepted
    if len(parts) != 3 or not all(p.isascii() and p.isdecimal() for p in parts):
        raise InvalidFormat(f"Invalid date format {date_string!r}, expected YYYY-MM-DD")
    year, month, day = (int(p) for p in parts)
    return year, month, day


def parse_ethiopian_date(date_string: str | None) -> EthiopianDate:
    year, month, day = _split_date(date_string)
    return EthiopianDate(year, month, day)


def _check_year(year: int) -> None:
    if not FIRST_YEAR <= year <= LAST_YEAR:
        raise DateOutOfRange(f"Ethiopian year {year} outside supported range {FIRST_YEAR}-{LAST_YEAR}")


def _new_year(year: int) -> date:
    """Gregorian date of Meskerem 1 of Ethiopian ``year``."""
    # Sept 12 right after a 6-day Pagume; same as "following Gregorian year is leap" in range.
    day = 12 if is_ethiopian_leap_year(year - 1) else 11
    return date(year + 7, 9, day)


MIN_GREGORIAN = _new_year(FIRST_YEAR)
MAX_GREGORIAN = _new_year(LAST_YEAR) + timedelta(days=359 + pagume_days(LAST_YEAR))


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def ethiopian_to_gregorian(date_string: str | None) -> date:
    """
    Convert an Ethiopian "YYYY-MM-DD" date to a Gregorian date.
    Raises MissingInput, InvalidFormat or DateOutOfRange.
    """
    eth = parse_ethiopian_date(date_string)
    _check_year(eth.year)
    offset = (eth.month - 1) * 30 + (eth.day - 1)
    return _new_year(eth.year) + timedelta(days=offset)


def gregorian_to_ethiopian(value: date | datetime) -> str:
    """Convert a Gregorian date (time of day ignored) to an Ethiopian "YYYY-MM-DD" string."""
    d = _as_date(value)
    if not MIN_GREGORIAN <= d <= MAX_GREGORIAN:
        raise DateOutOfRange(f"Gregorian date {d.isoformat()} outside supported range")

    year = d.year - 7
    if year > LAST_YEAR or d < _new_year(year):
        year -= 1
    offset = (d - _new_year(year)).days

    month = min(offset // 30 + 1, 13)
    day = offset - (month - 1) * 30 + 1
    if month == 13:
        day = min(day, pagume_days(year))
    return EthiopianDate(year, month, day).isoformat()


def ethiopian_to_iso(date_string: str | None) -> str:
    return ethiopian_to_gregorian(date_string).isoformat()


def today_ethiopian(clock) -> str:
    """Today's Ethiopian date according to ``clock`` (anything with a ``now()``)."""
    return gregorian_to_ethiopian(clock.now())


def format_ethiopian_date(date_string: str | None) -> str:
    """
    "2016-01-05" -> "2016-መስከረም-05". Display only: never raises.
    Returns "N/A" for missing input and the input unchanged when it can't be parsed.
    """
    if not date_string:
        return "N/A"
    date_only = str(date_string).split("T")[0]
    parts = date_only.split("-")
    if len(parts) != 3:
        return date_string
    try:
        month = int(parts[1])
    except ValueError:
        return date_string
    if not 1 <= month <= 13:
        return date_string
    return f"{parts[0]}-{ETHIOPIAN_MONTHS[month - 1]}-{parts[2]}"


def add_months_to_ethiopian_date(date_string: str | None, months: int) -> str:
    """
    Add whole months to the month field, rolling past month 12 into the next year.
    The day is kept as is (30-days-per-month convention), not clamped.
    """
    if months < 0:
        raise ValueError("months must be >= 0")
    year, month, day = _split_date(date_string)
    if not 1 <= month <= 13:
        raise InvalidFormat(f"Ethiopian month must be 1-13, got {month}")

    month += months
    while month > 12:
        month -= 12
        year += 1
    return f"{year}-{month:02d}-{day:02d}"


def ceil_days(delta: timedelta) -> int:
    """Whole days in ``delta``, rounding any fractional remainder up."""
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def days_between_ethiopian_dates(start: str | None, end: str | None) -> int:
    """Days from ``start`` to ``end`` (negative when start is later)."""
    start_greg = ethiopian_to_gregorian(start)
    end_greg = ethiopian_to_gregorian(end)
    return ceil_days(end_greg - start_greg)
