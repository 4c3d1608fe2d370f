from datetime import date, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from errors import DateOutOfRange, InvalidFormat, MissingInput
from ethiopian import (
    MAX_GREGORIAN,
    MIN_GREGORIAN,
    EthiopianDate,
    add_months_to_ethiopian_date,
    ceil_days,
    days_between_ethiopian_dates,
    ethiopian_month_name,
    ethiopian_to_gregorian,
    ethiopian_to_iso,
    format_ethiopian_date,
    gregorian_to_ethiopian,
    is_ethiopian_leap_year,
    pagume_days,
    parse_ethiopian_date,
    today_ethiopian,
)
from membership import FixedClock

supported_days = st.dates(min_value=MIN_GREGORIAN, max_value=MAX_GREGORIAN)
ethiopian_dates = supported_days.map(gregorian_to_ethiopian)


def _jdn_to_gregorian(year: int, month: int, day: int) -> date:
    """Reference conversion through the Julian day number."""
    jdn = 1724220 + 365 * (year - 1) + year // 4 + 30 * (month - 1) + day
    return date.fromordinal(jdn - 1721425)


# ---------- leap years ----------

@pytest.mark.parametrize("year", [1999, 2003, 2011, 2015, 2019, 2023])
def test_leap_years(year):
    assert is_ethiopian_leap_year(year)
    assert pagume_days(year) == 6


@pytest.mark.parametrize("year", [2012, 2013, 2014, 2016, 2017, 2020])
def test_common_years(year):
    assert not is_ethiopian_leap_year(year)
    assert pagume_days(year) == 5


def test_leap_rule_is_not_gregorian_divisibility():
    assert is_ethiopian_leap_year(2015)
    assert not is_ethiopian_leap_year(2016)


# ---------- conversion ----------

@pytest.mark.parametrize(
    "ethiopian,gregorian",
    [
        ("2016-01-01", date(2023, 9, 12)),  # new year after a leap year
        ("2017-01-01", date(2024, 9, 11)),
        ("2012-01-01", date(2019, 9, 12)),
        ("2015-13-06", date(2023, 9, 11)),  # sixth Pagume day
        ("2016-13-05", date(2024, 9, 10)),
        ("2016-04-28", date(2024, 1, 7)),
        ("2017-04-29", date(2025, 1, 7)),
        ("2017-05-11", date(2025, 1, 19)),
        ("2016-06-23", date(2024, 3, 2)),  # crosses Feb 29
        ("1893-01-01", date(1900, 9, 11)),
        ("2092-13-05", date(2100, 9, 11)),
    ],
)
def test_known_dates(ethiopian, gregorian):
    assert ethiopian_to_gregorian(ethiopian) == gregorian
    assert gregorian_to_ethiopian(gregorian) == ethiopian


def test_round_trip_every_day_over_twenty_years():
    checked = 0
    for year in range(2005, 2026):
        for month in range(1, 14):
            last = pagume_days(year) if month == 13 else 30
            for day in range(1, last + 1):
                s = f"{year}-{month:02d}-{day:02d}"
                assert gregorian_to_ethiopian(ethiopian_to_gregorian(s)) == s
                checked += 1
    assert checked == 21 * 365 + 5  # 2007, 2011, 2015, 2019, 2023 are leap


def test_matches_julian_day_number_over_supported_range():
    d = MIN_GREGORIAN
    while d <= MAX_GREGORIAN:
        eth = parse_ethiopian_date(gregorian_to_ethiopian(d))
        assert _jdn_to_gregorian(eth.year, eth.month, eth.day) == d
        assert ethiopian_to_gregorian(eth.isoformat()) == d
        d += timedelta(days=1)


def test_consecutive_gregorian_days_are_consecutive_ethiopian_days():
    # Pagume of a leap year rolls over into Meskerem
    assert gregorian_to_ethiopian(date(2023, 9, 10)) == "2015-13-05"
    assert gregorian_to_ethiopian(date(2023, 9, 11)) == "2015-13-06"
    assert gregorian_to_ethiopian(date(2023, 9, 12)) == "2016-01-01"


def test_gregorian_to_ethiopian_ignores_time_of_day():
    assert gregorian_to_ethiopian(datetime(2023, 9, 12, 23, 59)) == "2016-01-01"


def test_ethiopian_to_iso():
    assert ethiopian_to_iso("2016-01-01") == "2023-09-12"


def test_today_ethiopian_uses_clock():
    assert today_ethiopian(FixedClock(date(2024, 9, 11))) == "2017-01-01"


@given(ethiopian_dates)
def test_round_trip_property(eth):
    assert gregorian_to_ethiopian(ethiopian_to_gregorian(eth)) == eth


@given(supported_days)
def test_gregorian_round_trip_property(d):
    assert ethiopian_to_gregorian(gregorian_to_ethiopian(d)) == d


# ---------- input errors ----------

@pytest.mark.parametrize("value", [None, "", "   "])
def test_missing_input(value):
    with pytest.raises(MissingInput):
        ethiopian_to_gregorian(value)


@pytest.mark.parametrize("value", ["2016-01", "2016/01/01", "abcd-01-01", "2016-01-01-01", "2016--01", "2016-01-0²", "٢٠١٦-01-01"])
def test_invalid_format(value):
    with pytest.raises(InvalidFormat):
        ethiopian_to_gregorian(value)


@pytest.mark.parametrize("value", ["2016-14-01", "2016-00-10", "2016-01-31", "2016-01-00", "2016-13-06"])
def test_out_of_range_fields_are_invalid(value):
    with pytest.raises(InvalidFormat):
        ethiopian_to_gregorian(value)


def test_pagume_sixth_day_only_in_leap_year():
    assert ethiopian_to_gregorian("2015-13-06") == date(2023, 9, 11)
    with pytest.raises(InvalidFormat):
        EthiopianDate(2016, 13, 6)


@pytest.mark.parametrize("value", ["1892-13-05", "2093-01-01"])
def test_unsupported_ethiopian_years(value):
    with pytest.raises(DateOutOfRange):
        ethiopian_to_gregorian(value)


@pytest.mark.parametrize("value", [date(1900, 9, 10), date(2100, 9, 12), date(1850, 1, 1)])
def test_unsupported_gregorian_dates(value):
    with pytest.raises(DateOutOfRange):
        gregorian_to_ethiopian(value)


# ---------- month names / formatting ----------

def test_month_names():
    assert ethiopian_month_name(1) == "መስከረም"
    assert ethiopian_month_name(12) == "ነሐሴ"
    assert ethiopian_month_name(13) == "ጳጉሜ"
    with pytest.raises(InvalidFormat):
        ethiopian_month_name(14)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "N/A"),
        ("", "N/A"),
        ("2016-01-05", "2016-መስከረም-05"),
        ("2018-03-10T00:00:00.000", "2018-ህዳር-10"),
        ("2015-13-06", "2015-ጳጉሜ-06"),
        ("not a date", "not a date"),
        ("2016-xx-05", "2016-xx-05"),
        ("2016-14-05", "2016-14-05"),
    ],
)
def test_format_ethiopian_date(value, expected):
    assert format_ethiopian_date(value) == expected


# ---------- month arithmetic ----------

@pytest.mark.parametrize(
    "start,months,expected",
    [
        ("2016-01-15", 1, "2016-02-15"),
        ("2016-11-15", 3, "2017-02-15"),
        ("2016-01-30", 1, "2016-02-30"),
        ("2016-12-01", 12, "2017-12-01"),
        ("2016-05-10", 24, "2018-05-10"),
        ("2016-05-10", 0, "2016-05-10"),
    ],
)
def test_add_months(start, months, expected):
    assert add_months_to_ethiopian_date(start, months) == expected


def test_add_months_rejects_negative_and_bad_input():
    with pytest.raises(ValueError):
        add_months_to_ethiopian_date("2016-01-01", -1)
    with pytest.raises(MissingInput):
        add_months_to_ethiopian_date(None, 1)
    with pytest.raises(InvalidFormat):
        add_months_to_ethiopian_date("2016-01", 1)


# ---------- day differences ----------

@pytest.mark.parametrize(
    "delta,days",
    [
        (timedelta(0), 0),
        (timedelta(days=3), 3),
        (timedelta(hours=2, minutes=24), 1),
        (timedelta(days=1, seconds=1), 2),
        (timedelta(days=-1, hours=12), 0),
        (timedelta(days=-2, hours=12), -1),
    ],
)
def test_ceil_days_rounds_fractions_up(delta, days):
    assert ceil_days(delta) == days


def test_days_between():
    assert days_between_ethiopian_dates("2016-01-01", "2016-02-01") == 30
    assert days_between_ethiopian_dates("2015-13-01", "2016-01-01") == 6
    assert days_between_ethiopian_dates("2016-02-01", "2016-01-01") == -30
    assert days_between_ethiopian_dates("2016-01-01", "2017-01-01") == 365
    assert days_between_ethiopian_dates("2015-01-01", "2016-01-01") == 366


@given(ethiopian_dates)
def test_days_between_identity(eth):
    assert days_between_ethiopian_dates(eth, eth) == 0


@given(ethiopian_dates, ethiopian_dates)
def test_days_between_antisymmetric(a, b):
    assert days_between_ethiopian_dates(a, b) == -days_between_ethiopian_dates(b, a)
