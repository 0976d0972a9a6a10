from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from care_roster.common.datetime_utils import hours_between, iso_week, parse_instant, parse_period_bound
from care_roster.common.validators import to_decimal
from care_roster.core.exceptions import ValidationError


def test_parse_instant_normalises_to_naive_utc():
    assert parse_instant("2025-03-03T10:00:00Z", "t") == datetime(2025, 3, 3, 10)
    assert parse_instant("2025-03-03T12:00:00+02:00", "t") == datetime(2025, 3, 3, 10)
    assert parse_instant(datetime(2025, 3, 3, 10, tzinfo=timezone(timedelta(hours=-5))), "t") == datetime(2025, 3, 3, 15)


@pytest.mark.parametrize("value", [None, "", "yesterday", 1700000000])
def test_parse_instant_rejects_garbage(value):
    with pytest.raises(ValidationError):
        parse_instant(value, "startTime")


def test_bare_date_period_bounds_cover_the_whole_day():
    assert parse_period_bound("2025-03-31", "end", end=True) == datetime(2025, 3, 31, 23, 59, 59, 999999)
    assert parse_period_bound(date(2025, 3, 1), "start", end=False) == datetime(2025, 3, 1)
    assert parse_period_bound("2025-03-31T12:00:00", "end", end=True) == datetime(2025, 3, 31, 12)


def test_hours_between_is_exact_to_the_microsecond_quantum():
    start = datetime(2025, 3, 3, 9)

    assert hours_between(start, datetime(2025, 3, 3, 17)) == Decimal(8)
    assert hours_between(start, start + timedelta(minutes=45)) == Decimal("0.75")
    assert hours_between(start, start + timedelta(days=1, seconds=1)) == Decimal("24.000278")


def test_iso_week_crosses_year_boundary():
    assert iso_week(datetime(2024, 12, 30)) == (2025, 1)


def test_to_decimal_refuses_floats_and_accepts_strings():
    assert to_decimal("12.50", "rate") == Decimal("12.50")
    assert to_decimal(3, "rate") == Decimal(3)
    with pytest.raises(ValidationError):
        to_decimal(12.5, "rate")
    with pytest.raises(ValidationError):
        to_decimal("NaN", "rate")
