from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from care_roster.core.enums import OvertimeSplitMode
from care_roster.payroll.calculator.base import WorkedHours
from care_roster.payroll.calculator.factory import split_strategy_for
from care_roster.payroll.calculator.pay import compute, quantize_money, split_hours
from care_roster.payroll.calculator.period_split import PeriodOvertimeSplit
from care_roster.payroll.calculator.weekly_split import WeeklyOvertimeSplit


def test_compute_reference_figures():
    pay = compute(Decimal("12.50"), Decimal(35), Decimal(5), Decimal(0), Decimal(0), Decimal("1.5"))

    assert pay.regular_pay == Decimal("437.50")
    assert pay.overtime_pay == Decimal("93.75")
    assert pay.net_pay == Decimal("531.25")


def test_compute_net_includes_bonuses_and_deductions():
    pay = compute(Decimal("10"), Decimal(8), Decimal(0), Decimal("20"), Decimal("5.25"), Decimal("1.5"))

    assert pay.net_pay == pay.regular_pay + pay.overtime_pay + Decimal("20") - Decimal("5.25")
    assert pay.net_pay == Decimal("94.75")


def test_compute_refuses_floats():
    with pytest.raises(TypeError):
        compute(12.5, Decimal(35), Decimal(5), Decimal(0), Decimal(0), Decimal("1.5"))


def test_repeated_recompute_does_not_drift():
    pay = compute(Decimal("12.37"), Decimal("0.333333"), Decimal(0), Decimal(0), Decimal(0), Decimal("1.5"))
    again = compute(Decimal("12.37"), Decimal("0.333333"), Decimal(0), Decimal(0), Decimal(0), Decimal("1.5"))

    assert pay == again
    assert pay.regular_pay == Decimal("4.12332921")


@pytest.mark.parametrize(
    "total,threshold,regular,overtime",
    [
        (Decimal(45), Decimal(40), Decimal(40), Decimal(5)),
        (Decimal(40), Decimal(40), Decimal(40), Decimal(0)),
        (Decimal("12.5"), Decimal(40), Decimal("12.5"), Decimal(0)),
        (Decimal(3), Decimal(0), Decimal(0), Decimal(3)),
    ],
)
def test_split_hours(total, threshold, regular, overtime):
    split = split_hours(total, threshold)

    assert (split.regular_hours, split.overtime_hours) == (regular, overtime)
    assert split.total_hours == total


def test_quantize_money_rounds_half_up_for_display():
    assert quantize_money(Decimal("4.125")) == Decimal("4.13")
    assert quantize_money(Decimal("531.25")) == Decimal("531.25")


def _two_weeks_of(hours_per_day: str, days: int = 10):
    start = datetime(2025, 3, 3, 9)  # Monday
    return [WorkedHours(start + timedelta(days=d + (2 if d >= 5 else 0)), Decimal(hours_per_day)) for d in range(days)]


def test_period_split_applies_threshold_to_whole_period():
    worked = _two_weeks_of("9")  # 45 h in each ISO week

    split = PeriodOvertimeSplit().split(worked, Decimal(40))

    assert split.regular_hours == Decimal(40)
    assert split.overtime_hours == Decimal(50)


def test_weekly_split_applies_threshold_per_iso_week():
    worked = _two_weeks_of("9")

    split = WeeklyOvertimeSplit().split(worked, Decimal(40))

    assert split.regular_hours == Decimal(80)
    assert split.overtime_hours == Decimal(10)


def test_weekly_split_matches_period_split_within_one_week():
    worked = _two_weeks_of("9", days=5)

    assert WeeklyOvertimeSplit().split(worked, Decimal(40)) == PeriodOvertimeSplit().split(worked, Decimal(40))


def test_factory_picks_strategy_from_setting():
    assert isinstance(split_strategy_for("weekly"), WeeklyOvertimeSplit)
    assert isinstance(split_strategy_for(OvertimeSplitMode.PERIOD), PeriodOvertimeSplit)
    with pytest.raises(ValueError):
        split_strategy_for("monthly")
