"""Pure pay arithmetic. Every quantity is a ``Decimal``; floats are refused."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import MONEY_DISPLAY_QUANTUM
from .base import HoursSplit, PayAmounts


def _require_decimal(value: object, name: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    raise TypeError(f"{name} must be Decimal or int, got {type(value).__name__}")


def compute(
    hourly_rate: Decimal,
    regular_hours: Decimal,
    overtime_hours: Decimal,
    bonuses: Decimal,
    deductions: Decimal,
    overtime_multiplier: Decimal,
) -> PayAmounts:
    rate = _require_decimal(hourly_rate, "hourly_rate")
    regular = _require_decimal(regular_hours, "regular_hours")
    overtime = _require_decimal(overtime_hours, "overtime_hours")
    bonus = _require_decimal(bonuses, "bonuses")
    deduction = _require_decimal(deductions, "deductions")
    multiplier = _require_decimal(overtime_multiplier, "overtime_multiplier")

    regular_pay = regular * rate
    overtime_pay = overtime * (rate * multiplier)
    net_pay = regular_pay + overtime_pay + bonus - deduction
    return PayAmounts(regular_pay=regular_pay, overtime_pay=overtime_pay, net_pay=net_pay)


def split_hours(total_hours: Decimal, weekly_hours_threshold: Decimal) -> HoursSplit:
    total = _require_decimal(total_hours, "total_hours")
    threshold = _require_decimal(weekly_hours_threshold, "weekly_hours_threshold")
    return HoursSplit(
        regular_hours=min(total, threshold),
        overtime_hours=max(Decimal(0), total - threshold),
    )


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents for display; stored amounts keep full precision."""
    return _require_decimal(value, "value").quantize(MONEY_DISPLAY_QUANTUM, rounding=ROUND_HALF_UP)
