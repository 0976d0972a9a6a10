from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from .base import HoursSplit, OvertimeSplitStrategy, WorkedHours
from .pay import split_hours


class PeriodOvertimeSplit(OvertimeSplitStrategy):
    """Threshold applied once to the whole period's total, however many weeks it spans."""

    def split(self, worked: Sequence[WorkedHours], weekly_hours_threshold: Decimal) -> HoursSplit:
        total = sum((w.hours for w in worked), Decimal(0))
        return split_hours(total, weekly_hours_threshold)
