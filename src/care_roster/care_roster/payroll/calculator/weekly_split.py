from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Sequence

from ...common.datetime_utils import iso_week
from .base import HoursSplit, OvertimeSplitStrategy, WorkedHours
from .pay import split_hours


class WeeklyOvertimeSplit(OvertimeSplitStrategy):
    """Threshold applied per ISO calendar week of clock-in, then summed.

    A shift that crosses midnight on Sunday counts toward the week it started in.
    """

    def split(self, worked: Sequence[WorkedHours], weekly_hours_threshold: Decimal) -> HoursSplit:
        weeks: dict[tuple[int, int], Decimal] = defaultdict(Decimal)
        for w in worked:
            weeks[iso_week(w.clock_in)] += w.hours

        regular = Decimal(0)
        overtime = Decimal(0)
        for total in weeks.values():
            part = split_hours(total, weekly_hours_threshold)
            regular += part.regular_hours
            overtime += part.overtime_hours
        return HoursSplit(regular_hours=regular, overtime_hours=overtime)
