from __future__ import annotations

from ...core.enums import OvertimeSplitMode
from .base import OvertimeSplitStrategy
from .period_split import PeriodOvertimeSplit
from .weekly_split import WeeklyOvertimeSplit


def split_strategy_for(mode: OvertimeSplitMode | str) -> OvertimeSplitStrategy:
    """Factory Pattern: pick the overtime split from configuration."""

    if OvertimeSplitMode(mode) == OvertimeSplitMode.WEEKLY:
        return WeeklyOvertimeSplit()
    return PeriodOvertimeSplit()
