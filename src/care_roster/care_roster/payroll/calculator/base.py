from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence


@dataclass(frozen=True)
class PayAmounts:
    regular_pay: Decimal
    overtime_pay: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class HoursSplit:
    regular_hours: Decimal
    overtime_hours: Decimal

    @property
    def total_hours(self) -> Decimal:
        return self.regular_hours + self.overtime_hours


@dataclass(frozen=True)
class WorkedHours:
    """One approved attendance as seen by payroll: when it started and how long it counts."""

    clock_in: datetime
    hours: Decimal


class OvertimeSplitStrategy(ABC):
    """Strategy Pattern: how approved hours in a period divide into regular and overtime."""

    @abstractmethod
    def split(self, worked: Sequence[WorkedHours], weekly_hours_threshold: Decimal) -> HoursSplit:
        raise NotImplementedError
