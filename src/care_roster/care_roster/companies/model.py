from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..core.constants import DEFAULT_OVERTIME_MULTIPLIER, DEFAULT_WEEKLY_HOURS_THRESHOLD


@dataclass(frozen=True)
class CompanyConfig:
    """Pay settings owned by the company-settings collaborator; read-only here."""

    company_id: int
    overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER
    weekly_hours_threshold: Decimal = DEFAULT_WEEKLY_HOURS_THRESHOLD

    def __post_init__(self):
        if self.overtime_multiplier < 1:
            raise ValueError("overtime_multiplier must be >= 1")
        if self.weekly_hours_threshold < 0:
            raise ValueError("weekly_hours_threshold cannot be negative")
