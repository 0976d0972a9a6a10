from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Worker:
    """Domain entity: a company member as seen by scheduling and payroll.

    Note: Owned by the user-management collaborator; the core only reads it.
    """

    user_id: int
    company_id: Optional[int]
    role: Role
    hourly_rate: Decimal = Decimal(0)
    full_name: str = ""
    is_active: bool = True
