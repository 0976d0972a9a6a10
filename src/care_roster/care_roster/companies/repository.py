from __future__ import annotations

from typing import Optional, Protocol

from .model import CompanyConfig


class CompanySettingsProvider(Protocol):
    """Read-only view of per-company pay configuration."""

    def get(self, company_id: int) -> Optional[CompanyConfig]:
        raise NotImplementedError
