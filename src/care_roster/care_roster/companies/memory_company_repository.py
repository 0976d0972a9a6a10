from __future__ import annotations

from typing import Iterable, Optional

from .model import CompanyConfig
from .repository import CompanySettingsProvider


class InMemoryCompanySettingsProvider(CompanySettingsProvider):
    def __init__(self, companies: Iterable[CompanyConfig] = ()):
        self._by_id = {c.company_id: c for c in companies}

    def get(self, company_id: int) -> Optional[CompanyConfig]:
        return self._by_id.get(int(company_id))

    def put(self, config: CompanyConfig) -> None:
        self._by_id[config.company_id] = config
