from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from care_roster.companies.model import CompanyConfig
from care_roster.container import build_in_memory_container
from care_roster.core.enums import Role
from care_roster.core.policy import Actor
from care_roster.users.model import Worker

COMPANY = 1
OTHER_COMPANY = 2


def make_workers():
    return [
        Worker(user_id=1, company_id=COMPANY, role=Role.ADMIN),
        Worker(user_id=2, company_id=COMPANY, role=Role.MANAGER),
        Worker(user_id=3, company_id=COMPANY, role=Role.ACCOUNTANT),
        Worker(user_id=10, company_id=COMPANY, role=Role.EMPLOYEE, hourly_rate=Decimal("12.50")),
        Worker(user_id=11, company_id=COMPANY, role=Role.EMPLOYEE, hourly_rate=Decimal("12.50")),
        Worker(user_id=12, company_id=COMPANY, role=Role.EMPLOYEE, hourly_rate=Decimal("12.50"), is_active=False),
        Worker(user_id=20, company_id=OTHER_COMPANY, role=Role.EMPLOYEE, hourly_rate=Decimal("15.00")),
        Worker(user_id=21, company_id=OTHER_COMPANY, role=Role.MANAGER),
    ]


def make_companies():
    return [
        CompanyConfig(company_id=COMPANY, overtime_multiplier=Decimal("1.5"), weekly_hours_threshold=Decimal("40")),
        CompanyConfig(company_id=OTHER_COMPANY),
    ]


@pytest.fixture
def container():
    return build_in_memory_container(workers=make_workers(), companies=make_companies())


@pytest.fixture
def admin():
    return Actor(user_id=1, role=Role.ADMIN, company_id=COMPANY)


@pytest.fixture
def manager():
    return Actor(user_id=2, role=Role.MANAGER, company_id=COMPANY)


@pytest.fixture
def accountant():
    return Actor(user_id=3, role=Role.ACCOUNTANT, company_id=COMPANY)


@pytest.fixture
def employee():
    return Actor(user_id=10, role=Role.EMPLOYEE, company_id=COMPANY)


@pytest.fixture
def other_employee():
    return Actor(user_id=11, role=Role.EMPLOYEE, company_id=COMPANY)


@pytest.fixture
def outside_manager():
    return Actor(user_id=21, role=Role.MANAGER, company_id=OTHER_COMPANY)


@pytest.fixture
def roster(container, manager):
    return container.roster_service.create(
        manager,
        title="March week 1",
        start_date=datetime(2025, 3, 3),
        end_date=datetime(2025, 3, 9, 23, 59, 59),
    )


@pytest.fixture
def make_container():
    """Factory for containers with non-default settings (split mode, payroll lock)."""

    def build(**settings):
        return build_in_memory_container(workers=make_workers(), companies=make_companies(), **settings)

    return build
