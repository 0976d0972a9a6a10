"""Example: drive the services directly (no Flask, no MySQL).

Schedules two shifts for one carer, clocks and approves attendance, then
generates and pays a payroll for the week.
"""

from datetime import datetime
from decimal import Decimal

from care_roster.companies.model import CompanyConfig
from care_roster.container import build_in_memory_container
from care_roster.core.enums import PayrollStatus, Role
from care_roster.core.exceptions import ShiftConflictError
from care_roster.core.policy import Actor
from care_roster.logging_config import setup_logging
from care_roster.payroll.calculator.pay import quantize_money
from care_roster.users.model import Worker


def main():
    setup_logging("INFO")
    container = build_in_memory_container(
        companies=[CompanyConfig(company_id=1)],
        workers=[
            Worker(user_id=1, company_id=1, role=Role.MANAGER),
            Worker(user_id=2, company_id=1, role=Role.ACCOUNTANT),
            Worker(user_id=3, company_id=1, role=Role.EMPLOYEE, hourly_rate=Decimal("12.50")),
        ],
    )
    manager = Actor(user_id=1, role=Role.MANAGER, company_id=1)
    accountant = Actor(user_id=2, role=Role.ACCOUNTANT, company_id=1)
    carer = Actor(user_id=3, role=Role.EMPLOYEE, company_id=1)

    roster = container.roster_service.create(
        manager, title="Week 10", start_date=datetime(2025, 3, 3), end_date=datetime(2025, 3, 9, 23, 59)
    )
    morning = container.shift_service.create(
        manager,
        roster_id=roster.roster_id,
        start_time=datetime(2025, 3, 3, 10),
        end_time=datetime(2025, 3, 3, 14),
        assigned_user_id=3,
    )
    try:
        container.shift_service.create(
            manager,
            roster_id=roster.roster_id,
            start_time=datetime(2025, 3, 3, 13),
            end_time=datetime(2025, 3, 3, 16),
            assigned_user_id=3,
        )
    except ShiftConflictError as exc:
        print("rejected:", exc, exc.conflicting_shift_ids)

    container.roster_service.publish(manager, roster.roster_id)

    record = container.attendance_service.clock_in(carer, shift_id=morning.shift_id, clock_in=datetime(2025, 3, 3, 10))
    record = container.attendance_service.clock_out(
        carer, record.attendance_id, clock_out=datetime(2025, 3, 3, 14), break_duration=Decimal("0.5")
    )
    container.attendance_service.approve(manager, record.attendance_id)

    payroll = container.payroll_service.generate(
        accountant, user_id=3, period_start=datetime(2025, 3, 3), period_end=datetime(2025, 3, 9, 23, 59, 59)
    )
    payroll = container.payroll_service.approve(manager, payroll.payroll_id)
    payroll = container.payroll_service.update(accountant, payroll.payroll_id, status=PayrollStatus.PAID)
    print("net pay:", quantize_money(payroll.net_pay), payroll.status.value)


if __name__ == "__main__":
    main()
