from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .companies.memory_company_repository import InMemoryCompanySettingsProvider
from .companies.model import CompanyConfig
from .companies.mysql_company_repository import MySQLCompanySettingsProvider
from .companies.repository import CompanySettingsProvider
from .core.enums import OvertimeSplitMode
from .database.connection import DBConfig, DatabaseConnection
from .payroll.calculator.factory import split_strategy_for
from .payroll.memory_payroll_repository import InMemoryPayrollRepository
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollService
from .rosters.memory_roster_repository import InMemoryRosterRepository
from .rosters.mysql_roster_repository import MySQLRosterRepository
from .rosters.repository import RosterRepository
from .rosters.service import RosterService
from .shifts.memory_shift_repository import InMemoryShiftRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .users.memory_user_repository import InMemoryWorkerDirectory
from .users.model import Worker
from .users.mysql_user_repository import MySQLWorkerDirectory
from .users.repository import WorkerDirectory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    workers_repo: WorkerDirectory
    companies_repo: CompanySettingsProvider
    rosters_repo: RosterRepository
    shifts_repo: ShiftRepository
    attendance_repo: AttendanceRepository
    payroll_repo: PayrollRepository

    roster_service: RosterService
    shift_service: ShiftService
    attendance_service: AttendanceService
    payroll_service: PayrollService


def _wire(
    *,
    conn: Optional[DatabaseConnection],
    workers_repo: WorkerDirectory,
    companies_repo: CompanySettingsProvider,
    rosters_repo: RosterRepository,
    shifts_repo: ShiftRepository,
    attendance_repo: AttendanceRepository,
    payroll_repo: PayrollRepository,
    overtime_split: OvertimeSplitMode | str,
    payroll_lock_finalized: bool,
) -> Container:
    return Container(
        conn=conn,
        workers_repo=workers_repo,
        companies_repo=companies_repo,
        rosters_repo=rosters_repo,
        shifts_repo=shifts_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        roster_service=RosterService(rosters_repo, shifts_repo),
        shift_service=ShiftService(shifts_repo, rosters_repo, workers_repo, attendance_repo),
        attendance_service=AttendanceService(attendance_repo, shifts_repo, rosters_repo, workers_repo),
        payroll_service=PayrollService(
            payroll_repo,
            attendance_repo,
            workers_repo,
            companies_repo,
            split_strategy=split_strategy_for(overtime_split),
            lock_finalized=payroll_lock_finalized,
        ),
    )


def build_container(
    *,
    db_config: dict,
    overtime_split: OvertimeSplitMode | str = OvertimeSplitMode.PERIOD,
    payroll_lock_finalized: bool = False,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return _wire(
        conn=conn,
        workers_repo=MySQLWorkerDirectory(conn),
        companies_repo=MySQLCompanySettingsProvider(conn),
        rosters_repo=MySQLRosterRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        overtime_split=overtime_split,
        payroll_lock_finalized=payroll_lock_finalized,
    )


def build_in_memory_container(
    *,
    workers: Iterable[Worker] = (),
    companies: Iterable[CompanyConfig] = (),
    overtime_split: OvertimeSplitMode | str = OvertimeSplitMode.PERIOD,
    payroll_lock_finalized: bool = False,
) -> Container:
    """Same services over process-local stores; used by tests and demos."""

    return _wire(
        conn=None,
        workers_repo=InMemoryWorkerDirectory(workers),
        companies_repo=InMemoryCompanySettingsProvider(companies),
        rosters_repo=InMemoryRosterRepository(),
        shifts_repo=InMemoryShiftRepository(),
        attendance_repo=InMemoryAttendanceRepository(),
        payroll_repo=InMemoryPayrollRepository(),
        overtime_split=overtime_split,
        payroll_lock_finalized=payroll_lock_finalized,
    )
