from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_WORK_START
from .database.connection import DBConfig, DatabaseConnection
from .employees.directory import EmployeeDirectory
from .employees.http_directory import HttpEmployeeDirectory
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    directory: EmployeeDirectory

    leave_repo: MySQLLeaveRepository
    attendance_repo: MySQLAttendanceRepository
    payroll_repo: MySQLPayrollRepository

    leave_service: LeaveService
    attendance_service: AttendanceService
    payroll_service: PayrollService


def build_container(
    *,
    db_config: dict,
    employee_service_url: str,
    employee_service_timeout: float = 5.0,
    employee_service_token: Optional[str] = None,
    work_start: time = DEFAULT_WORK_START,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    directory: Optional[EmployeeDirectory] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    directory = directory or HttpEmployeeDirectory(
        employee_service_url,
        timeout=employee_service_timeout,
        auth_token=employee_service_token,
    )

    leave_repo = MySQLLeaveRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)

    leave_service = LeaveService(leave_repo, directory)
    attendance_service = AttendanceService(
        attendance_repo,
        directory,
        strategy_factory=AttendanceStrategyFactory(),
        work_start=work_start,
        grace_minutes=grace_minutes,
    )
    payroll_service = PayrollService(payroll_repo, attendance_repo, directory)

    return Container(
        conn=conn,
        directory=directory,
        leave_repo=leave_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        leave_service=leave_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
    )
