from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.pagination import Page
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công, tối đa một bản ghi/nhân viên/ngày."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    is_remote: bool = False
    location: Optional[str] = None
    notes: Optional[str] = None
    hours_worked: Optional[float] = None


@dataclass(frozen=True)
class AttendanceUpdate:
    """HR correction of a record; ``None`` means "leave unchanged"."""

    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    is_remote: Optional[bool] = None


@dataclass(frozen=True)
class AttendanceSummary:
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    total_hours: float = 0.0


@dataclass(frozen=True)
class EmployeeAttendanceStats:
    employee_id: int
    present_days: int
    absent_days: int
    late_days: int
    total_hours: float
    attendance_rate: float


@dataclass(frozen=True)
class AttendanceReport:
    """Read-model phục vụ báo cáo chuyên cần theo khoảng ngày."""

    start_date: date
    end_date: date
    total_employees: int
    average_attendance: float
    total_working_days: int
    employee_stats: Sequence[EmployeeAttendanceStats]


@dataclass(frozen=True)
class EmployeeAttendance:
    page: Page[AttendanceRecord]
    summary: AttendanceSummary
