from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from ..common.datetime_utils import inclusive_days
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReport, AttendanceSummary, EmployeeAttendanceStats


def summarize(records: Iterable[AttendanceRecord]) -> AttendanceSummary:
    """Late days count as present too; half-day and holiday only add to total_days."""
    total = present = absent = late = 0
    hours = 0.0
    for r in records:
        total += 1
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.LATE:
            present += 1
            late += 1
        elif r.status == AttendanceStatus.ABSENT:
            absent += 1
        if r.hours_worked:
            hours += r.hours_worked
    return AttendanceSummary(
        total_days=total,
        present_days=present,
        absent_days=absent,
        late_days=late,
        total_hours=hours,
    )


def build_report(records: Iterable[AttendanceRecord], *, start_date: date, end_date: date) -> AttendanceReport:
    # Working days are the calendar days of the range, both ends included.
    working_days = inclusive_days(start_date, end_date)

    by_employee: dict[int, list[AttendanceRecord]] = defaultdict(list)
    for r in records:
        by_employee[r.employee_id].append(r)

    stats = []
    for employee_id in sorted(by_employee):
        s = summarize(by_employee[employee_id])
        stats.append(
            EmployeeAttendanceStats(
                employee_id=employee_id,
                present_days=s.present_days,
                absent_days=s.absent_days,
                late_days=s.late_days,
                total_hours=s.total_hours,
                attendance_rate=s.present_days / working_days * 100,
            )
        )

    average = sum(s.attendance_rate for s in stats) / len(stats) if stats else 0.0
    return AttendanceReport(
        start_date=start_date,
        end_date=end_date,
        total_employees=len(stats),
        average_attendance=average,
        total_working_days=working_days,
        employee_stats=stats,
    )
