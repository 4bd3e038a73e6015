from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time

import pytest

from hr_operations.attendance.model import AttendanceUpdate
from hr_operations.attendance.service import AttendanceService
from hr_operations.core.enums import AttendanceStatus, EmployeeStatus
from hr_operations.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def svc(attendance_repo, directory, fixed_now) -> AttendanceService:
    return AttendanceService(attendance_repo, directory, clock=lambda: fixed_now)


def test_check_in_before_nine_is_present(svc, fixed_now):
    rec = svc.check_in(1, location="HQ")

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in == fixed_now
    assert rec.work_date == fixed_now.date()
    assert rec.location == "HQ"


def test_check_in_after_nine_is_late(svc):
    rec = svc.check_in(1, now=datetime(2026, 3, 2, 9, 15))

    assert rec.status == AttendanceStatus.LATE
    assert rec.notes


def test_grace_period_is_configurable(attendance_repo, directory):
    svc = AttendanceService(attendance_repo, directory, work_start=time(9, 0), grace_minutes=10)

    assert svc.check_in(1, now=datetime(2026, 3, 2, 9, 5)).status == AttendanceStatus.PRESENT


def test_second_check_in_same_day_conflicts(svc):
    svc.check_in(1, now=datetime(2026, 3, 2, 8, 30))

    with pytest.raises(ConflictError):
        svc.check_in(1, now=datetime(2026, 3, 2, 10, 0))


def test_inactive_employee_cannot_check_in(svc, directory):
    directory.employees[4] = replace(directory.employees[1], employee_id=4, status=EmployeeStatus.INACTIVE)

    with pytest.raises(AuthenticationError):
        svc.check_in(4)


def test_check_out_sets_hours_rounded_to_cents(svc):
    svc.check_in(1, now=datetime(2026, 3, 2, 9, 0))

    rec = svc.check_out(1, now=datetime(2026, 3, 2, 17, 20))

    assert rec.check_out == datetime(2026, 3, 2, 17, 20)
    assert rec.hours_worked == 8.33
    assert rec.status == AttendanceStatus.PRESENT


def test_check_out_keeps_late_status(svc):
    svc.check_in(1, now=datetime(2026, 3, 2, 9, 30))

    rec = svc.check_out(1, now=datetime(2026, 3, 2, 18, 0))

    assert rec.status == AttendanceStatus.LATE
    assert rec.hours_worked == 8.5


def test_check_out_without_record_is_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.check_out(1, now=datetime(2026, 3, 2, 17, 0))


def test_check_out_twice_conflicts(svc):
    svc.check_in(1, now=datetime(2026, 3, 2, 8, 0))
    svc.check_out(1, now=datetime(2026, 3, 2, 16, 0))

    with pytest.raises(ConflictError):
        svc.check_out(1, now=datetime(2026, 3, 2, 17, 0))


def test_check_out_before_check_in_is_invalid(svc):
    svc.check_in(1, now=datetime(2026, 3, 2, 8, 50))

    with pytest.raises(ValidationError):
        svc.check_out(1, now=datetime(2026, 3, 2, 8, 40))


def test_mark_absent_requires_hr(svc):
    with pytest.raises(AuthorizationError):
        svc.mark_absent(3, date(2026, 3, 2), actor_id=1)


def test_absent_day_can_still_be_checked_into(svc):
    absent = svc.mark_absent(1, date(2026, 3, 2), actor_id=2, reason="No show")
    assert absent.status == AttendanceStatus.ABSENT

    with pytest.raises(ValidationError):
        svc.check_out(1, now=datetime(2026, 3, 2, 12, 0))

    rec = svc.check_in(1, now=datetime(2026, 3, 2, 11, 0))
    assert rec.attendance_id == absent.attendance_id
    assert rec.status == AttendanceStatus.LATE


def test_update_attendance_recomputes_hours(svc):
    rec = svc.check_in(1, now=datetime(2026, 3, 2, 8, 0))
    svc.check_out(1, now=datetime(2026, 3, 2, 12, 0))

    with pytest.raises(AuthorizationError):
        svc.update_attendance(rec.attendance_id, AttendanceUpdate(check_out=datetime(2026, 3, 2, 17, 0)), actor_id=1)

    fixed = svc.update_attendance(
        rec.attendance_id, AttendanceUpdate(check_out=datetime(2026, 3, 2, 17, 0), notes="Forgot badge"), actor_id=2
    )
    assert fixed.hours_worked == 9.0
    assert fixed.notes == "Forgot badge"


def test_history_defaults_to_current_month_with_summary(svc, attendance_repo):
    attendance_repo.add(1, date(2026, 2, 27), hours=8.0)
    attendance_repo.add(1, date(2026, 3, 2), hours=8.0)
    attendance_repo.add(1, date(2026, 3, 3), hours=6.5, status=AttendanceStatus.LATE)
    attendance_repo.add(1, date(2026, 3, 4), hours=None, status=AttendanceStatus.ABSENT)

    result = svc.get_attendance_by_employee(1, limit=2)

    assert result.page.total == 3
    assert [r.work_date.day for r in result.page.items] == [4, 3]
    assert result.summary.present_days == 2
    assert result.summary.total_hours == pytest.approx(14.5)


def test_all_attendance_is_hr_only(svc, attendance_repo):
    attendance_repo.add(1, date(2026, 3, 2), hours=8.0)
    attendance_repo.add(3, date(2026, 3, 2), hours=8.0)
    attendance_repo.add(3, date(2026, 3, 3), hours=8.0)

    with pytest.raises(AuthorizationError):
        svc.get_all_attendance(3)

    page = svc.get_all_attendance(2, work_date=date(2026, 3, 2))
    assert page.total == 2


def test_report_for_selected_employees(svc, attendance_repo):
    for day in range(1, 6):
        attendance_repo.add(1, date(2026, 3, day), hours=8.0)
    attendance_repo.add(3, date(2026, 3, 1), hours=8.0)

    report = svc.get_attendance_report(2, start_date=date(2026, 3, 1), end_date=date(2026, 3, 10), employee_ids=[1])

    assert report.total_employees == 1
    assert report.employee_stats[0].attendance_rate == pytest.approx(50.0)


def test_report_rejects_reversed_range(svc):
    with pytest.raises(ValidationError):
        svc.get_attendance_report(2, start_date=date(2026, 3, 10), end_date=date(2026, 3, 1))


def test_today_record_uses_clock(svc, fixed_now):
    assert svc.get_today_record(1) is None

    svc.check_in(1)

    assert svc.get_today_record(1).check_in == fixed_now
    assert svc.get_today_record(1, date(2026, 3, 3)) is None


class _StaleLookup:
    """Lookup misses the row another request just inserted."""

    def __init__(self, inner):
        self._inner = inner

    def get_for_employee_and_date(self, employee_id, work_date):
        return None

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_concurrent_check_in_surfaces_unique_key_conflict(attendance_repo, directory):
    AttendanceService(attendance_repo, directory).check_in(1, now=datetime(2026, 3, 2, 8, 30))
    racing = AttendanceService(_StaleLookup(attendance_repo), directory)

    with pytest.raises(ConflictError):
        racing.check_in(1, now=datetime(2026, 3, 2, 8, 31))
    assert attendance_repo.count_records(employee_ids=[1]) == 1


def test_late_check_in_on_absent_day_replaces_absence_note(svc):
    svc.mark_absent(1, date(2026, 3, 2), actor_id=2, reason="No show")

    rec = svc.check_in(1, now=datetime(2026, 3, 2, 10, 0))

    assert rec.status == AttendanceStatus.LATE
    assert rec.notes == "Checked in after 09:00"


def test_on_time_check_in_on_absent_day_clears_absence_note(svc):
    svc.mark_absent(1, date(2026, 3, 2), actor_id=2, reason="No show")

    rec = svc.check_in(1, now=datetime(2026, 3, 2, 8, 45))

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.notes is None
