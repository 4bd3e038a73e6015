from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from hr_operations.attendance.model import AttendanceRecord
from hr_operations.core.enums import AttendanceStatus, EmployeeStatus, LeaveStatus
from hr_operations.core.exceptions import ConflictError, NotFoundError, UpstreamError
from hr_operations.employees.model import Employee
from hr_operations.employees.roles import is_hr_privileged, role_from_position
from hr_operations.leave.model import LeaveRequest
from hr_operations.payroll.model import Deductions, Payroll


class FakeDirectory:
    def __init__(self, employees: dict[int, Employee]):
        self.employees = employees
        self.down = False

    def get_employee(self, employee_id: int) -> Employee:
        if self.down:
            raise UpstreamError("Employee service is unavailable")
        emp = self.employees.get(int(employee_id))
        if not emp:
            raise NotFoundError(f"Employee {employee_id} not found")
        return emp

    def is_hr_privileged(self, employee_id: int) -> bool:
        return is_hr_privileged(role_from_position(self.get_employee(employee_id).position))


class InMemoryLeaves:
    def __init__(self):
        self.items: dict[int, LeaveRequest] = {}
        self._id = 0

    def create(self, *, employee_id, leave_type, start_date, end_date, reason, days_requested, attachments=()):
        self._id += 1
        self.items[self._id] = LeaveRequest(
            request_id=self._id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            days_requested=days_requested,
            attachments=tuple(attachments),
            created_at=datetime(2026, 1, 1, 8, 0) + timedelta(minutes=self._id),
        )
        return self._id

    def get_by_id(self, request_id):
        return self.items.get(int(request_id))

    def find_overlapping(self, *, employee_id, start_date, end_date, statuses, exclude_request_id=None):
        statuses = set(statuses)
        for r in self.items.values():
            if (
                r.employee_id == employee_id
                and r.status in statuses
                and r.request_id != exclude_request_id
                and r.start_date <= end_date
                and r.end_date >= start_date
            ):
                return r
        return None

    def _filter(self, employee_id=None, status=None):
        out = [
            r
            for r in self.items.values()
            if (employee_id is None or r.employee_id == employee_id) and (status is None or r.status == status)
        ]
        out.sort(key=lambda r: r.created_at, reverse=True)
        return out

    def list_requests(self, *, employee_id=None, status=None, offset=0, limit=10):
        return self._filter(employee_id, status)[offset : offset + limit]

    def count_requests(self, *, employee_id=None, status=None):
        return len(self._filter(employee_id, status))

    def list_approved_between(self, *, employee_id, start_date, end_date):
        return [
            r
            for r in self.items.values()
            if r.employee_id == employee_id
            and r.status == LeaveStatus.APPROVED
            and r.start_date >= start_date
            and r.end_date <= end_date
        ]

    def update(self, request_id, fields):
        r = self.items.get(int(request_id))
        if not r:
            return False
        self.items[r.request_id] = replace(r, **fields)
        return True

    def delete(self, request_id):
        return self.items.pop(int(request_id), None) is not None


class InMemoryAttendance:
    def __init__(self):
        self.items: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id):
        return self.items.get(int(attendance_id))

    def get_for_employee_and_date(self, employee_id, work_date) -> Optional[AttendanceRecord]:
        for r in self.items.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def create(self, *, employee_id, work_date, status, check_in=None, is_remote=False, location=None, notes=None):
        if self.get_for_employee_and_date(employee_id, work_date):
            raise ConflictError("Attendance already recorded for this day")
        self._id += 1
        self.items[self._id] = AttendanceRecord(
            attendance_id=self._id,
            employee_id=employee_id,
            work_date=work_date,
            check_in=check_in,
            check_out=None,
            status=status,
            is_remote=is_remote,
            location=location,
            notes=notes,
        )
        return self._id

    def update(self, attendance_id, fields):
        r = self.items.get(int(attendance_id))
        if not r:
            return False
        self.items[r.attendance_id] = replace(r, **fields)
        return True

    def _filter(self, employee_ids=None, start_date=None, end_date=None):
        out = [
            r
            for r in self.items.values()
            if (employee_ids is None or r.employee_id in employee_ids)
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        out.sort(key=lambda r: (-r.work_date.toordinal(), r.employee_id))
        return out

    def list_records(self, *, employee_ids=None, start_date=None, end_date=None, offset=0, limit=None):
        rows = self._filter(employee_ids, start_date, end_date)
        return rows[offset:] if limit is None else rows[offset : offset + limit]

    def count_records(self, *, employee_ids=None, start_date=None, end_date=None):
        return len(self._filter(employee_ids, start_date, end_date))

    def add(self, employee_id: int, work_date: date, *, hours: Optional[float], status=AttendanceStatus.PRESENT):
        """Test helper: insert a finished day directly."""
        attendance_id = self.create(employee_id=employee_id, work_date=work_date, status=status)
        self.update(attendance_id, {"hours_worked": hours})
        return attendance_id


class InMemoryPayrolls:
    def __init__(self):
        self.items: dict[int, Payroll] = {}
        self._id = 0

    def create(self, fields):
        for p in self.items.values():
            if (p.employee_id, p.pay_period_start, p.pay_period_end) == (
                fields["employee_id"],
                fields["pay_period_start"],
                fields["pay_period_end"],
            ):
                raise ConflictError("Payroll already exists for this employee and period")
        self._id += 1
        data = {"payment_date": None, "notes": None, "deductions": Deductions(), **fields}
        self.items[self._id] = Payroll(payroll_id=self._id, **data)
        return self._id

    def get_by_id(self, payroll_id):
        return self.items.get(int(payroll_id))

    def get_for_period(self, *, employee_id, pay_period_start, pay_period_end):
        for p in self.items.values():
            if (p.employee_id, p.pay_period_start, p.pay_period_end) == (employee_id, pay_period_start, pay_period_end):
                return p
        return None

    def _filter(self, employee_id=None, status=None, period_start_from=None, period_end_to=None):
        out = [
            p
            for p in self.items.values()
            if (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
            and (period_start_from is None or p.pay_period_start >= period_start_from)
            and (period_end_to is None or p.pay_period_end <= period_end_to)
        ]
        out.sort(key=lambda p: (-p.pay_period_start.toordinal(), p.employee_id))
        return out

    def list_payrolls(self, *, employee_id=None, status=None, period_start_from=None, period_end_to=None, offset=0, limit=None):
        rows = self._filter(employee_id, status, period_start_from, period_end_to)
        return rows[offset:] if limit is None else rows[offset : offset + limit]

    def count_payrolls(self, *, employee_id=None, status=None, period_start_from=None, period_end_to=None):
        return len(self._filter(employee_id, status, period_start_from, period_end_to))

    def update(self, payroll_id, fields):
        p = self.items.get(int(payroll_id))
        if not p:
            return False
        self.items[p.payroll_id] = replace(p, **fields)
        return True


def make_employee(employee_id: int, *, position: str = "Software Engineer", salary: float = 75000.0, status=EmployeeStatus.ACTIVE):
    return Employee(
        employee_id=employee_id,
        first_name="Test",
        last_name=f"User{employee_id}",
        email=f"user{employee_id}@example.com",
        department="Engineering",
        position=position,
        salary=salary,
        status=status,
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        {
            1: make_employee(1),
            2: make_employee(2, position="HR Manager", salary=90000.0),
            3: make_employee(3, position="Designer", salary=60000.0),
        }
    )


@pytest.fixture
def leaves() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def payrolls() -> InMemoryPayrolls:
    return InMemoryPayrolls()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 55, 0)
