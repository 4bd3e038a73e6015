from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import hours_between, month_bounds, now_local
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_date_order, require_enum
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_PAGE_SIZE, DEFAULT_WORK_START
from ..core.enums import AttendanceStatus, Capability
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..employees.access import require_capability
from ..employees.directory import EmployeeDirectory
from .calculator import build_report, summarize
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceReport, AttendanceUpdate, EmployeeAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: EmployeeDirectory,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        work_start: time = DEFAULT_WORK_START,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._directory = directory
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._work_start = work_start
        self._grace_minutes = int(grace_minutes)
        self._clock = clock

    def _get(self, attendance_id: int) -> AttendanceRecord:
        rec = self._attendance.get_by_id(int(attendance_id))
        if not rec:
            raise NotFoundError("Attendance record not found")
        return rec

    def _require_active_employee(self, employee_id: int) -> None:
        employee = self._directory.get_employee(employee_id)
        if not employee.is_active:
            raise AuthenticationError("Your account is not active. Please contact HR.")

    def check_in(
        self,
        employee_id: int,
        *,
        location: Optional[str] = None,
        is_remote: bool = False,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        employee_id = int(employee_id)
        now = now or self._clock()
        today = now.date()

        self._require_active_employee(employee_id)

        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        if existing and existing.check_in is not None:
            raise ConflictError("You have already checked in today")

        strategy = self._factory.for_checkin(
            now=now, today=today, work_start=self._work_start, grace_minutes=self._grace_minutes
        )
        decision = strategy.decide_checkin(
            now=now, today=today, work_start=self._work_start, grace_minutes=self._grace_minutes
        )

        if existing:
            # Day was pre-marked (e.g. absent); the check-in replaces that status.
            self._attendance.update(
                existing.attendance_id,
                {
                    "check_in": now,
                    "status": decision.status,
                    "is_remote": bool(is_remote),
                    "location": location,
                    "notes": decision.note,
                },
            )
            attendance_id = existing.attendance_id
        else:
            # A concurrent check-in for the same day surfaces as ConflictError from the unique key.
            attendance_id = self._attendance.create(
                employee_id=employee_id,
                work_date=today,
                check_in=now,
                status=decision.status,
                is_remote=bool(is_remote),
                location=location,
                notes=decision.note,
            )

        logger.info("Employee %s checked in at %s (%s)", employee_id, now.isoformat(), decision.status.value)
        return self._get(attendance_id)

    def check_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        employee_id = int(employee_id)
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if not record:
            raise NotFoundError("No check-in record found for today")
        if record.check_in is None:
            raise ValidationError("You must check in before checking out")
        if record.check_out is not None:
            raise ConflictError("You have already checked out today")
        if now < record.check_in:
            raise ValidationError("Check-out cannot be earlier than check-in")

        strategy = self._factory.for_checkout(now=now, today=today)
        decision = strategy.decide_checkout(now=now, today=today, current=record.status)

        self._attendance.update(
            record.attendance_id,
            {
                "check_out": now,
                "status": decision.status,
                "hours_worked": hours_between(record.check_in, now),
            },
        )
        logger.info("Employee %s checked out at %s", employee_id, now.isoformat())
        return self._get(record.attendance_id)

    def get_today_record(self, employee_id: int, today: date | None = None) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(int(employee_id), today or self._clock().date())

    def get_attendance_by_employee(
        self,
        employee_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> EmployeeAttendance:
        """Paged history plus a summary over the whole range (default: current month)."""
        if start_date is None or end_date is None:
            start_date, end_date = month_bounds(self._clock().date())
        require_date_order(start_date, end_date)

        offset, limit = normalize_paging(page, limit)
        ids = [int(employee_id)]
        items = self._attendance.list_records(
            employee_ids=ids, start_date=start_date, end_date=end_date, offset=offset, limit=limit
        )
        total = self._attendance.count_records(employee_ids=ids, start_date=start_date, end_date=end_date)
        everything = self._attendance.list_records(employee_ids=ids, start_date=start_date, end_date=end_date)

        return EmployeeAttendance(
            page=Page(items=list(items), total=total, page=int(page), limit=limit),
            summary=summarize(everything),
        )

    def get_all_attendance(
        self,
        actor_id: int,
        *,
        work_date: date | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page[AttendanceRecord]:
        require_capability(
            self._directory, actor_id, Capability.MANAGE_ATTENDANCE, "Only HR managers can view all attendance"
        )

        offset, limit = normalize_paging(page, limit)
        items = self._attendance.list_records(start_date=work_date, end_date=work_date, offset=offset, limit=limit)
        total = self._attendance.count_records(start_date=work_date, end_date=work_date)
        return Page(items=list(items), total=total, page=int(page), limit=limit)

    def update_attendance(self, attendance_id: int, changes: AttendanceUpdate, actor_id: int) -> AttendanceRecord:
        """HR correction; hours_worked is recomputed from the resulting times."""
        require_capability(
            self._directory, actor_id, Capability.MANAGE_ATTENDANCE, "Only HR managers can update attendance records"
        )
        rec = self._get(attendance_id)

        check_in = changes.check_in or rec.check_in
        check_out = changes.check_out or rec.check_out
        if check_out is not None and check_in is None:
            raise ValidationError("Check-out requires a check-in")
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out cannot be earlier than check-in")

        fields: dict[str, object] = {}
        if changes.check_in is not None:
            fields["check_in"] = changes.check_in
        if changes.check_out is not None:
            fields["check_out"] = changes.check_out
        if changes.status is not None:
            fields["status"] = require_enum(changes.status, AttendanceStatus, "Status")
        if changes.notes is not None:
            fields["notes"] = changes.notes
        if changes.location is not None:
            fields["location"] = changes.location
        if changes.is_remote is not None:
            fields["is_remote"] = bool(changes.is_remote)
        if not fields:
            raise ValidationError("Nothing to update")
        if check_in and check_out:
            fields["hours_worked"] = hours_between(check_in, check_out)

        self._attendance.update(rec.attendance_id, fields)
        logger.info("Attendance %s updated by user %s", rec.attendance_id, actor_id)
        return self._get(rec.attendance_id)

    def mark_absent(
        self, employee_id: int, work_date: date, actor_id: int, *, reason: str | None = None
    ) -> AttendanceRecord:
        require_capability(
            self._directory, actor_id, Capability.MANAGE_ATTENDANCE, "Only HR managers can mark absences"
        )
        employee_id = int(employee_id)

        existing = self._attendance.get_for_employee_and_date(employee_id, work_date)
        if existing:
            self._attendance.update(existing.attendance_id, {"status": AttendanceStatus.ABSENT, "notes": reason})
            attendance_id = existing.attendance_id
        else:
            attendance_id = self._attendance.create(
                employee_id=employee_id,
                work_date=work_date,
                status=AttendanceStatus.ABSENT,
                notes=reason,
            )

        logger.info("Employee %s marked absent for %s", employee_id, work_date.isoformat())
        return self._get(attendance_id)

    def get_attendance_report(
        self,
        actor_id: int,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Sequence[int] | None = None,
    ) -> AttendanceReport:
        require_capability(
            self._directory, actor_id, Capability.VIEW_REPORTS, "Only HR managers can view attendance reports"
        )
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")
        require_date_order(start_date, end_date)

        ids = [int(i) for i in employee_ids] if employee_ids else None
        records = self._attendance.list_records(employee_ids=ids, start_date=start_date, end_date=end_date)
        return build_report(records, start_date=start_date, end_date=end_date)
