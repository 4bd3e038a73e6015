from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime] = None,
        is_remote: bool = False,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Insert a record; raises ConflictError when (employee_id, work_date) exists."""

        raise NotImplementedError

    def update(self, attendance_id: int, fields: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest work_date first; ``limit=None`` returns everything."""

        raise NotImplementedError

    def count_records(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError
