from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        days_requested: int,
        attachments: Sequence[str] = (),
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
        exclude_request_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def count_requests(self, *, employee_id: Optional[int] = None, status: Optional[LeaveStatus] = None) -> int:
        raise NotImplementedError

    def list_approved_between(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        """Approved requests lying entirely inside [start_date, end_date]."""

        raise NotImplementedError

    def update(self, request_id: int, fields: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def delete(self, request_id: int) -> bool:
        raise NotImplementedError
