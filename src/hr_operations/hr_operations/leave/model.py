from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Thực thể miền (domain): Đơn xin nghỉ phép."""

    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    days_requested: int
    approver_id: Optional[int] = None
    approver_comments: Optional[str] = None
    attachments: Sequence[str] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        """Pending and approved requests block overlapping ones."""
        return self.status in ACTIVE_LEAVE_STATUSES


ACTIVE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


@dataclass(frozen=True)
class LeaveRequestUpdate:
    """Partial update; ``None`` means "leave unchanged"."""

    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = None
    status: Optional[LeaveStatus] = None
    approver_comments: Optional[str] = None
    attachments: Optional[Sequence[str]] = None

    @property
    def touches_details(self) -> bool:
        return any(v is not None for v in (self.leave_type, self.start_date, self.end_date, self.reason, self.attachments))


@dataclass(frozen=True)
class LeaveBalance:
    employee_id: int
    year: int
    remaining: Mapping[str, int]
    used: Mapping[str, int] = field(default_factory=dict)

    def __getitem__(self, leave_type: str) -> int:
        return self.remaining[leave_type]
