from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Mapping, Optional, Protocol, Sequence

from ..common.datetime_utils import now_local, year_bounds
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_date_order, require_enum, require_min_length
from ..core.constants import DEFAULT_LEAVE_ALLOCATIONS, DEFAULT_PAGE_SIZE, MIN_LEAVE_REASON_LENGTH
from ..core.enums import Capability, LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, UpstreamError, ValidationError
from ..employees.access import require_capability, require_hr_privilege
from ..employees.directory import EmployeeDirectory
from .calculator import compute_balance, days_requested
from .model import ACTIVE_LEAVE_STATUSES, LeaveBalance, LeaveRequest, LeaveRequestUpdate
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveAllocationProvider(Protocol):
    """Optional source of per-employee allocations (days per leave type)."""

    def get_allocations(self, employee_id: int, year: int) -> Mapping[str, int]:
        raise NotImplementedError


class LeaveService:
    """Use cases: leave requests and yearly balances."""

    def __init__(
        self,
        requests: LeaveRepository,
        directory: EmployeeDirectory,
        *,
        allocations: Optional[LeaveAllocationProvider] = None,
        clock: Callable = now_local,
    ):
        self._requests = requests
        self._directory = directory
        self._allocations = allocations
        self._clock = clock

    # ---- helpers ----
    def _get(self, request_id: int) -> LeaveRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found")
        return req

    def _ensure_no_overlap(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        exclude_request_id: Optional[int] = None,
    ) -> None:
        overlapping = self._requests.find_overlapping(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            statuses=ACTIVE_LEAVE_STATUSES,
            exclude_request_id=exclude_request_id,
        )
        if overlapping:
            raise ConflictError("You have an overlapping leave request for these dates")

    @staticmethod
    def _clean_reason(reason: str) -> str:
        reason = (reason or "").strip()
        return require_min_length(reason, "Reason", MIN_LEAVE_REASON_LENGTH)

    # ---- commands ----
    def create_leave_request(
        self,
        employee_id: int,
        *,
        leave_type: LeaveType | str,
        start_date: date,
        end_date: date,
        reason: str,
        attachments: Sequence[str] = (),
    ) -> LeaveRequest:
        employee_id = int(employee_id)
        leave_type = require_enum(leave_type, LeaveType, "Leave type")
        require_date_order(start_date, end_date)
        reason = self._clean_reason(reason)

        # Unknown employees raise NotFoundError from the directory.
        self._directory.get_employee(employee_id)

        self._ensure_no_overlap(employee_id=employee_id, start_date=start_date, end_date=end_date)

        request_id = self._requests.create(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            days_requested=days_requested(start_date, end_date),
            attachments=tuple(attachments or ()),
        )
        logger.info("Leave request %s created for employee %s", request_id, employee_id)
        return self._get(request_id)

    def update_leave_request(self, request_id: int, changes: LeaveRequestUpdate, actor_id: int) -> LeaveRequest:
        """Owner or HR may edit a pending request; only HR may approve/reject."""
        actor_id = int(actor_id)
        req = self._get(request_id)

        if req.employee_id != actor_id:
            require_hr_privilege(self._directory, actor_id, "You can only update your own leave requests")

        fields: dict[str, object] = {}

        if changes.touches_details:
            if req.status != LeaveStatus.PENDING:
                raise ConflictError("Only pending leave requests can be edited")

            start = changes.start_date or req.start_date
            end = changes.end_date or req.end_date
            require_date_order(start, end)

            if changes.leave_type is not None:
                fields["leave_type"] = require_enum(changes.leave_type, LeaveType, "Leave type")
            if changes.reason is not None:
                fields["reason"] = self._clean_reason(changes.reason)
            if changes.attachments is not None:
                fields["attachments"] = tuple(changes.attachments)
            if (start, end) != (req.start_date, req.end_date):
                self._ensure_no_overlap(
                    employee_id=req.employee_id,
                    start_date=start,
                    end_date=end,
                    exclude_request_id=req.request_id,
                )
                fields["start_date"] = start
                fields["end_date"] = end
                fields["days_requested"] = days_requested(start, end)

        if changes.status is not None:
            fields.update(self._status_transition(req, require_enum(changes.status, LeaveStatus, "Status"), actor_id))

        if changes.approver_comments is not None:
            require_capability(
                self._directory, actor_id, Capability.DECIDE_LEAVE, "Only HR managers can comment on leave decisions"
            )
            fields["approver_comments"] = changes.approver_comments.strip() or None

        if not fields:
            raise ValidationError("Nothing to update")

        self._requests.update(req.request_id, fields)
        logger.info("Leave request %s updated by user %s", req.request_id, actor_id)
        return self._get(req.request_id)

    def _status_transition(self, req: LeaveRequest, target: LeaveStatus, actor_id: int) -> dict[str, object]:
        if target in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            require_capability(
                self._directory,
                actor_id,
                Capability.DECIDE_LEAVE,
                "Only HR managers can approve or reject leave requests",
            )

        if target == req.status:
            return {}

        if target in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            if req.status != LeaveStatus.PENDING:
                raise ConflictError("Leave request has already been decided")
            return {"status": target, "approver_id": actor_id}

        if target == LeaveStatus.CANCELLED:
            if req.status not in ACTIVE_LEAVE_STATUSES:
                raise ConflictError(f"A {req.status.value} leave request cannot be cancelled")
            return {"status": target}

        raise ValidationError(f"Cannot move a {req.status.value} leave request back to pending")

    def approve_leave(self, request_id: int, actor_id: int, *, comments: str = "") -> LeaveRequest:
        return self.update_leave_request(
            request_id,
            LeaveRequestUpdate(status=LeaveStatus.APPROVED, approver_comments=comments or None),
            actor_id,
        )

    def reject_leave(self, request_id: int, actor_id: int, *, comments: str = "") -> LeaveRequest:
        return self.update_leave_request(
            request_id,
            LeaveRequestUpdate(status=LeaveStatus.REJECTED, approver_comments=comments or None),
            actor_id,
        )

    def cancel_leave(self, request_id: int, actor_id: int) -> LeaveRequest:
        return self.update_leave_request(request_id, LeaveRequestUpdate(status=LeaveStatus.CANCELLED), actor_id)

    def delete_leave_request(self, request_id: int, actor_id: int) -> None:
        req = self._get(request_id)
        if req.employee_id != int(actor_id) or req.status != LeaveStatus.PENDING:
            raise AuthorizationError("You can only delete your own pending leave requests")

        if not self._requests.delete(req.request_id):
            raise NotFoundError("Leave request not found")
        logger.info("Leave request %s deleted by user %s", req.request_id, actor_id)

    # ---- queries ----
    def get_leave_request(self, request_id: int) -> LeaveRequest:
        return self._get(request_id)

    def get_leave_requests_by_employee(
        self, employee_id: int, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> Page[LeaveRequest]:
        offset, limit = normalize_paging(page, limit)
        items = self._requests.list_requests(employee_id=int(employee_id), offset=offset, limit=limit)
        total = self._requests.count_requests(employee_id=int(employee_id))
        return Page(items=list(items), total=total, page=int(page), limit=limit)

    def get_all_leave_requests(
        self,
        actor_id: int,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: LeaveStatus | str | None = None,
    ) -> Page[LeaveRequest]:
        require_capability(
            self._directory, actor_id, Capability.VIEW_ALL_LEAVE, "Only HR managers can view all leave requests"
        )
        status = require_enum(status, LeaveStatus, "Status") if status else None

        offset, limit = normalize_paging(page, limit)
        items = self._requests.list_requests(status=status, offset=offset, limit=limit)
        total = self._requests.count_requests(status=status)
        return Page(items=list(items), total=total, page=int(page), limit=limit)

    def get_leave_balance(self, employee_id: int, *, year: Optional[int] = None) -> LeaveBalance:
        employee_id = int(employee_id)
        year = int(year or self._clock().year)
        first, last = year_bounds(year)

        approved = self._requests.list_approved_between(employee_id=employee_id, start_date=first, end_date=last)
        return compute_balance(
            employee_id=employee_id,
            year=year,
            requests=approved,
            allocations=self._allocations_for(employee_id, year),
        )

    def _allocations_for(self, employee_id: int, year: int) -> Mapping[str, int]:
        if not self._allocations:
            return DEFAULT_LEAVE_ALLOCATIONS
        try:
            return self._allocations.get_allocations(employee_id, year)
        except UpstreamError as exc:
            logger.warning("Leave allocations unavailable for employee %s, using defaults: %s", employee_id, exc)
            return DEFAULT_LEAVE_ALLOCATIONS
