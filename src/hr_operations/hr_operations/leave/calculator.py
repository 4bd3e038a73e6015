from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from ..common.datetime_utils import inclusive_days, year_bounds
from ..core.enums import LeaveStatus
from .model import LeaveBalance, LeaveRequest


def days_requested(start: date, end: date) -> int:
    """Inclusive day count; both endpoints are leave days."""
    return inclusive_days(start, end)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start <= b_end and a_end >= b_start


def within_year(request: LeaveRequest, year: int) -> bool:
    first, last = year_bounds(year)
    return request.start_date >= first and request.end_date <= last


def compute_balance(
    *,
    employee_id: int,
    year: int,
    requests: Iterable[LeaveRequest],
    allocations: Mapping[str, int],
) -> LeaveBalance:
    """Remaining days per allocated type for ``year``.

    Only approved requests lying entirely inside the year are counted; ``used``
    reports every leave type that consumed days, allocated or not.
    """
    used: dict[str, int] = {}
    for r in requests:
        if r.status != LeaveStatus.APPROVED or r.employee_id != employee_id or not within_year(r, year):
            continue
        key = r.leave_type.value
        used[key] = used.get(key, 0) + int(r.days_requested)

    remaining = {leave_type: int(days) - used.get(leave_type, 0) for leave_type, days in allocations.items()}
    return LeaveBalance(employee_id=employee_id, year=year, remaining=remaining, used=used)
