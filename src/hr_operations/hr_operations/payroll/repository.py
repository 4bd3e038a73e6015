from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import Payroll


class PayrollRepository(Protocol):
    def create(self, fields: Mapping[str, object]) -> int:
        """Insert a payroll; raises ConflictError when the employee/period already exists."""

        raise NotImplementedError

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def get_for_period(self, *, employee_id: int, pay_period_start: date, pay_period_end: date) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        period_start_from: Optional[date] = None,
        period_end_to: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[Payroll]:
        """Latest pay period first; ``limit=None`` returns everything."""

        raise NotImplementedError

    def count_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        period_start_from: Optional[date] = None,
        period_end_to: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, payroll_id: int, fields: Mapping[str, object]) -> bool:
        raise NotImplementedError
