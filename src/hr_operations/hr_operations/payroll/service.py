from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.pagination import Page, normalize_paging
from ..common.validators import require_date_order, require_enum, require_non_negative, require_positive
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Capability, PayrollStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.access import require_capability
from ..employees.directory import EmployeeDirectory
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Deductions, Payroll, PayrollInput, PayrollSummary, PayrollUpdate
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def _validate_deductions(d: Deductions) -> Deductions:
    return Deductions(
        tax=require_non_negative(d.tax, "Tax"),
        insurance=require_non_negative(d.insurance, "Insurance"),
        retirement=require_non_negative(d.retirement, "Retirement"),
        other=require_non_negative(d.other, "Other deductions"),
    )


class PayrollService:
    """Use cases: payroll generation and the draft -> processed -> paid lifecycle."""

    def __init__(
        self,
        payrolls: PayrollRepository,
        attendance: AttendanceRepository,
        directory: EmployeeDirectory,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payrolls = payrolls
        self._attendance = attendance
        self._directory = directory
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    def _get(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    def _validated(self, data: PayrollInput) -> PayrollInput:
        require_date_order(
            data.pay_period_start, data.pay_period_end, start_name="Pay period start", end_name="Pay period end"
        )
        return replace(
            data,
            base_salary=require_positive(data.base_salary, "Base salary"),
            overtime_hours=require_non_negative(data.overtime_hours, "Overtime hours"),
            overtime_rate=require_non_negative(data.overtime_rate, "Overtime rate"),
            bonuses=require_non_negative(data.bonuses, "Bonuses"),
            deductions=_validate_deductions(data.deductions),
        )

    def _derived(self, data: PayrollInput) -> dict[str, float]:
        t = self._calculator.totals(
            base_salary=data.base_salary,
            overtime_hours=data.overtime_hours,
            overtime_rate=data.overtime_rate,
            bonuses=data.bonuses,
            deductions=data.deductions,
        )
        return {"gross_pay": t.gross_pay, "total_deductions": t.total_deductions, "net_pay": t.net_pay}

    def _insert(self, data: PayrollInput, *, status: PayrollStatus = PayrollStatus.DRAFT) -> Payroll:
        existing = self._payrolls.get_for_period(
            employee_id=data.employee_id,
            pay_period_start=data.pay_period_start,
            pay_period_end=data.pay_period_end,
        )
        if existing:
            raise ConflictError("Payroll already exists for this employee and period")

        payroll_id = self._payrolls.create(
            {
                "employee_id": data.employee_id,
                "pay_period_start": data.pay_period_start,
                "pay_period_end": data.pay_period_end,
                "base_salary": data.base_salary,
                "overtime_hours": data.overtime_hours,
                "overtime_rate": data.overtime_rate,
                "bonuses": data.bonuses,
                "deductions": data.deductions,
                "status": status,
                "notes": data.notes,
                **self._derived(data),
            }
        )
        logger.info("Payroll %s created for employee %s", payroll_id, data.employee_id)
        return self._get(payroll_id)

    # ---- commands ----
    def create_payroll(self, data: PayrollInput, actor_id: int) -> Payroll:
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can create payroll records"
        )
        data = self._validated(data)
        self._directory.get_employee(data.employee_id)
        return self._insert(data)

    def generate_payroll(
        self,
        employee_id: int,
        pay_period_start: date,
        pay_period_end: date,
        actor_id: int,
        *,
        bonuses: float = 0.0,
    ) -> Payroll:
        """Derive a draft payroll from the directory salary and recorded attendance."""
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can generate payroll"
        )
        require_date_order(pay_period_start, pay_period_end, start_name="Pay period start", end_name="Pay period end")

        employee = self._directory.get_employee(int(employee_id))
        annual_salary = require_positive(employee.salary, "Employee salary")

        records = self._attendance.list_records(
            employee_ids=[employee.employee_id],
            start_date=pay_period_start,
            end_date=pay_period_end,
        )
        hours = self._calculator.hours_worked(records)

        base_salary = self._calculator.base_salary(annual_salary, pay_period_start, pay_period_end)
        overtime_rate = self._calculator.overtime_rate(annual_salary)
        deductions = self._calculator.deductions(base_salary + hours.overtime_hours * overtime_rate)

        return self._insert(
            PayrollInput(
                employee_id=employee.employee_id,
                pay_period_start=pay_period_start,
                pay_period_end=pay_period_end,
                base_salary=base_salary,
                overtime_hours=hours.overtime_hours,
                overtime_rate=overtime_rate,
                bonuses=require_non_negative(bonuses, "Bonuses"),
                deductions=deductions,
            )
        )

    def update_payroll(self, payroll_id: int, changes: PayrollUpdate, actor_id: int) -> Payroll:
        payroll = self._get(payroll_id)
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can update payroll records"
        )
        if payroll.status == PayrollStatus.PAID:
            raise ConflictError("Cannot update paid payroll records")

        merged = self._validated(
            PayrollInput(
                employee_id=payroll.employee_id,
                pay_period_start=changes.pay_period_start or payroll.pay_period_start,
                pay_period_end=changes.pay_period_end or payroll.pay_period_end,
                base_salary=payroll.base_salary if changes.base_salary is None else changes.base_salary,
                overtime_hours=payroll.overtime_hours if changes.overtime_hours is None else changes.overtime_hours,
                overtime_rate=payroll.overtime_rate if changes.overtime_rate is None else changes.overtime_rate,
                bonuses=payroll.bonuses if changes.bonuses is None else changes.bonuses,
                deductions=changes.deductions or payroll.deductions,
                notes=payroll.notes if changes.notes is None else changes.notes,
            )
        )

        period_changed = (merged.pay_period_start, merged.pay_period_end) != (
            payroll.pay_period_start,
            payroll.pay_period_end,
        )
        if period_changed and self._payrolls.get_for_period(
            employee_id=payroll.employee_id,
            pay_period_start=merged.pay_period_start,
            pay_period_end=merged.pay_period_end,
        ):
            raise ConflictError("Payroll already exists for this employee and period")

        self._payrolls.update(
            payroll.payroll_id,
            {
                "pay_period_start": merged.pay_period_start,
                "pay_period_end": merged.pay_period_end,
                "base_salary": merged.base_salary,
                "overtime_hours": merged.overtime_hours,
                "overtime_rate": merged.overtime_rate,
                "bonuses": merged.bonuses,
                "deductions": merged.deductions,
                "notes": merged.notes,
                **self._derived(merged),
            },
        )
        logger.info("Payroll %s updated by user %s", payroll.payroll_id, actor_id)
        return self._get(payroll.payroll_id)

    def process_payroll(self, payroll_id: int, actor_id: int) -> Payroll:
        payroll = self._get(payroll_id)
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can process payroll"
        )
        if payroll.status != PayrollStatus.DRAFT:
            raise ConflictError("Only draft payrolls can be processed")

        self._payrolls.update(payroll.payroll_id, {"status": PayrollStatus.PROCESSED})
        logger.info("Payroll %s processed by user %s", payroll.payroll_id, actor_id)
        return self._get(payroll.payroll_id)

    def mark_payroll_as_paid(self, payroll_id: int, actor_id: int, *, payment_date: date | None = None) -> Payroll:
        payroll = self._get(payroll_id)
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can mark payroll as paid"
        )
        if payroll.status != PayrollStatus.PROCESSED:
            raise ConflictError("Only processed payrolls can be marked as paid")

        self._payrolls.update(
            payroll.payroll_id,
            {"status": PayrollStatus.PAID, "payment_date": payment_date or self._clock().date()},
        )
        logger.info("Payroll %s marked as paid by user %s", payroll.payroll_id, actor_id)
        return self._get(payroll.payroll_id)

    # ---- queries ----
    def get_payroll(self, payroll_id: int) -> Payroll:
        return self._get(payroll_id)

    def get_payroll_by_employee(
        self, employee_id: int, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> Page[Payroll]:
        offset, limit = normalize_paging(page, limit)
        items = self._payrolls.list_payrolls(employee_id=int(employee_id), offset=offset, limit=limit)
        total = self._payrolls.count_payrolls(employee_id=int(employee_id))
        return Page(items=list(items), total=total, page=int(page), limit=limit)

    def get_all_payrolls(
        self,
        actor_id: int,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: PayrollStatus | str | None = None,
        pay_period_start: date | None = None,
        pay_period_end: date | None = None,
    ) -> Page[Payroll]:
        require_capability(
            self._directory, actor_id, Capability.MANAGE_PAYROLL, "Only HR managers can view all payrolls"
        )
        status = require_enum(status, PayrollStatus, "Status") if status else None
        # The period filter applies only when both bounds are given.
        if not (pay_period_start and pay_period_end):
            pay_period_start = pay_period_end = None

        offset, limit = normalize_paging(page, limit)
        filters = dict(status=status, period_start_from=pay_period_start, period_end_to=pay_period_end)
        items = self._payrolls.list_payrolls(offset=offset, limit=limit, **filters)
        total = self._payrolls.count_payrolls(**filters)
        return Page(items=list(items), total=total, page=int(page), limit=limit)

    def get_payroll_summary(self, actor_id: int, *, start_date: date, end_date: date) -> PayrollSummary:
        require_capability(
            self._directory, actor_id, Capability.VIEW_REPORTS, "Only HR managers can view payroll summaries"
        )
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")
        require_date_order(start_date, end_date)

        payrolls = self._payrolls.list_payrolls(period_start_from=start_date, period_end_to=end_date)

        gross = net = deductions = 0.0
        breakdown: dict[str, int] = {}
        for p in payrolls:
            gross += p.gross_pay
            net += p.net_pay
            deductions += p.total_deductions
            breakdown[p.status.value] = breakdown.get(p.status.value, 0) + 1

        count = len(payrolls)
        return PayrollSummary(
            total_payrolls=count,
            total_gross_pay=gross,
            total_net_pay=net,
            total_deductions=deductions,
            status_breakdown=breakdown,
            average_pay=net / count if count else 0.0,
        )
