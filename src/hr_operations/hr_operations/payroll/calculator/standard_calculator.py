from __future__ import annotations

from datetime import date
from typing import Iterable

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import days_in_year, inclusive_days
from ...core.constants import (
    INSURANCE_RATE,
    OVERTIME_MULTIPLIER,
    REGULAR_HOURS_PER_DAY,
    RETIREMENT_RATE,
    STANDARD_HOURS_PER_YEAR,
    TAX_RATE,
)
from ..model import Deductions, HoursWorked
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: daily pro-rated salary, 8h regular days, flat deduction rates."""

    def base_salary(self, annual_salary: float, period_start: date, period_end: date) -> float:
        # Leap years are judged by the year the period starts in.
        return annual_salary / days_in_year(period_start.year) * inclusive_days(period_start, period_end)

    def hours_worked(self, records: Iterable[AttendanceRecord]) -> HoursWorked:
        worked = [r.hours_worked for r in records if r.hours_worked is not None]
        total = float(sum(worked))
        regular = min(total, len(worked) * REGULAR_HOURS_PER_DAY)
        return HoursWorked(total_hours=total, regular_hours=regular, overtime_hours=max(0.0, total - regular))

    def overtime_rate(self, annual_salary: float) -> float:
        return annual_salary / STANDARD_HOURS_PER_YEAR * OVERTIME_MULTIPLIER

    def deductions(self, taxable_pay: float) -> Deductions:
        return Deductions(
            tax=taxable_pay * TAX_RATE,
            insurance=taxable_pay * INSURANCE_RATE,
            retirement=taxable_pay * RETIREMENT_RATE,
            other=0.0,
        )
