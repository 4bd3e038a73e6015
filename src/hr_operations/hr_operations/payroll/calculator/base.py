from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable

from ...attendance.model import AttendanceRecord
from ..model import Deductions, HoursWorked, PayTotals


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def base_salary(self, annual_salary: float, period_start: date, period_end: date) -> float:
        raise NotImplementedError

    @abstractmethod
    def hours_worked(self, records: Iterable[AttendanceRecord]) -> HoursWorked:
        raise NotImplementedError

    @abstractmethod
    def overtime_rate(self, annual_salary: float) -> float:
        raise NotImplementedError

    @abstractmethod
    def deductions(self, taxable_pay: float) -> Deductions:
        raise NotImplementedError

    def totals(
        self,
        *,
        base_salary: float,
        overtime_hours: float,
        overtime_rate: float,
        bonuses: float,
        deductions: Deductions,
    ) -> PayTotals:
        gross = base_salary + overtime_hours * overtime_rate + bonuses
        total_deductions = deductions.total
        return PayTotals(gross_pay=gross, total_deductions=total_deductions, net_pay=gross - total_deductions)
