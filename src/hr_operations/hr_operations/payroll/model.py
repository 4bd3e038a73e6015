from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Optional

from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class Deductions:
    tax: float = 0.0
    insurance: float = 0.0
    retirement: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return self.tax + self.insurance + self.retirement + self.other


@dataclass(frozen=True)
class PayTotals:
    gross_pay: float
    total_deductions: float
    net_pay: float


@dataclass(frozen=True)
class HoursWorked:
    total_hours: float
    regular_hours: float
    overtime_hours: float


@dataclass(frozen=True)
class Payroll:
    """Thực thể miền (domain): Bảng lương của một nhân viên cho một kỳ lương."""

    payroll_id: int
    employee_id: int
    pay_period_start: date
    pay_period_end: date
    base_salary: float
    overtime_hours: float
    overtime_rate: float
    bonuses: float
    deductions: Deductions
    gross_pay: float
    total_deductions: float
    net_pay: float
    status: PayrollStatus
    payment_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def overtime_pay(self) -> float:
        return self.overtime_hours * self.overtime_rate


@dataclass(frozen=True)
class PayrollInput:
    """Manually entered payroll (derived totals are always recomputed)."""

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    base_salary: float
    overtime_hours: float = 0.0
    overtime_rate: float = 0.0
    bonuses: float = 0.0
    deductions: Deductions = field(default_factory=Deductions)
    notes: Optional[str] = None


@dataclass(frozen=True)
class PayrollUpdate:
    """Partial update of a non-paid payroll; ``None`` means "leave unchanged"."""

    pay_period_start: Optional[date] = None
    pay_period_end: Optional[date] = None
    base_salary: Optional[float] = None
    overtime_hours: Optional[float] = None
    overtime_rate: Optional[float] = None
    bonuses: Optional[float] = None
    deductions: Optional[Deductions] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PayrollSummary:
    total_payrolls: int
    total_gross_pay: float
    total_net_pay: float
    total_deductions: float
    status_breakdown: Mapping[str, int]
    average_pay: float
