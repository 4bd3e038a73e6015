from __future__ import annotations

from datetime import date, datetime

import pytest

from hr_operations.core.enums import PayrollStatus
from hr_operations.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from hr_operations.payroll.model import Deductions, PayrollInput, PayrollUpdate
from hr_operations.payroll.service import PayrollService

JAN_1 = date(2025, 1, 1)
JAN_15 = date(2025, 1, 15)


@pytest.fixture
def svc(payrolls, attendance_repo, directory) -> PayrollService:
    return PayrollService(payrolls, attendance_repo, directory, clock=lambda: datetime(2025, 1, 31, 12, 0))


def _manual(employee_id=1, start=JAN_1, end=JAN_15, **kwargs) -> PayrollInput:
    data = dict(
        employee_id=employee_id,
        pay_period_start=start,
        pay_period_end=end,
        base_salary=3000.0,
        overtime_hours=2.0,
        overtime_rate=50.0,
        bonuses=100.0,
        deductions=Deductions(tax=600.0, insurance=100.0),
    )
    data.update(kwargs)
    return PayrollInput(**data)


def test_generate_uses_salary_and_attendance(svc, attendance_repo):
    for day in range(1, 11):
        attendance_repo.add(1, date(2025, 1, day), hours=9.0)
    attendance_repo.add(1, date(2025, 1, 20), hours=12.0)

    p = svc.generate_payroll(1, JAN_1, JAN_15, actor_id=2, bonuses=500.0)

    base = 75000 / 365 * 15
    rate = 75000 / 2080 * 1.5
    taxable = base + 10 * rate
    assert p.status == PayrollStatus.DRAFT
    assert p.base_salary == pytest.approx(3082.19, abs=0.01)
    assert p.overtime_hours == pytest.approx(10.0)
    assert p.overtime_rate == pytest.approx(rate)
    assert p.deductions.tax == pytest.approx(taxable * 0.22)
    assert p.gross_pay == pytest.approx(taxable + 500.0)
    assert p.total_deductions == pytest.approx(taxable * 0.33)
    assert p.net_pay == pytest.approx(p.gross_pay - p.total_deductions)


def test_generate_requires_hr(svc):
    with pytest.raises(AuthorizationError):
        svc.generate_payroll(1, JAN_1, JAN_15, actor_id=1)


def test_generate_for_unknown_employee(svc):
    with pytest.raises(NotFoundError):
        svc.generate_payroll(42, JAN_1, JAN_15, actor_id=2)


def test_duplicate_period_conflicts(svc):
    svc.generate_payroll(1, JAN_1, JAN_15, actor_id=2)

    with pytest.raises(ConflictError):
        svc.create_payroll(_manual(), actor_id=2)


def test_create_recomputes_derived_totals(svc):
    p = svc.create_payroll(_manual(), actor_id=2)

    assert p.gross_pay == pytest.approx(3200.0)
    assert p.total_deductions == pytest.approx(700.0)
    assert p.net_pay == pytest.approx(2500.0)
    assert p.overtime_pay == pytest.approx(100.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_salary": 0.0},
        {"bonuses": -1.0},
        {"deductions": Deductions(tax=-5.0)},
        {"start": JAN_15, "end": JAN_1},
    ],
)
def test_create_rejects_invalid_amounts(svc, kwargs):
    with pytest.raises(ValidationError):
        svc.create_payroll(_manual(**kwargs), actor_id=2)


def test_lifecycle_draft_processed_paid(svc):
    p = svc.create_payroll(_manual(), actor_id=2)

    with pytest.raises(ConflictError):
        svc.mark_payroll_as_paid(p.payroll_id, actor_id=2)

    processed = svc.process_payroll(p.payroll_id, actor_id=2)
    assert processed.status == PayrollStatus.PROCESSED

    with pytest.raises(ConflictError):
        svc.process_payroll(p.payroll_id, actor_id=2)

    paid = svc.mark_payroll_as_paid(p.payroll_id, actor_id=2)
    assert paid.status == PayrollStatus.PAID
    assert paid.payment_date == date(2025, 1, 31)


def test_paid_payroll_is_immutable(svc):
    p = svc.create_payroll(_manual(), actor_id=2)
    svc.process_payroll(p.payroll_id, actor_id=2)
    svc.mark_payroll_as_paid(p.payroll_id, actor_id=2, payment_date=date(2025, 2, 1))

    with pytest.raises(ConflictError):
        svc.update_payroll(p.payroll_id, PayrollUpdate(bonuses=1000.0), actor_id=2)


def test_update_recomputes_totals(svc):
    p = svc.create_payroll(_manual(), actor_id=2)

    updated = svc.update_payroll(p.payroll_id, PayrollUpdate(bonuses=400.0, notes="Q4 bonus"), actor_id=2)

    assert updated.gross_pay == pytest.approx(3500.0)
    assert updated.net_pay == pytest.approx(2800.0)
    assert updated.notes == "Q4 bonus"


def test_update_missing_payroll_is_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.update_payroll(99, PayrollUpdate(bonuses=1.0), actor_id=2)


def test_update_into_existing_period_conflicts(svc):
    svc.create_payroll(_manual(), actor_id=2)
    second = svc.create_payroll(_manual(start=date(2025, 1, 16), end=date(2025, 1, 31)), actor_id=2)

    with pytest.raises(ConflictError):
        svc.update_payroll(
            second.payroll_id, PayrollUpdate(pay_period_start=JAN_1, pay_period_end=JAN_15), actor_id=2
        )


def test_listing_and_period_filter(svc):
    svc.create_payroll(_manual(), actor_id=2)
    svc.create_payroll(_manual(start=date(2025, 1, 16), end=date(2025, 1, 31)), actor_id=2)
    svc.create_payroll(_manual(employee_id=3), actor_id=2)

    mine = svc.get_payroll_by_employee(1)
    assert mine.total == 2
    assert mine.items[0].pay_period_start == date(2025, 1, 16)

    with pytest.raises(AuthorizationError):
        svc.get_all_payrolls(1)

    assert svc.get_all_payrolls(2).total == 3
    assert svc.get_all_payrolls(2, pay_period_start=JAN_1, pay_period_end=JAN_15).total == 2
    # A single bound is ignored.
    assert svc.get_all_payrolls(2, pay_period_start=date(2025, 1, 16)).total == 3


def test_summary_totals_and_breakdown(svc):
    a = svc.create_payroll(_manual(), actor_id=2)
    svc.create_payroll(_manual(employee_id=3), actor_id=2)
    svc.process_payroll(a.payroll_id, actor_id=2)

    summary = svc.get_payroll_summary(2, start_date=JAN_1, end_date=date(2025, 1, 31))

    assert summary.total_payrolls == 2
    assert summary.total_gross_pay == pytest.approx(6400.0)
    assert summary.total_net_pay == pytest.approx(5000.0)
    assert summary.total_deductions == pytest.approx(1400.0)
    assert summary.average_pay == pytest.approx(2500.0)
    assert dict(summary.status_breakdown) == {"processed": 1, "draft": 1}


def test_empty_summary(svc):
    summary = svc.get_payroll_summary(2, start_date=JAN_1, end_date=JAN_15)

    assert summary.total_payrolls == 0
    assert summary.average_pay == 0.0


class _StalePeriodLookup:
    """Period lookup misses the row another request just inserted."""

    def __init__(self, inner):
        self._inner = inner

    def get_for_period(self, **kwargs):
        return None

    def __getattr__(self, name):
        return getattr(self._inner, name)


def test_concurrent_generate_surfaces_unique_key_conflict(svc, payrolls, attendance_repo, directory):
    svc.generate_payroll(1, JAN_1, JAN_15, actor_id=2)
    racing = PayrollService(_StalePeriodLookup(payrolls), attendance_repo, directory)

    with pytest.raises(ConflictError):
        racing.generate_payroll(1, JAN_1, JAN_15, actor_id=2)
    assert payrolls.count_payrolls(employee_id=1) == 1


def test_payroll_summary_requires_report_access(svc):
    with pytest.raises(AuthorizationError):
        svc.get_payroll_summary(3, start_date=JAN_1, end_date=JAN_15)
