from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Deductions, Payroll
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, pay_period_start, pay_period_end, base_salary,
    overtime_hours, overtime_rate, bonuses, tax, insurance, retirement, other_deductions,
    gross_pay, total_deductions, net_pay, status, payment_date, notes, created_at, updated_at
"""

_WRITABLE = {
    "employee_id",
    "pay_period_start",
    "pay_period_end",
    "base_salary",
    "overtime_hours",
    "overtime_rate",
    "bonuses",
    "deductions",
    "gross_pay",
    "total_deductions",
    "net_pay",
    "status",
    "payment_date",
    "notes",
}

_CONFLICT = "Payroll already exists for this employee and period"


def _row_to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        base_salary=float(r["base_salary"]),
        overtime_hours=float(r["overtime_hours"]),
        overtime_rate=float(r["overtime_rate"]),
        bonuses=float(r["bonuses"]),
        deductions=Deductions(
            tax=float(r["tax"]),
            insurance=float(r["insurance"]),
            retirement=float(r["retirement"]),
            other=float(r["other_deductions"]),
        ),
        gross_pay=float(r["gross_pay"]),
        total_deductions=float(r["total_deductions"]),
        net_pay=float(r["net_pay"]),
        status=PayrollStatus(r["status"]),
        payment_date=r.get("payment_date"),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _to_columns(fields: Mapping[str, object]) -> dict[str, Any]:
    unknown = set(fields) - _WRITABLE
    if unknown:
        raise ValueError(f"Unsupported payroll fields: {sorted(unknown)}")

    out: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "deductions":
            out.update(
                tax=value.tax,
                insurance=value.insurance,
                retirement=value.retirement,
                other_deductions=value.other,
            )
        elif isinstance(value, PayrollStatus):
            out[key] = value.value
        else:
            out[key] = value
    return out


def _filters(employee_id, status, period_start_from, period_end_to) -> dict[str, Any]:
    return {
        "employee_id": employee_id,
        "status": status.value if status else None,
        "pay_period_start >=": period_start_from,
        "pay_period_end <=": period_end_to,
    }


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, fields: Mapping[str, object]) -> int:
        cols = _to_columns(fields)
        placeholders = ",".join(["%s"] * len(cols))
        with db_cursor(self._conn_factory, conflict_message=_CONFLICT) as (_, cur):
            cur.execute(
                f"INSERT INTO payrolls({', '.join(cols)}) VALUES({placeholders})",
                tuple(cols.values()),
            )
            return int(cur.lastrowid)

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def get_for_period(self, *, employee_id: int, pay_period_start: date, pay_period_end: date) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payrolls
                WHERE employee_id=%s AND pay_period_start=%s AND pay_period_end=%s
                """,
                (int(employee_id), pay_period_start, pay_period_end),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

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
        where, params = build_where(_filters(employee_id, status, period_start_from, period_end_to))
        sql = f"""
            SELECT {_COLUMNS} FROM payrolls
            WHERE {where}
            ORDER BY pay_period_start DESC, employee_id ASC
        """
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_payroll(r) for r in fetchall(cur)]

    def count_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        period_start_from: Optional[date] = None,
        period_end_to: Optional[date] = None,
    ) -> int:
        where, params = build_where(_filters(employee_id, status, period_start_from, period_end_to))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM payrolls WHERE {where}", tuple(params))
            return int(fetchone(cur)["n"])

    def update(self, payroll_id: int, fields: Mapping[str, object]) -> bool:
        cols = _to_columns(fields)
        if not cols:
            return False
        assignments = ", ".join(f"{col}=%s" for col in cols)
        with db_cursor(self._conn_factory, conflict_message=_CONFLICT) as (_, cur):
            cur.execute(
                f"UPDATE payrolls SET {assignments} WHERE payroll_id=%s",
                (*cols.values(), int(payroll_id)),
            )
            return cur.rowcount > 0
