from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in, check_out, status,
    is_remote, location, notes, hours_worked
"""

_UPDATABLE = {"check_in", "check_out", "status", "is_remote", "location", "notes", "hours_worked"}


def _row_to_record(r: dict) -> AttendanceRecord:
    hours = r.get("hours_worked")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        status=AttendanceStatus(r["status"]),
        is_remote=bool(r.get("is_remote")),
        location=r.get("location"),
        notes=r.get("notes"),
        hours_worked=float(hours) if hours is not None else None,
    )


def _filters(employee_ids, start_date, end_date) -> dict[str, Any]:
    return {
        "employee_id": list(employee_ids) if employee_ids is not None else None,
        "work_date >=": start_date,
        "work_date <=": end_date,
    }


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime] = None,
        is_remote: bool = False,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory, conflict_message="Attendance already recorded for this day") as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, check_in, status, is_remote, location, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, check_in, status.value, int(bool(is_remote)), location, notes),
            )
            return int(cur.lastrowid)

    def update(self, attendance_id: int, fields: Mapping[str, object]) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported attendance fields: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [v.value if isinstance(v, AttendanceStatus) else v for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_records SET {assignments} WHERE attendance_id=%s",
                (*params, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = build_where(_filters(employee_ids, start_date, end_date))
        sql = f"""
            SELECT {_COLUMNS} FROM attendance_records
            WHERE {where}
            ORDER BY work_date DESC, employee_id ASC
        """
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_records(
        self,
        *,
        employee_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        where, params = build_where(_filters(employee_ids, start_date, end_date))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM attendance_records WHERE {where}", tuple(params))
            return int(fetchone(cur)["n"])
