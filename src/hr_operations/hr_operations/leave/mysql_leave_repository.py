from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, reason, status,
    days_requested, approver_id, approver_comments, attachments, created_at, updated_at
"""

_UPDATABLE = {
    "leave_type",
    "start_date",
    "end_date",
    "reason",
    "status",
    "days_requested",
    "approver_id",
    "approver_comments",
    "attachments",
}


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        days_requested=int(r["days_requested"]),
        approver_id=r.get("approver_id"),
        approver_comments=r.get("approver_comments"),
        attachments=tuple(load_json(r.get("attachments"), default=[])),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, (LeaveType, LeaveStatus)):
        return value.value
    if isinstance(value, (list, tuple)):
        return dump_json(list(value))
    return value


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        days_requested: int,
        attachments: Sequence[str] = (),
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, reason, status, days_requested, attachments
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    reason,
                    LeaveStatus.PENDING.value,
                    int(days_requested),
                    dump_json(list(attachments)),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Iterable[LeaveStatus],
        exclude_request_id: Optional[int] = None,
    ) -> Optional[LeaveRequest]:
        where, params = build_where(
            {
                "employee_id": int(employee_id),
                "status": [s.value for s in statuses],
                "start_date <=": end_date,
                "end_date >=": start_date,
                "request_id <>": exclude_request_id,
            }
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} LIMIT 1", tuple(params))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[LeaveRequest]:
        where, params = build_where({"employee_id": employee_id, "status": status.value if status else None})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def count_requests(self, *, employee_id: Optional[int] = None, status: Optional[LeaveStatus] = None) -> int:
        where, params = build_where({"employee_id": employee_id, "status": status.value if status else None})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM leave_requests WHERE {where}", tuple(params))
            return int(fetchone(cur)["n"])

    def list_approved_between(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        where, params = build_where(
            {
                "employee_id": int(employee_id),
                "status": LeaveStatus.APPROVED.value,
                "start_date >=": start_date,
                "end_date <=": end_date,
            }
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE {where}", tuple(params))
            return [_row_to_request(r) for r in fetchall(cur)]

    def update(self, request_id: int, fields: Mapping[str, object]) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported leave request fields: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [_db_value(v) for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_requests SET {assignments} WHERE request_id=%s",
                (*params, int(request_id)),
            )
            return cur.rowcount > 0

    def delete(self, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leave_requests WHERE request_id=%s", (int(request_id),))
            return cur.rowcount > 0
