from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True, conflict_message: str = "Duplicate record"):
    """Yield (conn, cursor); commit on success, rollback on error.

    Unique-key violations surface as ConflictError so concurrent writers
    racing on the same key get a conflict instead of a driver error.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise ConflictError(conflict_message) from exc
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_where(filters: Dict[str, Any]) -> tuple[str, list[Any]]:
    """Turn ``{"col": value}`` / ``{"col >=": value}`` into a WHERE clause.

    ``None`` values are skipped; column names come from code, never from input.
    """
    clauses: list[str] = []
    params: list[Any] = []
    for key, value in filters.items():
        if value is None:
            continue
        col, _, op = key.partition(" ")
        if isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            if not values:
                clauses.append("1=0")
                continue
            clauses.append(f"{col} IN ({', '.join(['%s'] * len(values))})")
            params.extend(values)
        else:
            clauses.append(f"{col} {op or '='} %s")
            params.append(value)
    where = " AND ".join(clauses) if clauses else "1=1"
    return where, params


def dump_json(value: Any) -> Optional[str]:
    return json.dumps(value) if value is not None else None


def load_json(value: Any, default: Any = None) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value
