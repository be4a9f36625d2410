from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_pk=int(r["employee_pk"]),
        name=r["name"],
        login_time=r["login_time"],
        logout_time=r.get("logout_time"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_open_for_employee(self, employee_pk: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, employee_pk, name, login_time, logout_time
                FROM attendance_records
                WHERE employee_pk=%s AND logout_time IS NULL
                ORDER BY login_time DESC
                LIMIT 1
                """,
                (int(employee_pk),),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, *, employee_pk: int, name: str, login_time: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_pk, name, login_time)
                VALUES(%s,%s,%s)
                """,
                (int(employee_pk), name, login_time),
            )
            return int(cur.lastrowid)

    def close(self, record_id: int, *, logout_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET logout_time=%s
                WHERE record_id=%s AND logout_time IS NULL
                """,
                (logout_time, int(record_id)),
            )
            return cur.rowcount > 0

    def list_all(self, *, employee_pk: Optional[int] = None) -> Sequence[AttendanceRecord]:
        clauses = []
        params: list[object] = []
        if employee_pk is not None:
            clauses.append("employee_pk=%s")
            params.append(int(employee_pk))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, employee_pk, name, login_time, logout_time
                FROM attendance_records
                {where}
                ORDER BY login_time DESC, record_id DESC
                """,
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records")
            return int(cur.rowcount)
