from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Employee, EmployeeDraft
from .repository import EmployeeRepository

_COLUMNS = """
    id, employee_id, first_name, last_name, full_name, role, email, department,
    joining_date, status, password_hash, password_changed, created_at
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        id=int(r["id"]),
        employee_id=r["employee_id"],
        first_name=r.get("first_name") or "",
        last_name=r.get("last_name") or "",
        full_name=r["full_name"],
        role=Role(r["role"]),
        email=r.get("email"),
        department=r.get("department"),
        joining_date=r.get("joining_date"),
        status=EmployeeStatus(r.get("status") or EmployeeStatus.ACTIVE.value),
        password_hash=r["password_hash"],
        password_changed=bool(r.get("password_changed")),
        created_at=r.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_pk: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE id=%s", (int(employee_pk),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY created_at DESC, id DESC")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def insert(self, draft: EmployeeDraft, *, password_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees
                    (employee_id, first_name, last_name, full_name, role, email, department,
                     joining_date, status, password_hash, password_changed)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    draft.employee_id,
                    draft.first_name,
                    draft.last_name,
                    draft.full_name,
                    draft.role.value,
                    draft.email,
                    draft.department,
                    draft.joining_date,
                    draft.status.value,
                    password_hash,
                ),
            )
            return int(cur.lastrowid)

    def update(self, employee_pk: int, draft: EmployeeDraft, *, password_hash: Optional[str] = None) -> bool:
        assignments = [
            "employee_id=%s",
            "first_name=%s",
            "last_name=%s",
            "full_name=%s",
            "role=%s",
            "email=%s",
            "department=%s",
            "joining_date=%s",
            "status=%s",
        ]
        params: list[object] = [
            draft.employee_id,
            draft.first_name,
            draft.last_name,
            draft.full_name,
            draft.role.value,
            draft.email,
            draft.department,
            draft.joining_date,
            draft.status.value,
        ]
        if password_hash is not None:
            assignments.append("password_hash=%s")
            params.append(password_hash)
        params.append(int(employee_pk))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE employees SET {', '.join(assignments)} WHERE id=%s", tuple(params))
            return cur.rowcount > 0

    def set_password(self, employee_pk: int, *, password_hash: str, password_changed: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET password_hash=%s, password_changed=%s WHERE id=%s",
                (password_hash, int(password_changed), int(employee_pk)),
            )
            return cur.rowcount > 0

    def delete_many(self, employee_pks: Sequence[int]) -> int:
        if not employee_pks:
            return 0
        ids = [int(pk) for pk in employee_pks]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM employees WHERE id IN ({in_clause(ids)})", tuple(ids))
            return int(cur.rowcount)
