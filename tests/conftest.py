from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from attendance_portal.attendance.model import AttendanceRecord
from attendance_portal.auth.reset_token_repository import ResetToken
from attendance_portal.core.enums import EmployeeStatus, Role
from attendance_portal.employees.model import Employee, EmployeeDraft


class InMemoryEmployees:
    def __init__(self):
        self.by_pk: dict[int, Employee] = {}
        self._id = 0

    def add(
        self,
        employee_id: str,
        password: str,
        *,
        full_name: str = "Test User",
        role: Role = Role.EMPLOYEE,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
        password_changed: bool = True,
    ) -> Employee:
        self._id += 1
        first, _, last = full_name.partition(" ")
        emp = Employee(
            id=self._id,
            employee_id=employee_id,
            full_name=full_name,
            first_name=first,
            last_name=last,
            role=role,
            status=status,
            password_hash=generate_password_hash(password),
            password_changed=password_changed,
            created_at=datetime(2026, 1, self._id, 9, 0),
        )
        self.by_pk[emp.id] = emp
        return emp

    def get_by_id(self, employee_pk: int) -> Optional[Employee]:
        return self.by_pk.get(int(employee_pk))

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        for emp in self.by_pk.values():
            if emp.employee_id == employee_id:
                return emp
        return None

    def list_all(self) -> Sequence[Employee]:
        return sorted(self.by_pk.values(), key=lambda e: (e.created_at, e.id), reverse=True)

    def insert(self, draft: EmployeeDraft, *, password_hash: str) -> int:
        self._id += 1
        self.by_pk[self._id] = Employee(
            id=self._id,
            employee_id=draft.employee_id,
            full_name=draft.full_name,
            first_name=draft.first_name,
            last_name=draft.last_name,
            role=draft.role,
            email=draft.email,
            department=draft.department,
            joining_date=draft.joining_date,
            status=draft.status,
            password_hash=password_hash,
            password_changed=False,
            created_at=datetime(2026, 2, 1, 9, 0),
        )
        return self._id

    def update(self, employee_pk: int, draft: EmployeeDraft, *, password_hash: Optional[str] = None) -> bool:
        emp = self.by_pk.get(int(employee_pk))
        if not emp:
            return False
        self.by_pk[emp.id] = replace(
            emp,
            employee_id=draft.employee_id,
            full_name=draft.full_name,
            first_name=draft.first_name,
            last_name=draft.last_name,
            role=draft.role,
            email=draft.email,
            department=draft.department,
            joining_date=draft.joining_date,
            status=draft.status,
            password_hash=password_hash or emp.password_hash,
        )
        return True

    def set_password(self, employee_pk: int, *, password_hash: str, password_changed: bool) -> bool:
        emp = self.by_pk.get(int(employee_pk))
        if not emp:
            return False
        self.by_pk[emp.id] = replace(emp, password_hash=password_hash, password_changed=password_changed)
        return True

    def delete_many(self, employee_pks: Sequence[int]) -> int:
        deleted = 0
        for pk in employee_pks:
            if self.by_pk.pop(int(pk), None):
                deleted += 1
        return deleted


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def add(self, employee_pk: int, name: str, login_time: datetime, logout_time: Optional[datetime] = None) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(
            record_id=self._id,
            employee_pk=employee_pk,
            name=name,
            login_time=login_time,
            logout_time=logout_time,
        )
        self.records[rec.record_id] = rec
        return rec

    def get_open_for_employee(self, employee_pk: int) -> Optional[AttendanceRecord]:
        for rec in self.records.values():
            if rec.employee_pk == employee_pk and rec.logout_time is None:
                return rec
        return None

    def create(self, *, employee_pk: int, name: str, login_time: datetime) -> int:
        return self.add(employee_pk, name, login_time).record_id

    def close(self, record_id: int, *, logout_time: datetime) -> bool:
        rec = self.records.get(record_id)
        if not rec or rec.logout_time is not None:
            return False
        self.records[record_id] = replace(rec, logout_time=logout_time)
        return True

    def list_all(self, *, employee_pk: Optional[int] = None) -> Sequence[AttendanceRecord]:
        items = [r for r in self.records.values() if employee_pk is None or r.employee_pk == employee_pk]
        items.sort(key=lambda r: (r.login_time, r.record_id), reverse=True)
        return items

    def delete_all(self) -> int:
        count = len(self.records)
        self.records.clear()
        return count


class InMemoryResetTokens:
    def __init__(self):
        self.tokens: dict[int, ResetToken] = {}
        self._id = 0

    def create(self, *, employee_pk: int, token_hash: str, expires_at: datetime) -> int:
        self._id += 1
        self.tokens[self._id] = ResetToken(
            token_id=self._id,
            employee_pk=employee_pk,
            token_hash=token_hash,
            expires_at=expires_at,
        )
        return self._id

    def get_by_hash(self, token_hash: str) -> Optional[ResetToken]:
        for tok in self.tokens.values():
            if tok.token_hash == token_hash:
                return tok
        return None

    def mark_used(self, token_id: int, *, used_at: datetime) -> bool:
        tok = self.tokens.get(token_id)
        if not tok or tok.used_at is not None:
            return False
        self.tokens[token_id] = replace(tok, used_at=used_at)
        return True


@pytest.fixture
def fixed_now() -> datetime:
    # A Wednesday; the week started on Sunday 2026-02-01.
    return datetime(2026, 2, 4, 10, 0, 0)


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def reset_tokens_repo() -> InMemoryResetTokens:
    return InMemoryResetTokens()
