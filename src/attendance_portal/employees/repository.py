from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee, EmployeeDraft


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Services depend on this protocol, not on a concrete database.
    """

    def get_by_id(self, employee_pk: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        """Lookup by the normalized (trimmed, lower-cased) login handle."""
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def insert(self, draft: EmployeeDraft, *, password_hash: str) -> int:
        raise NotImplementedError

    def update(self, employee_pk: int, draft: EmployeeDraft, *, password_hash: Optional[str] = None) -> bool:
        raise NotImplementedError

    def set_password(self, employee_pk: int, *, password_hash: str, password_changed: bool) -> bool:
        raise NotImplementedError

    def delete_many(self, employee_pks: Sequence[int]) -> int:
        raise NotImplementedError
