from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import mysql.connector
from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import TransientFaultError
from ..employees.repository import EmployeeRepository


@dataclass(frozen=True)
class CredentialRecord:
    id: int
    employee_id: str
    display_name: str
    role: Role
    password_hash: str
    is_active: bool = True


class CredentialStore(Protocol):
    def find_by_normalized_id(self, employee_id: str) -> Optional[CredentialRecord]:
        raise NotImplementedError

    def verify_password(self, record: CredentialRecord, password: str) -> bool:
        raise NotImplementedError


class EmployeeCredentialStore(CredentialStore):
    """Credential lookups served from the employees table."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def find_by_normalized_id(self, employee_id: str) -> Optional[CredentialRecord]:
        try:
            employee = self._employees.get_by_employee_id(employee_id)
        except mysql.connector.Error as e:
            raise TransientFaultError(f"employee lookup failed: {e}") from e

        if not employee:
            return None
        return CredentialRecord(
            id=employee.id,
            employee_id=employee.employee_id,
            display_name=employee.full_name,
            role=employee.role,
            password_hash=employee.password_hash,
            is_active=employee.is_active,
        )

    def verify_password(self, record: CredentialRecord, password: str) -> bool:
        try:
            return check_password_hash(record.password_hash, password)
        except (TypeError, ValueError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False
