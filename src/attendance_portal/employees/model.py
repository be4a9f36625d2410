from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee account.

    Plain data only; persistence lives in the repositories.
    """

    id: int
    employee_id: str
    full_name: str
    role: Role
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    department: Optional[str] = None
    joining_date: Optional[date] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    password_changed: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class EmployeeDraft:
    """Validated input for creating or updating an employee."""

    employee_id: str
    first_name: str
    last_name: str
    full_name: str
    role: Role
    email: Optional[str]
    department: Optional[str]
    joining_date: Optional[date]
    status: EmployeeStatus
