from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.logger import get_logger
from ..common.validators import (
    optional_email,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import EMPLOYEE_ID_MAX_LENGTH, PASSWORD_MIN_LENGTH
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import Employee, EmployeeDraft
from .repository import EmployeeRepository

logger = get_logger(__name__)


def normalize_employee_id(value: str) -> str:
    """Login handles are case-insensitive: compare and store them trimmed + lower-cased."""
    return (value or "").strip().lower()


class EmployeeService:
    """Use case: manage employee records (admin)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self) -> Sequence[Employee]:
        return self._employees.list_all()

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get_by_employee_id(normalize_employee_id(employee_id))

    def _build_draft(
        self,
        *,
        employee_id: str,
        first_name: str,
        last_name: str,
        role: str | Role,
        email: Optional[str],
        department: Optional[str],
        joining_date: Optional[date],
        status: str | EmployeeStatus,
    ) -> EmployeeDraft:
        employee_id = normalize_employee_id(require_non_empty(employee_id, "Employee ID"))
        require_max_length(employee_id, "Employee ID", EMPLOYEE_ID_MAX_LENGTH)
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        full_name = require_non_empty(f"{first_name} {last_name}", "Full name")

        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("Role is not valid")
        try:
            status = EmployeeStatus(status or EmployeeStatus.ACTIVE)
        except ValueError:
            raise ValidationError("Status is not valid")

        return EmployeeDraft(
            employee_id=employee_id,
            first_name=first_name,
            last_name=last_name,
            full_name=full_name,
            role=role,
            email=optional_email(email),
            department=(department or "").strip() or None,
            joining_date=joining_date,
            status=status,
        )

    def save_employee(
        self,
        *,
        current_role: Role,
        employee_id: str,
        first_name: str,
        last_name: str,
        role: str | Role = Role.EMPLOYEE,
        password: str = "",
        email: Optional[str] = None,
        department: Optional[str] = None,
        joining_date: Optional[date] = None,
        status: str | EmployeeStatus = EmployeeStatus.ACTIVE,
    ) -> int:
        """Insert or update the employee identified by `employee_id`.

        Updates keep the stored password unless a new one is given.
        Returns the primary key of the saved row.
        """
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to manage employees")

        draft = self._build_draft(
            employee_id=employee_id,
            first_name=first_name,
            last_name=last_name,
            role=role,
            email=email,
            department=department,
            joining_date=joining_date,
            status=status,
        )

        existing = self._employees.get_by_employee_id(draft.employee_id)
        if existing:
            password_hash = None
            if password:
                require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
                password_hash = generate_password_hash(password)
            # rowcount is 0 when nothing changed, so the result is not checked
            self._employees.update(existing.id, draft, password_hash=password_hash)
            logger.info("employee updated: %s", draft.employee_id)
            return existing.id

        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
        pk = self._employees.insert(draft, password_hash=generate_password_hash(password))
        logger.info("employee created: %s", draft.employee_id)
        return pk

    def delete_employees(self, *, current_role: Role, current_user_pk: int, employee_pks: Sequence[int]) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to delete employees")

        pks = sorted({int(pk) for pk in employee_pks})
        if not pks:
            return 0
        if int(current_user_pk) in pks:
            raise ValidationError("You cannot delete your own account")

        deleted = self._employees.delete_many(pks)
        logger.info("employees deleted: %d of %d requested", deleted, len(pks))
        return deleted
