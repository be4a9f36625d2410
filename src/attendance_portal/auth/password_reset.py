from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..common.logger import get_logger
from ..common.validators import require_matching, require_min_length
from ..core.constants import PASSWORD_MIN_LENGTH, RESET_TOKEN_TTL_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..employees.repository import EmployeeRepository
from ..employees.service import normalize_employee_id
from .reset_token_repository import ResetToken, ResetTokenRepository

logger = get_logger(__name__)

INVALID_LINK_MESSAGE = "Invalid or expired reset link. Please request a new password reset."


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordService:
    """Use cases: one-time reset links and self-service password changes."""

    def __init__(
        self,
        employees: EmployeeRepository,
        tokens: ResetTokenRepository,
        *,
        ttl_minutes: int = RESET_TOKEN_TTL_MINUTES,
    ):
        self._employees = employees
        self._tokens = tokens
        self._ttl = timedelta(minutes=int(ttl_minutes))

    def _validate_new_password(self, password: str, confirm: str) -> str:
        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
        return require_matching(password, confirm)

    def issue_reset_token(self, *, current_role: Role, employee_id: str, now: Optional[datetime] = None) -> str:
        """Create a reset token for `employee_id`; only the raw token leaves this method."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to reset passwords")

        employee = self._employees.get_by_employee_id(normalize_employee_id(employee_id))
        if not employee:
            raise ValidationError("Employee does not exist")

        now = now or now_local()
        token = secrets.token_urlsafe(32)
        self._tokens.create(employee_pk=employee.id, token_hash=hash_token(token), expires_at=now + self._ttl)
        logger.info("password reset link issued for %r", employee.employee_id)
        return token

    def check_token(self, token: str, *, now: Optional[datetime] = None) -> ResetToken:
        if not token:
            raise ValidationError(INVALID_LINK_MESSAGE)
        record = self._tokens.get_by_hash(hash_token(token))
        now = now or now_local()
        if record is None or record.used_at is not None or record.expires_at <= now:
            raise ValidationError(INVALID_LINK_MESSAGE)
        return record

    def reset_with_token(self, token: str, password: str, confirm: str, *, now: Optional[datetime] = None) -> str:
        """Set a new password through a reset link. Returns the employee id."""
        now = now or now_local()
        record = self.check_token(token, now=now)
        self._validate_new_password(password, confirm)

        employee = self._employees.get_by_id(record.employee_pk)
        if not employee:
            raise ValidationError(INVALID_LINK_MESSAGE)

        if not self._tokens.mark_used(record.token_id, used_at=now):
            raise ValidationError(INVALID_LINK_MESSAGE)
        self._employees.set_password(employee.id, password_hash=generate_password_hash(password), password_changed=True)
        logger.info("password reset completed for %r", employee.employee_id)
        return employee.employee_id

    def change_password(self, employee_pk: int, password: str, confirm: str) -> None:
        self._validate_new_password(password, confirm)
        if not self._employees.set_password(
            int(employee_pk), password_hash=generate_password_hash(password), password_changed=True
        ):
            raise ValidationError("Employee does not exist")
        logger.info("password changed for employee pk=%s", employee_pk)

    def must_change_password(self, employee_pk: int) -> bool:
        employee = self._employees.get_by_id(int(employee_pk))
        return bool(employee and not employee.password_changed)
