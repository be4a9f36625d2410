from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.credential_store import CredentialStore, EmployeeCredentialStore
from .auth.login_screen import LoginScreenRegistry
from .auth.mysql_reset_token_repository import MySQLResetTokenRepository
from .auth.password_reset import PasswordService
from .auth.reset_token_repository import ResetTokenRepository
from .core.constants import LOGIN_LOCKOUT_SECONDS, LOGIN_MAX_ATTEMPTS, RESET_TOKEN_TTL_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    reset_tokens_repo: ResetTokenRepository

    credential_store: CredentialStore
    login_screens: LoginScreenRegistry

    employee_service: EmployeeService
    attendance_service: AttendanceService
    password_service: PasswordService


def wire_container(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    reset_tokens_repo: ResetTokenRepository,
    conn: Optional[DatabaseConnection] = None,
    login_max_attempts: int = LOGIN_MAX_ATTEMPTS,
    login_lockout_seconds: int = LOGIN_LOCKOUT_SECONDS,
    reset_ttl_minutes: int = RESET_TOKEN_TTL_MINUTES,
) -> Container:
    """Build services over the given repositories (MySQL or in-memory)."""
    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        reset_tokens_repo=reset_tokens_repo,
        credential_store=EmployeeCredentialStore(employees_repo),
        login_screens=LoginScreenRegistry(
            max_attempts=login_max_attempts,
            lockout_seconds=login_lockout_seconds,
        ),
        employee_service=EmployeeService(employees_repo),
        attendance_service=AttendanceService(attendance_repo),
        password_service=PasswordService(employees_repo, reset_tokens_repo, ttl_minutes=reset_ttl_minutes),
    )


def build_container(
    *,
    db_config: dict,
    login_max_attempts: int = LOGIN_MAX_ATTEMPTS,
    login_lockout_seconds: int = LOGIN_LOCKOUT_SECONDS,
    reset_ttl_minutes: int = RESET_TOKEN_TTL_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reset_tokens_repo=MySQLResetTokenRepository(conn),
        login_max_attempts=login_max_attempts,
        login_lockout_seconds=login_lockout_seconds,
        reset_ttl_minutes=reset_ttl_minutes,
    )
