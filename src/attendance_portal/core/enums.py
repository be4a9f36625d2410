from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access checks."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AuthState(str, Enum):
    """Lifecycle of the per-browser authentication state."""

    UNINITIALIZED = "uninitialized"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthErrorKind(str, Enum):
    """Why a login attempt did not succeed."""

    NOT_FOUND = "not_found"
    INVALID_CREDENTIAL = "invalid_credential"
    INACTIVE = "inactive"
    TRANSIENT = "transient"
    LOCKED_OUT = "locked_out"
    BUSY = "busy"
    ALREADY_AUTHENTICATED = "already_authenticated"
