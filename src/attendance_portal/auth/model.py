from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from ..core.enums import AuthErrorKind, Role
from ..core.exceptions import StorageCorruptionError


@dataclass(frozen=True)
class AuthenticatedUser:
    """The signed-in identity kept in session storage.

    Never carries passwords or hashes.
    """

    id: int
    employee_id: str
    display_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_json(self) -> str:
        return json.dumps(
            {
                "id": self.id,
                "employeeId": self.employee_id,
                "name": self.display_name,
                "role": self.role.value,
            },
            separators=(",", ":"),
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, raw: str) -> "AuthenticatedUser":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise StorageCorruptionError("session payload is not JSON") from e

        if not isinstance(data, dict):
            raise StorageCorruptionError("session payload is not an object")

        try:
            user_id = data["id"]
            employee_id = data["employeeId"]
            name = data["name"]
            role = Role(data["role"])
        except (KeyError, ValueError) as e:
            raise StorageCorruptionError(f"session payload is incomplete: {e}") from e

        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise StorageCorruptionError("session id must be an integer")
        if not isinstance(employee_id, str) or not employee_id or not isinstance(name, str):
            raise StorageCorruptionError("session identity fields are malformed")

        return cls(id=user_id, employee_id=employee_id, display_name=name, role=role)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a login attempt: success with a user, or an error message."""

    success: bool
    error: Optional[str] = None
    kind: Optional[AuthErrorKind] = None
    user: Optional[AuthenticatedUser] = None

    @classmethod
    def ok(cls, user: AuthenticatedUser) -> "AuthResult":
        return cls(success=True, user=user)

    @classmethod
    def fail(cls, kind: AuthErrorKind, error: str) -> "AuthResult":
        return cls(success=False, error=error, kind=kind)
