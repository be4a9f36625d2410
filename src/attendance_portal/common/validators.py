from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def optional_email(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    value = value.strip()
    if not _EMAIL_RE.match(value):
        raise ValidationError("Email address is not valid")
    return value


def require_matching(value: str, confirm: str, message: str = "Passwords do not match") -> str:
    if value != confirm:
        raise ValidationError(message)
    return value
