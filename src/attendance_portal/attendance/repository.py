from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_open_for_employee(self, employee_pk: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, *, employee_pk: int, name: str, login_time: datetime) -> int:
        raise NotImplementedError

    def close(self, record_id: int, *, logout_time: datetime) -> bool:
        raise NotImplementedError

    def list_all(self, *, employee_pk: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """Every matching record, newest first; `employee_pk=None` means every employee."""
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError
