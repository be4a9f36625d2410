from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one clock-in/clock-out session."""

    record_id: int
    employee_pk: int
    name: str
    login_time: datetime
    logout_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.logout_time is None


@dataclass(frozen=True)
class AttendanceStats:
    total_records: int
    active_sessions: int
    all_time_hours: str
    today_hours: str
    week_hours: str
    filtered_records: int
    total_filtered_hours: str
