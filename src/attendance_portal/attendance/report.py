from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import format_hours, start_of_week
from .model import AttendanceRecord, AttendanceStats

IN_PROGRESS = "In Progress"


def filter_records(
    records: Iterable[AttendanceRecord],
    *,
    search: str = "",
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[AttendanceRecord]:
    """Name substring match (case-insensitive); the date range only applies when both ends are set."""
    needle = (search or "").lower()
    out = []
    for r in records:
        if needle not in r.name.lower():
            continue
        if start and end and not (start <= r.login_time.date() <= end):
            continue
        out.append(r)
    return out


def has_filters(*, search: str = "", start: Optional[date] = None, end: Optional[date] = None) -> bool:
    return bool(search or start or end)


def worked_seconds(records: Iterable[AttendanceRecord]) -> float:
    """Total closed-session time; open sessions do not count yet."""
    return sum(
        (r.logout_time - r.login_time).total_seconds()
        for r in records
        if r.logout_time is not None
    )


def duration_text(record: AttendanceRecord) -> str:
    if record.logout_time is None:
        return IN_PROGRESS
    minutes = int((record.logout_time - record.login_time).total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def compute_stats(
    records: Sequence[AttendanceRecord],
    filtered: Sequence[AttendanceRecord],
    *,
    now: datetime,
) -> AttendanceStats:
    today = now.date()
    week_start = start_of_week(today)

    today_records = [r for r in records if r.login_time.date() >= today]
    week_records = [r for r in records if r.login_time.date() >= week_start]

    return AttendanceStats(
        total_records=len(records),
        active_sessions=sum(1 for r in records if r.is_open),
        all_time_hours=format_hours(worked_seconds(records)),
        today_hours=format_hours(worked_seconds(today_records)),
        week_hours=format_hours(worked_seconds(week_records)),
        filtered_records=len(filtered),
        total_filtered_hours=format_hours(worked_seconds(filtered)),
    )
