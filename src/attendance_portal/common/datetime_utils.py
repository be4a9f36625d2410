from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: str | None) -> date | None:
    if not value or not value.strip():
        return None
    return parse_iso_date(value.strip())


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_week(day: date) -> date:
    """Sunday on or before `day`."""
    # weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def format_hours(total_seconds: float) -> str:
    """Format a span as 'Xh MMm' (hours are not capped at 24)."""
    total_minutes = int(total_seconds // 60)
    return f"{total_minutes // 60}h {total_minutes % 60:02d}m"
