from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from .model import AttendanceRecord
from .report import IN_PROGRESS, duration_text

CSV_HEADER = ["Name", "Login Time", "Logout Time", "Duration"]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value else IN_PROGRESS


def export_filename(today: date) -> str:
    return f"attendance_{today.strftime('%Y-%m-%d')}.csv"


def export_csv(records: Sequence[AttendanceRecord]) -> str:
    """Render records as CSV: plain header, every data field quoted."""
    if not records:
        raise ValidationError("No records to export")

    out = io.StringIO()
    csv.writer(out, lineterminator="\n").writerow(CSV_HEADER)
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for r in records:
        writer.writerow(
            [
                r.name,
                format_timestamp(r.login_time),
                format_timestamp(r.logout_time),
                duration_text(r),
            ]
        )
    return out.getvalue()
