from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..auth.model import AuthenticatedUser
from ..common.datetime_utils import now_local
from ..common.logger import get_logger
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .export import export_csv, export_filename
from .model import AttendanceRecord, AttendanceStats
from .report import compute_stats, filter_records, has_filters
from .repository import AttendanceRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttendanceDashboard:
    records: Sequence[AttendanceRecord]
    stats: AttendanceStats
    open_record: Optional[AttendanceRecord]
    filtered: bool
    # Rows beyond the table limit still count in `stats` and the export.
    truncated: bool = False


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, *, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self._attendance = attendance
        self._history_limit = int(history_limit)

    def clock_in(self, employee_pk: int, name: str, *, now: datetime | None = None) -> int:
        name = require_non_empty(name, "Name")
        if self._attendance.get_open_for_employee(employee_pk):
            raise ValidationError("You are already clocked in!")

        now = now or now_local()
        record_id = self._attendance.create(employee_pk=employee_pk, name=name, login_time=now)
        logger.info("clock-in: employee pk=%s record=%s", employee_pk, record_id)
        return record_id

    def clock_out(self, employee_pk: int, *, now: datetime | None = None) -> None:
        record = self._attendance.get_open_for_employee(employee_pk)
        if not record:
            raise ValidationError("You are not currently clocked in!")

        now = now or now_local()
        if not self._attendance.close(record.record_id, logout_time=now):
            raise ValidationError("You are not currently clocked in!")
        logger.info("clock-out: employee pk=%s record=%s", employee_pk, record.record_id)

    def clear_all(self, *, current_role: Role) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to clear attendance records")
        deleted = self._attendance.delete_all()
        logger.info("attendance log cleared (%d records)", deleted)
        return deleted

    def list_visible(self, user: AuthenticatedUser) -> Sequence[AttendanceRecord]:
        """Admins see every record, employees only their own."""
        employee_pk = None if user.is_admin else user.id
        return self._attendance.list_all(employee_pk=employee_pk)

    def build_dashboard(
        self,
        user: AuthenticatedUser,
        *,
        search: str = "",
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> AttendanceDashboard:
        now = now or now_local()
        records = self.list_visible(user)
        filtered = filter_records(records, search=search, start=start, end=end)
        return AttendanceDashboard(
            records=filtered[: self._history_limit],
            stats=compute_stats(records, filtered, now=now),
            open_record=self._attendance.get_open_for_employee(user.id),
            filtered=has_filters(search=search, start=start, end=end),
            truncated=len(filtered) > self._history_limit,
        )

    def export(
        self,
        user: AuthenticatedUser,
        *,
        search: str = "",
        start: Optional[date] = None,
        end: Optional[date] = None,
        now: datetime | None = None,
    ) -> tuple[str, str]:
        """Return (filename, csv_text) for the records the user is looking at."""
        now = now or now_local()
        records = self.list_visible(user)
        if has_filters(search=search, start=start, end=end):
            records = filter_records(records, search=search, start=start, end=end)
        return export_filename(now.date()), export_csv(records)
