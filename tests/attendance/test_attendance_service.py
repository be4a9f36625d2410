from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from attendance_portal.attendance.report import compute_stats, duration_text, filter_records
from attendance_portal.attendance.service import AttendanceService
from attendance_portal.auth.model import AuthenticatedUser
from attendance_portal.core.enums import Role
from attendance_portal.core.exceptions import AuthorizationError, ValidationError

ADMIN = AuthenticatedUser(id=1, employee_id="admin", display_name="Admin User", role=Role.ADMIN)
ALICE = AuthenticatedUser(id=2, employee_id="e1001", display_name="Alice Johnson", role=Role.EMPLOYEE)


@pytest.fixture
def service(attendance_repo):
    return AttendanceService(attendance_repo)


def test_clock_in_and_out(service, attendance_repo, fixed_now):
    record_id = service.clock_in(ALICE.id, " Alice Johnson ", now=fixed_now)
    service.clock_out(ALICE.id, now=fixed_now + timedelta(hours=8, minutes=5))

    rec = attendance_repo.records[record_id]
    assert rec.name == "Alice Johnson"
    assert rec.login_time == fixed_now
    assert duration_text(rec) == "8h 5m"


def test_clock_in_requires_name(service, fixed_now):
    with pytest.raises(ValidationError, match="Name is required"):
        service.clock_in(ALICE.id, "   ", now=fixed_now)


def test_double_clock_in_rejected(service, fixed_now):
    service.clock_in(ALICE.id, "Alice", now=fixed_now)

    with pytest.raises(ValidationError, match="already clocked in"):
        service.clock_in(ALICE.id, "Alice", now=fixed_now + timedelta(minutes=1))


def test_clock_out_without_open_record(service, fixed_now):
    with pytest.raises(ValidationError, match="not currently clocked in"):
        service.clock_out(ALICE.id, now=fixed_now)


def test_employees_see_only_their_records(service, attendance_repo, fixed_now):
    attendance_repo.add(ADMIN.id, "Admin User", fixed_now - timedelta(hours=3), fixed_now - timedelta(hours=2))
    attendance_repo.add(ALICE.id, "Alice Johnson", fixed_now - timedelta(hours=1))

    assert [r.name for r in service.list_visible(ALICE)] == ["Alice Johnson"]
    assert len(service.list_visible(ADMIN)) == 2


def test_clear_all_is_admin_only(service, attendance_repo, fixed_now):
    attendance_repo.add(ALICE.id, "Alice Johnson", fixed_now)

    with pytest.raises(AuthorizationError):
        service.clear_all(current_role=Role.EMPLOYEE)
    assert service.clear_all(current_role=Role.ADMIN) == 1
    assert attendance_repo.records == {}


def test_duration_of_open_record(attendance_repo, fixed_now):
    rec = attendance_repo.add(ALICE.id, "Alice", fixed_now)

    assert duration_text(rec) == "In Progress"


def test_filter_by_name_is_case_insensitive(attendance_repo, fixed_now):
    attendance_repo.add(1, "Alice Johnson", fixed_now)
    attendance_repo.add(2, "Rahul Sharma", fixed_now)

    assert [r.name for r in filter_records(attendance_repo.list_all(), search="JOHN")] == ["Alice Johnson"]


def test_date_range_needs_both_bounds(attendance_repo, fixed_now):
    attendance_repo.add(1, "Early", datetime(2026, 1, 20, 9, 0))
    attendance_repo.add(1, "Late", datetime(2026, 2, 3, 23, 59))
    records = attendance_repo.list_all()

    only_start = filter_records(records, start=date(2026, 2, 1))
    both = filter_records(records, start=date(2026, 2, 1), end=date(2026, 2, 3))

    assert len(only_start) == 2
    assert [r.name for r in both] == ["Late"]


def test_stats(attendance_repo, fixed_now):
    # Sunday, start of the current week
    attendance_repo.add(1, "Alice", datetime(2026, 2, 1, 9, 0), datetime(2026, 2, 1, 11, 30))
    # Previous week
    attendance_repo.add(1, "Alice", datetime(2026, 1, 30, 9, 0), datetime(2026, 1, 30, 10, 0))
    # Today, closed and open
    attendance_repo.add(2, "Rahul", datetime(2026, 2, 4, 8, 0), datetime(2026, 2, 4, 9, 5))
    attendance_repo.add(1, "Alice", datetime(2026, 2, 4, 9, 30))
    records = attendance_repo.list_all()
    filtered = filter_records(records, search="rahul")

    stats = compute_stats(records, filtered, now=fixed_now)

    assert stats.total_records == 4
    assert stats.active_sessions == 1
    assert stats.all_time_hours == "4h 35m"
    assert stats.today_hours == "1h 05m"
    assert stats.week_hours == "3h 35m"
    assert stats.filtered_records == 1
    assert stats.total_filtered_hours == "1h 05m"


def test_dashboard_marks_filtering(service, attendance_repo, fixed_now):
    attendance_repo.add(ALICE.id, "Alice Johnson", fixed_now - timedelta(hours=2))

    plain = service.build_dashboard(ALICE, now=fixed_now)
    searched = service.build_dashboard(ALICE, search="bob", now=fixed_now)

    assert not plain.filtered
    assert plain.open_record is not None
    assert searched.filtered
    assert searched.records == []
    assert searched.stats.total_records == 1


def test_totals_and_export_cover_every_record(attendance_repo, fixed_now):
    service = AttendanceService(attendance_repo, history_limit=200)
    for i in range(250):
        login = fixed_now - timedelta(days=i + 1)
        attendance_repo.add(1 + i % 2, f"Worker {i % 2}", login, login + timedelta(hours=1))
    # Oldest session left open, far past the table limit.
    attendance_repo.add(3, "Night Owl", fixed_now - timedelta(days=400))

    data = service.build_dashboard(ADMIN, now=fixed_now)
    _, csv_text = service.export(ADMIN, now=fixed_now)

    assert len(data.records) == 200
    assert data.truncated
    assert data.stats.total_records == 251
    assert data.stats.active_sessions == 1
    assert data.stats.all_time_hours == "250h 00m"
    assert len(csv_text.splitlines()) == 252
    assert '"Night Owl"' in csv_text.splitlines()[-1]


def test_date_filter_reaches_past_table_limit(attendance_repo, fixed_now):
    service = AttendanceService(attendance_repo, history_limit=200)
    for i in range(250):
        login = fixed_now - timedelta(days=i + 1)
        attendance_repo.add(1, "Worker", login, login + timedelta(hours=2))
    old_day = (fixed_now - timedelta(days=240)).date()

    data = service.build_dashboard(ADMIN, start=old_day, end=old_day, now=fixed_now)

    assert len(data.records) == 1
    assert not data.truncated
    assert data.stats.filtered_records == 1
    assert data.stats.total_filtered_hours == "2h 00m"
