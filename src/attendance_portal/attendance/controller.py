from __future__ import annotations

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, current_user, login_required
from ..common.datetime_utils import parse_optional_date
from ..common.logger import get_logger
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container
from .report import duration_text

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    app.jinja_env.filters["duration"] = duration_text

    def _filter_args() -> dict:
        search = (request.args.get("search") or "").strip()
        try:
            start = parse_optional_date(request.args.get("start"))
            end = parse_optional_date(request.args.get("end"))
        except ValueError:
            flash("Dates must be YYYY-MM-DD", "warning")
            start = end = None
        return {"search": search, "start": start, "end": end}

    @app.route("/", endpoint="dashboard")
    @login_required
    def dashboard():
        filters = _filter_args()
        data = container.attendance_service.build_dashboard(current_user(), **filters)
        return render_template(
            "dashboard.html",
            data=data,
            search=filters["search"],
            start=filters["start"].strftime("%Y-%m-%d") if filters["start"] else "",
            end=filters["end"].strftime("%Y-%m-%d") if filters["end"] else "",
            active_page="dashboard",
        )

    @app.route("/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        user = current_user()
        try:
            container.attendance_service.clock_in(user.id, request.form.get("name") or user.display_name)
            flash("Clocked in successfully!", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("clock-in failed for %r", user.employee_id)
            flash("Something went wrong while clocking in.", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        user = current_user()
        try:
            container.attendance_service.clock_out(user.id)
            flash("Clocked out successfully!", "success")
        except ValidationError as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("clock-out failed for %r", user.employee_id)
            flash("Something went wrong while clocking out.", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/attendance/clear", methods=["POST"], endpoint="clear_attendance")
    @admin_required
    def clear_attendance():
        try:
            deleted = container.attendance_service.clear_all(current_role=current_user().role)
            flash(f"Cleared {deleted} attendance record(s).", "success")
        except AuthorizationError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("clearing attendance failed")
            flash("Something went wrong while clearing records.", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/attendance/export.csv", endpoint="export_attendance")
    @login_required
    def export_attendance():
        filters = _filter_args()
        try:
            filename, text = container.attendance_service.export(current_user(), **filters)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("dashboard", **{k: v for k, v in request.args.items() if v}))

        return app.response_class(
            text.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
