from __future__ import annotations

from flask import Flask, abort, flash, redirect, render_template, request, url_for

from ..auth.guards import admin_required, current_user
from ..common.datetime_utils import parse_optional_date
from ..common.logger import get_logger
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container

logger = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    def _form_values() -> dict:
        return {
            "employee_id": request.form.get("employee_id", ""),
            "first_name": request.form.get("first_name", ""),
            "last_name": request.form.get("last_name", ""),
            "role": request.form.get("role", Role.EMPLOYEE.value),
            "password": request.form.get("password", ""),
            "email": request.form.get("email", ""),
            "department": request.form.get("department", ""),
            "joining_date": request.form.get("joining_date", ""),
            "status": request.form.get("status", EmployeeStatus.ACTIVE.value),
        }

    def _save(values: dict, *, editing: bool):
        try:
            try:
                joining_date = parse_optional_date(values["joining_date"])
            except ValueError:
                raise ValidationError("Joining date must be YYYY-MM-DD")

            container.employee_service.save_employee(
                current_role=current_user().role,
                employee_id=values["employee_id"],
                first_name=values["first_name"],
                last_name=values["last_name"],
                role=values["role"],
                password=values["password"],
                email=values["email"],
                department=values["department"],
                joining_date=joining_date,
                status=values["status"],
            )
            flash("Employee updated." if editing else "Employee created.", "success")
            return redirect(url_for("admin_employees"))
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("saving employee %r failed", values.get("employee_id"))
            flash("Something went wrong while saving the employee.", "danger")

        return render_template(
            "admin/employee_form.html",
            form=values,
            editing=editing,
            roles=list(Role),
            statuses=list(EmployeeStatus),
            active_page="admin_employees",
        ), 400

    @app.route("/admin/employees", endpoint="admin_employees")
    @admin_required
    def admin_employees():
        employees = container.employee_service.list_employees()
        return render_template("admin/employees.html", employees=employees, active_page="admin_employees")

    @app.route("/admin/employees/new", methods=["GET", "POST"], endpoint="new_employee")
    @admin_required
    def new_employee():
        if request.method == "POST":
            return _save(_form_values(), editing=False)

        form = {"role": Role.EMPLOYEE.value, "status": EmployeeStatus.ACTIVE.value}
        return render_template(
            "admin/employee_form.html",
            form=form,
            editing=False,
            roles=list(Role),
            statuses=list(EmployeeStatus),
            active_page="admin_employees",
        )

    @app.route("/admin/employees/<employee_id>/edit", methods=["GET", "POST"], endpoint="edit_employee")
    @admin_required
    def edit_employee(employee_id: str):
        employee = container.employee_service.get_employee(employee_id)
        if not employee:
            abort(404)

        if request.method == "POST":
            values = _form_values()
            # The login handle is the upsert key; it is not editable here.
            values["employee_id"] = employee.employee_id
            return _save(values, editing=True)

        form = {
            "employee_id": employee.employee_id,
            "first_name": employee.first_name,
            "last_name": employee.last_name,
            "role": employee.role.value,
            "email": employee.email or "",
            "department": employee.department or "",
            "joining_date": employee.joining_date.strftime("%Y-%m-%d") if employee.joining_date else "",
            "status": employee.status.value,
        }
        return render_template(
            "admin/employee_form.html",
            form=form,
            editing=True,
            roles=list(Role),
            statuses=list(EmployeeStatus),
            active_page="admin_employees",
        )

    @app.route("/admin/employees/delete", methods=["POST"], endpoint="delete_employees")
    @admin_required
    def delete_employees():
        user = current_user()
        try:
            pks = [int(v) for v in request.form.getlist("employee_pks")]
            if not pks:
                flash("No employees selected.", "warning")
                return redirect(url_for("admin_employees"))

            deleted = container.employee_service.delete_employees(
                current_role=user.role,
                current_user_pk=user.id,
                employee_pks=pks,
            )
            flash(f"Deleted {deleted} employee(s).", "success")
        except ValueError:
            flash("Invalid employee selection.", "danger")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("bulk delete failed")
            flash("Something went wrong while deleting employees.", "danger")

        return redirect(url_for("admin_employees"))

    @app.route("/admin/employees/<employee_id>/reset-link", methods=["POST"], endpoint="issue_reset_link")
    @admin_required
    def issue_reset_link(employee_id: str):
        try:
            token = container.password_service.issue_reset_token(
                current_role=current_user().role,
                employee_id=employee_id,
            )
            link = url_for("reset_password", token=token, _external=True)
            flash(f"Password reset link (valid for one use): {link}", "info")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("issuing reset link for %r failed", employee_id)
            flash("Something went wrong while creating the reset link.", "danger")

        return redirect(url_for("admin_employees"))
