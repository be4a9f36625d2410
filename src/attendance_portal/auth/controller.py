from __future__ import annotations

from datetime import timedelta

from flask import Flask, flash, g, make_response, redirect, render_template, request, session, url_for

from ..common.logger import get_logger
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import EMPLOYEE_ID_MAX_LENGTH, REMEMBERED_ID_COOKIE
from ..core.exceptions import ValidationError
from ..container import Container
from .guards import current_user, login_required
from .login_screen import LoginScreen
from .storage import FlaskSessionStorage
from .state_machine import AuthStateMachine

logger = get_logger(__name__)

REMEMBER_ME_DAYS = 7
REMEMBERED_ID_MAX_AGE = 30 * 24 * 3600


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=REMEMBER_ME_DAYS)

    @app.before_request
    def restore_session():
        g.auth = AuthStateMachine(container.credential_store, FlaskSessionStorage())
        g.auth.restore()

    @app.context_processor
    def inject_current_user():
        return {"current_user": current_user()}

    def _render_login(*, token: str, screen: LoginScreen, employee_id: str = "", status: int = 200):
        return (
            render_template(
                "login.html",
                screen_token=token,
                employee_id=employee_id,
                remember=bool(request.cookies.get(REMEMBERED_ID_COOKIE)),
                locked_seconds=screen.throttle.remaining_seconds(),
                attempts=screen.throttle.failed_count,
            ),
            status,
        )

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        if g.auth.is_authenticated:
            return redirect(url_for("dashboard"))

        if request.method == "GET":
            token, screen = container.login_screens.open()
            return _render_login(token=token, screen=screen, employee_id=request.cookies.get(REMEMBERED_ID_COOKIE, ""))

        employee_id = request.form.get("employee_id", "")
        password = request.form.get("password", "")
        remember = bool(request.form.get("remember_me"))

        token, screen = container.login_screens.get(request.form.get("screen_token"))

        # Malformed ids never reach the credential store or the throttle.
        try:
            require_max_length(require_non_empty(employee_id, "Employee ID"), "Employee ID", EMPLOYEE_ID_MAX_LENGTH)
        except ValidationError as e:
            flash(str(e), "danger")
            return _render_login(token=token, screen=screen, employee_id=employee_id, status=400)

        result = screen.submit(g.auth, employee_id, password)
        if not result.success:
            flash(result.error, "danger")
            return _render_login(token=token, screen=screen, employee_id=employee_id, status=401)

        container.login_screens.close(token)
        session.permanent = remember
        flash(f"Welcome back, {result.user.display_name}!", "success")

        target = url_for("dashboard")
        if container.password_service.must_change_password(result.user.id):
            flash("Please choose a new password before continuing.", "info")
            target = url_for("change_password")

        resp = make_response(redirect(target))
        if remember:
            resp.set_cookie(
                REMEMBERED_ID_COOKIE,
                result.user.employee_id,
                max_age=REMEMBERED_ID_MAX_AGE,
                httponly=True,
                samesite="Lax",
            )
        else:
            resp.delete_cookie(REMEMBERED_ID_COOKIE)
        return resp

    @app.route("/logout", endpoint="logout")
    def logout():
        g.auth.logout()
        flash("You have been signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/reset-password", methods=["GET", "POST"], endpoint="reset_password")
    def reset_password():
        token = request.values.get("token", "")

        if request.method == "POST":
            try:
                employee_id = container.password_service.reset_with_token(
                    token,
                    request.form.get("password", ""),
                    request.form.get("confirm_password", ""),
                )
                flash("Your password has been reset. Please sign in.", "success")
                resp = make_response(redirect(url_for("login")))
                resp.set_cookie(REMEMBERED_ID_COOKIE, employee_id, httponly=True, samesite="Lax")
                return resp
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("password reset failed")
                flash("Something went wrong while resetting your password.", "danger")
            return render_template("reset_password.html", token=token), 400

        try:
            container.password_service.check_token(token)
        except ValidationError as e:
            flash(str(e), "danger")
            return render_template("reset_password.html", token=None), 400
        return render_template("reset_password.html", token=token)

    @app.route("/me/password", methods=["GET", "POST"], endpoint="change_password")
    @login_required
    def change_password():
        user = current_user()
        forced = container.password_service.must_change_password(user.id)

        if request.method == "POST":
            try:
                container.password_service.change_password(
                    user.id,
                    request.form.get("password", ""),
                    request.form.get("confirm_password", ""),
                )
                flash("Password updated.", "success")
                return redirect(url_for("dashboard"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("password change failed")
                flash("Something went wrong while updating your password.", "danger")

        return render_template("change_password.html", forced=forced, active_page="change_password")
