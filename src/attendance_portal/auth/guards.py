from __future__ import annotations

from functools import wraps

from flask import flash, g, redirect, render_template, url_for


def current_user():
    auth = getattr(g, "auth", None)
    return auth.current_user() if auth else None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return redirect(url_for("login"))

        if not user.is_admin:
            return render_template("403.html", current_user=user), 403

        return view(*args, **kwargs)

    return wrapper
