from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, render_template

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .common.logger import setup_logger
from .container import Container, build_container
from .core.constants import LOGIN_LOCKOUT_SECONDS, LOGIN_MAX_ATTEMPTS, RESET_TOKEN_TTL_MINUTES
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .employees.controller import register as register_employees


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass a prebuilt `container` to skip database wiring (tests use in-memory
    repositories this way).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger = setup_logger(level=logging.DEBUG if app.config["DEBUG"] else logging.INFO)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            login_max_attempts=int(getattr(settings, "LOGIN_MAX_ATTEMPTS", LOGIN_MAX_ATTEMPTS)),
            login_lockout_seconds=int(getattr(settings, "LOGIN_LOCKOUT_SECONDS", LOGIN_LOCKOUT_SECONDS)),
            reset_ttl_minutes=int(getattr(settings, "RESET_TOKEN_TTL_MINUTES", RESET_TOKEN_TTL_MINUTES)),
        )

    register_auth(app, container)
    register_employees(app, container)
    register_attendance(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return render_template("404.html"), 404

    return app
