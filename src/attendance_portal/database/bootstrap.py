from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..common.logger import get_logger
from .connection import DBConfig, DatabaseConnection

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# (employee_id, first, last, role, password, email, department, joining_date)
DEMO_EMPLOYEES = [
    ("admin", "Admin", "User", "admin", "Admin@123", "admin@example.com", "Operations", "2023-01-10"),
    ("1001", "Alice", "Johnson", "employee", "Alice@1001", "alice@example.com", "Engineering", "2023-03-01"),
    ("1002", "Rahul", "Sharma", "employee", "Rahul@1002", "rahul@example.com", "Finance", "2023-06-15"),
]


def _connect(db_config: dict, *, with_database: bool = True):
    return DatabaseConnection(DBConfig.from_dict(db_config)).connect(with_database=with_database)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied to %s", target.describe())


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo accounts shown on the login page."""
    conn = _connect(db_config)
    try:
        cur = conn.cursor(dictionary=True)

        for employee_id, first, last, role, password, email, department, joined in DEMO_EMPLOYEES:
            password_hash = generate_password_hash(password)
            full_name = f"{first} {last}"
            cur.execute("SELECT id FROM employees WHERE employee_id=%s", (employee_id,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE employees
                    SET first_name=%s, last_name=%s, full_name=%s, role=%s, email=%s,
                        department=%s, joining_date=%s, password_hash=%s, status='active'
                    WHERE id=%s
                    """,
                    (first, last, full_name, role, email, department, joined, password_hash, existing["id"]),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO employees
                        (employee_id, first_name, last_name, full_name, role, email,
                         department, joining_date, password_hash, password_changed)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, 1)
                    """,
                    (employee_id, first, last, full_name, role, email, department, joined, password_hash),
                )

        conn.commit()
    finally:
        conn.close()
    logger.info("demo employees ready (%d)", len(DEMO_EMPLOYEES))


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
