from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .reset_token_repository import ResetToken, ResetTokenRepository


class MySQLResetTokenRepository(ResetTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_pk: int, token_hash: str, expires_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO password_reset_tokens(employee_pk, token_hash, expires_at)
                VALUES(%s,%s,%s)
                """,
                (int(employee_pk), token_hash, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_hash(self, token_hash: str) -> Optional[ResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT token_id, employee_pk, token_hash, expires_at, used_at
                FROM password_reset_tokens
                WHERE token_hash=%s
                """,
                (token_hash,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ResetToken(
                token_id=int(r["token_id"]),
                employee_pk=int(r["employee_pk"]),
                token_hash=r["token_hash"],
                expires_at=r["expires_at"],
                used_at=r.get("used_at"),
            )

    def mark_used(self, token_id: int, *, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE password_reset_tokens SET used_at=%s WHERE token_id=%s AND used_at IS NULL",
                (used_at, int(token_id)),
            )
            return cur.rowcount > 0
