from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class ResetToken:
    token_id: int
    employee_pk: int
    token_hash: str
    expires_at: datetime
    used_at: Optional[datetime] = None


class ResetTokenRepository(Protocol):
    def create(self, *, employee_pk: int, token_hash: str, expires_at: datetime) -> int:
        raise NotImplementedError

    def get_by_hash(self, token_hash: str) -> Optional[ResetToken]:
        raise NotImplementedError

    def mark_used(self, token_id: int, *, used_at: datetime) -> bool:
        raise NotImplementedError
