"""Client-local login throttle.

A soft deterrent against repeated fat-finger attempts from one login screen.
It is not a security control: state is dropped when the screen goes away.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import LOGIN_LOCKOUT_SECONDS, LOGIN_MAX_ATTEMPTS


@dataclass
class LoginAttemptState:
    failed_count: int = 0
    lockout_until: Optional[datetime] = None

    @property
    def is_clear(self) -> bool:
        return self.failed_count == 0 and self.lockout_until is None


class LoginThrottle:
    def __init__(
        self,
        *,
        max_attempts: int = LOGIN_MAX_ATTEMPTS,
        lockout_seconds: int = LOGIN_LOCKOUT_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._max_attempts = int(max_attempts)
        self._lockout = timedelta(seconds=int(lockout_seconds))
        self._clock = clock
        self._state = LoginAttemptState()

    @property
    def failed_count(self) -> int:
        return self._state.failed_count

    @property
    def lockout_until(self) -> Optional[datetime]:
        return self._state.lockout_until

    @property
    def is_clear(self) -> bool:
        return self._state.is_clear

    def is_locked_out(self, now: Optional[datetime] = None) -> bool:
        now = now or self._clock()
        return self._state.lockout_until is not None and self._state.lockout_until > now

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        if not self.is_locked_out(now):
            return 0
        return math.ceil((self._state.lockout_until - now).total_seconds())

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Reset everything once the lockout window has passed.

        Returns True when a reset happened.
        """
        now = now or self._clock()
        if self._state.lockout_until is not None and self._state.lockout_until <= now:
            self._state = LoginAttemptState()
            return True
        return False

    def record_failure(self, now: Optional[datetime] = None) -> None:
        now = now or self._clock()
        self.tick(now)
        if self.is_locked_out(now):
            return

        self._state.failed_count += 1
        if self._state.failed_count >= self._max_attempts:
            self._state.lockout_until = now + self._lockout

    def record_success(self) -> None:
        self._state = LoginAttemptState()
