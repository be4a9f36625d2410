from __future__ import annotations

import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.logger import get_logger
from ..core.constants import LOGIN_LOCKOUT_SECONDS, LOGIN_MAX_ATTEMPTS
from ..core.enums import AuthErrorKind
from .model import AuthResult
from .state_machine import AuthStateMachine
from .throttle import LoginThrottle

logger = get_logger(__name__)

TOO_MANY_ATTEMPTS_MESSAGE = "Too many failed attempts. Please wait a moment before trying again."
IN_PROGRESS_MESSAGE = "A sign-in request is already in progress."


def locked_message(lockout_seconds: int) -> str:
    return (
        "Account temporarily locked due to multiple failed attempts. "
        f"Please wait {lockout_seconds} seconds."
    )


class LoginScreen:
    """One rendered login form: its throttle plus the in-flight guard."""

    def __init__(self, throttle: LoginThrottle, *, lockout_seconds: int = LOGIN_LOCKOUT_SECONDS,
                 clock: Callable[[], datetime] = now_local):
        self.throttle = throttle
        self._lockout_seconds = int(lockout_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._pending = False
        self.last_seen = clock()

    @property
    def pending(self) -> bool:
        return self._pending

    def is_stale(self, now: datetime, idle: timedelta) -> bool:
        """Untouched for `idle` and not mid-request, whatever the throttle holds."""
        return not self._pending and now - self.last_seen >= idle

    def tick(self, now: Optional[datetime] = None) -> None:
        with self._lock:
            self.throttle.tick(now or self._clock())

    def submit(self, auth: AuthStateMachine, employee_id: str, password: str,
               *, now: Optional[datetime] = None) -> AuthResult:
        now = now or self._clock()

        with self._lock:
            self.last_seen = now
            self.throttle.tick(now)
            if self.throttle.is_locked_out(now):
                return AuthResult.fail(AuthErrorKind.LOCKED_OUT, TOO_MANY_ATTEMPTS_MESSAGE)
            if self._pending:
                return AuthResult.fail(AuthErrorKind.BUSY, IN_PROGRESS_MESSAGE)
            self._pending = True

        try:
            result = auth.login(employee_id, password)
        finally:
            with self._lock:
                self._pending = False

        with self._lock:
            if result.success:
                self.throttle.record_success()
                return result
            if result.kind == AuthErrorKind.ALREADY_AUTHENTICATED:
                return result

            # Service faults count the same as bad credentials.
            self.throttle.record_failure(now)
            if self.throttle.is_locked_out(now):
                logger.info("login screen locked after %d failures", self.throttle.failed_count)
                return AuthResult.fail(AuthErrorKind.LOCKED_OUT, locked_message(self._lockout_seconds))
            return result


class LoginScreenRegistry:
    """Login screens keyed by the token rendered into each login form.

    A fresh page load mints a new token, so throttle state never outlives the
    page it belongs to.
    """

    def __init__(
        self,
        *,
        max_attempts: int = LOGIN_MAX_ATTEMPTS,
        lockout_seconds: int = LOGIN_LOCKOUT_SECONDS,
        idle_seconds: int = 15 * 60,
        clock: Callable[[], datetime] = now_local,
    ):
        self._max_attempts = int(max_attempts)
        self._lockout_seconds = int(lockout_seconds)
        self._idle = timedelta(seconds=int(idle_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._screens: dict[str, LoginScreen] = {}

    def __len__(self) -> int:
        return len(self._screens)

    def _new_screen(self) -> LoginScreen:
        throttle = LoginThrottle(
            max_attempts=self._max_attempts,
            lockout_seconds=self._lockout_seconds,
            clock=self._clock,
        )
        return LoginScreen(throttle, lockout_seconds=self._lockout_seconds, clock=self._clock)

    def open(self) -> tuple[str, LoginScreen]:
        """Mount a new screen (GET of the login page)."""
        token = secrets.token_urlsafe(16)
        with self._lock:
            self._sweep_locked(self._clock())
            screen = self._screens[token] = self._new_screen()
        return token, screen

    def get(self, token: Optional[str]) -> tuple[str, LoginScreen]:
        """Screen for a posted form.

        Unknown, expired or missing tokens are never stored as given; a new
        server-minted screen is opened instead.
        """
        if token:
            with self._lock:
                self._sweep_locked(self._clock())
                screen = self._screens.get(token)
            if screen is not None:
                return token, screen
        return self.open()

    def close(self, token: Optional[str]) -> None:
        """Unmount: forget the screen and its throttle."""
        if not token:
            return
        with self._lock:
            self._screens.pop(token, None)

    def sweep(self, now: Optional[datetime] = None) -> int:
        with self._lock:
            return self._sweep_locked(now or self._clock())

    def _sweep_locked(self, now: datetime) -> int:
        stale = []
        for token, screen in self._screens.items():
            screen.tick(now)
            if screen.is_stale(now, self._idle):
                stale.append(token)
        for token in stale:
            del self._screens[token]
        return len(stale)
