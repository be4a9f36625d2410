from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from attendance_portal.auth.credential_store import EmployeeCredentialStore
from attendance_portal.auth.login_screen import (
    IN_PROGRESS_MESSAGE,
    TOO_MANY_ATTEMPTS_MESSAGE,
    LoginScreen,
    LoginScreenRegistry,
    locked_message,
)
from attendance_portal.auth.model import AuthResult
from attendance_portal.auth.state_machine import AuthStateMachine
from attendance_portal.auth.storage import InMemorySessionStorage
from attendance_portal.auth.throttle import LoginThrottle
from attendance_portal.core.enums import AuthErrorKind


class CountingCredentials(EmployeeCredentialStore):
    def __init__(self, employees):
        super().__init__(employees)
        self.lookups = 0

    def find_by_normalized_id(self, employee_id):
        self.lookups += 1
        return super().find_by_normalized_id(employee_id)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock(fixed_now):
    return Clock(fixed_now)


@pytest.fixture
def credentials(employees_repo):
    employees_repo.add("e1001", "Secret@1", full_name="Alice Johnson")
    return CountingCredentials(employees_repo)


@pytest.fixture
def screen(clock):
    throttle = LoginThrottle(max_attempts=5, lockout_seconds=30, clock=clock)
    return LoginScreen(throttle, lockout_seconds=30, clock=clock)


def _auth(credentials):
    auth = AuthStateMachine(credentials, InMemorySessionStorage())
    auth.restore()
    return auth


def test_fifth_failure_reports_lockout(screen, credentials):
    auth = _auth(credentials)
    for _ in range(4):
        result = screen.submit(auth, "e1001", "wrong")
        assert result.kind == AuthErrorKind.INVALID_CREDENTIAL

    result = screen.submit(auth, "e1001", "wrong")

    assert result.kind == AuthErrorKind.LOCKED_OUT
    assert result.error == locked_message(30)
    assert "Please wait 30 seconds" in result.error


def test_locked_screen_does_not_reach_credential_store(screen, credentials, clock):
    auth = _auth(credentials)
    for _ in range(5):
        screen.submit(auth, "e1001", "wrong")
    lookups = credentials.lookups

    clock.advance(10)
    result = screen.submit(auth, "e1001", "Secret@1")

    assert result.kind == AuthErrorKind.LOCKED_OUT
    assert result.error == TOO_MANY_ATTEMPTS_MESSAGE
    assert credentials.lookups == lookups
    assert not auth.is_authenticated


def test_correct_password_after_lockout_expires(screen, credentials, clock):
    auth = _auth(credentials)
    for _ in range(5):
        screen.submit(auth, "e1001", "wrong")

    clock.advance(31)
    result = screen.submit(auth, "e1001", "Secret@1")

    assert result.success
    assert screen.throttle.failed_count == 0
    assert screen.throttle.lockout_until is None


def test_unknown_ids_count_as_failures(screen, credentials):
    auth = _auth(credentials)
    for _ in range(5):
        result = screen.submit(auth, "ghost", "x")

    assert result.kind == AuthErrorKind.LOCKED_OUT


def test_success_clears_failed_count(screen, credentials):
    auth = _auth(credentials)
    screen.submit(auth, "e1001", "wrong")
    screen.submit(auth, "e1001", "wrong")

    assert screen.submit(auth, "e1001", "Secret@1").success
    assert screen.throttle.is_clear


def test_already_signed_in_is_not_a_failure(screen, credentials):
    auth = _auth(credentials)
    screen.submit(auth, "e1001", "Secret@1")

    result = screen.submit(auth, "e1001", "Secret@1")

    assert result.kind == AuthErrorKind.ALREADY_AUTHENTICATED
    assert screen.throttle.failed_count == 0


def test_second_submission_while_pending_is_rejected(screen):
    entered = threading.Event()
    release = threading.Event()
    results = {}

    class SlowAuth:
        def login(self, employee_id, password):
            entered.set()
            release.wait(timeout=5)
            return AuthResult.fail(AuthErrorKind.INVALID_CREDENTIAL, "nope")

    def first():
        results["first"] = screen.submit(SlowAuth(), "e1001", "wrong")

    worker = threading.Thread(target=first)
    worker.start()
    assert entered.wait(timeout=5)

    assert screen.pending
    second = screen.submit(SlowAuth(), "e1001", "wrong")
    release.set()
    worker.join(timeout=5)

    assert second.kind == AuthErrorKind.BUSY
    assert second.error == IN_PROGRESS_MESSAGE
    assert results["first"].kind == AuthErrorKind.INVALID_CREDENTIAL
    assert screen.throttle.failed_count == 1
    assert not screen.pending


def test_registry_gives_each_page_load_fresh_state(clock, credentials):
    registry = LoginScreenRegistry(max_attempts=5, lockout_seconds=30, clock=clock)
    auth = _auth(credentials)

    token, screen = registry.open()
    for _ in range(5):
        screen.submit(auth, "e1001", "wrong")
    assert registry.get(token)[1] is screen

    other_token, other = registry.open()

    assert other_token != token
    assert other.throttle.is_clear
    assert not other.throttle.is_locked_out()


def test_registry_never_stores_client_chosen_tokens(clock):
    registry = LoginScreenRegistry(clock=clock)

    token, screen = registry.get("made-up-token")

    assert token != "made-up-token"
    assert screen.throttle.is_clear
    assert registry.get(token)[1] is screen
    assert registry.get("made-up-token")[0] not in {"made-up-token", token}
    assert registry.get(None)[0] != token
    assert len(registry) == 3


def test_registry_close(clock):
    registry = LoginScreenRegistry(clock=clock)

    token, _ = registry.open()
    registry.close(token)
    registry.close(None)

    assert len(registry) == 0


def test_sweep_drops_idle_screens_whatever_their_failures(clock, credentials):
    registry = LoginScreenRegistry(max_attempts=5, lockout_seconds=30, idle_seconds=60, clock=clock)
    auth = _auth(credentials)

    registry.open()
    token, screen = registry.open()
    clock.advance(30)
    screen.submit(auth, "e1001", "wrong")

    clock.advance(31)
    assert registry.sweep() == 1
    assert registry.get(token)[1] is screen
    assert screen.throttle.failed_count == 1

    clock.advance(61)
    assert registry.sweep() == 1
    assert len(registry) == 0


def test_forged_tokens_do_not_accumulate(clock, credentials):
    registry = LoginScreenRegistry(max_attempts=5, lockout_seconds=30, idle_seconds=60, clock=clock)
    auth = _auth(credentials)

    for i in range(500):
        _, screen = registry.get(f"forged-{i}")
        screen.submit(auth, "ghost", "wrong")

    clock.advance(30 * 24 * 3600)
    registry.sweep()

    assert len(registry) == 0


def test_sweep_keeps_screen_with_request_in_flight(clock):
    registry = LoginScreenRegistry(idle_seconds=60, clock=clock)
    entered = threading.Event()
    release = threading.Event()

    class SlowAuth:
        def login(self, employee_id, password):
            entered.set()
            release.wait(timeout=5)
            return AuthResult.fail(AuthErrorKind.INVALID_CREDENTIAL, "nope")

    _, screen = registry.open()
    worker = threading.Thread(target=lambda: screen.submit(SlowAuth(), "e1001", "wrong"))
    worker.start()
    assert entered.wait(timeout=5)

    clock.advance(120)
    swept = registry.sweep()
    remaining = len(registry)
    release.set()
    worker.join(timeout=5)

    assert swept == 0
    assert remaining == 1
