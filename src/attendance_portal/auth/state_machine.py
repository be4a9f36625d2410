from __future__ import annotations

from typing import Optional

from ..common.logger import get_logger
from ..core.constants import SESSION_STORAGE_KEY
from ..core.enums import AuthErrorKind, AuthState
from ..core.exceptions import (
    InactiveAccountError,
    InvalidCredentialError,
    NotFoundError,
    StorageCorruptionError,
    TransientFaultError,
)
from ..employees.service import normalize_employee_id
from .credential_store import CredentialStore
from .model import AuthenticatedUser, AuthResult
from .storage import SessionStorage

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "Employee ID not found. Please check with your administrator."
INCORRECT_PASSWORD_MESSAGE = "Incorrect password. Please try again."
INACTIVE_MESSAGE = "This account is inactive. Please contact your administrator."
GENERIC_FAILURE_MESSAGE = "Something went wrong while signing in. Please try again."
ALREADY_SIGNED_IN_MESSAGE = "You are already signed in."


class AuthStateMachine:
    """Owns the signed-in identity of one browser session.

    UNINITIALIZED -> RESTORING -> AUTHENTICATED | ANONYMOUS, then
    AUTHENTICATED <-> ANONYMOUS through logout() and login().
    Storage is written before a state change is reported, so the two never
    disagree once a call returns.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        storage: SessionStorage,
        *,
        storage_key: str = SESSION_STORAGE_KEY,
    ):
        self._credentials = credentials
        self._storage = storage
        self._key = storage_key
        self._state = AuthState.UNINITIALIZED
        self._user: Optional[AuthenticatedUser] = None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state == AuthState.AUTHENTICATED

    def current_user(self) -> Optional[AuthenticatedUser]:
        return self._user

    def restore(self) -> AuthState:
        if self._state != AuthState.UNINITIALIZED:
            return self._state

        self._state = AuthState.RESTORING
        raw = self._storage.get(self._key)
        if raw is None:
            self._state = AuthState.ANONYMOUS
            return self._state

        try:
            self._user = AuthenticatedUser.from_json(raw)
        except StorageCorruptionError as e:
            logger.warning("dropping unreadable session: %s", e)
            self._storage.delete(self._key)
            self._user = None
            self._state = AuthState.ANONYMOUS
            return self._state

        self._state = AuthState.AUTHENTICATED
        return self._state

    def _authenticate(self, employee_id: str, password: str) -> AuthenticatedUser:
        record = self._credentials.find_by_normalized_id(employee_id)
        if record is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        if not self._credentials.verify_password(record, password):
            raise InvalidCredentialError(INCORRECT_PASSWORD_MESSAGE)
        if not record.is_active:
            raise InactiveAccountError(INACTIVE_MESSAGE)

        return AuthenticatedUser(
            id=record.id,
            employee_id=record.employee_id,
            display_name=record.display_name,
            role=record.role,
        )

    def login(self, employee_id: str, password: str) -> AuthResult:
        if self._state == AuthState.UNINITIALIZED:
            self.restore()
        if self._state == AuthState.AUTHENTICATED:
            return AuthResult.fail(AuthErrorKind.ALREADY_AUTHENTICATED, ALREADY_SIGNED_IN_MESSAGE)

        normalized = normalize_employee_id(employee_id)
        try:
            user = self._authenticate(normalized, password)
            self._storage.set(self._key, user.to_json())
        except NotFoundError as e:
            logger.info("login rejected, unknown employee id %r", normalized)
            return AuthResult.fail(AuthErrorKind.NOT_FOUND, str(e))
        except InvalidCredentialError as e:
            logger.info("login rejected, wrong password for %r", normalized)
            return AuthResult.fail(AuthErrorKind.INVALID_CREDENTIAL, str(e))
        except InactiveAccountError as e:
            logger.info("login rejected, inactive account %r", normalized)
            return AuthResult.fail(AuthErrorKind.INACTIVE, str(e))
        except TransientFaultError as e:
            logger.warning("credential store unavailable: %s", e)
            return AuthResult.fail(AuthErrorKind.TRANSIENT, GENERIC_FAILURE_MESSAGE)
        except Exception:
            logger.exception("unexpected error during login for %r", normalized)
            return AuthResult.fail(AuthErrorKind.TRANSIENT, GENERIC_FAILURE_MESSAGE)

        self._user = user
        self._state = AuthState.AUTHENTICATED
        logger.info("employee %r signed in", user.employee_id)
        return AuthResult.ok(user)

    def logout(self) -> None:
        self._storage.delete(self._key)
        if self._user is not None:
            logger.info("employee %r signed out", self._user.employee_id)
        self._user = None
        self._state = AuthState.ANONYMOUS
