class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(AuthenticationError):
    """The employee identifier is unknown."""


class InvalidCredentialError(AuthenticationError):
    """The identifier exists but the password does not match."""


class InactiveAccountError(AuthenticationError):
    """The employee record exists but is marked inactive."""


class StorageCorruptionError(DomainError):
    """The persisted session could not be decoded.

    Never surfaced to users: restore() recovers by dropping the entry.
    """


class TransientFaultError(DomainError):
    """The credential store could not be reached or returned garbage."""
