from __future__ import annotations

from typing import Optional, Protocol

from flask import session


class SessionStorage(Protocol):
    """Key-value storage scoped to one browser profile."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class FlaskSessionStorage(SessionStorage):
    """Backed by Flask's signed session cookie.

    Must be used inside a request context.
    """

    def get(self, key: str) -> Optional[str]:
        value = session.get(key)
        if value is None:
            return None
        # Anything that is not the string we wrote is handed back as text so
        # the reader treats it as corrupt and drops it.
        return value if isinstance(value, str) else str(value)

    def set(self, key: str, value: str) -> None:
        session[key] = value

    def delete(self, key: str) -> None:
        session.pop(key, None)


class InMemorySessionStorage(SessionStorage):
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data
