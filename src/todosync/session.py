"""
Session credential context.

Holds the bearer token and the user descriptor returned by sign-in/sign-up.
Persistence across process restarts belongs to the embedding application and is
plugged in through a ``CredentialStore``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Tuple

import structlog

log = structlog.get_logger()


class CredentialStore(Protocol):
    """Load/save hooks for the session credential."""

    def load(self) -> Optional[Tuple[str, Any]]:
        """Return ``(token, user)`` if a credential was saved, else None."""
        ...

    def save(self, token: str, user: Any) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryCredentialStore:
    """Process-local credential store, mostly useful for tests and scripts."""

    def __init__(self, token: Optional[str] = None, user: Any = None) -> None:
        self._token = token
        self._user = user

    def load(self) -> Optional[Tuple[str, Any]]:
        if not self._token:
            return None
        return self._token, self._user

    def save(self, token: str, user: Any) -> None:
        self._token = token
        self._user = user

    def clear(self) -> None:
        self._token = None
        self._user = None


# PUBLIC_INTERFACE
class SessionContext:
    """
    Explicit credential holder passed to the API client.

    ``set_credentials`` is called by the auth flow on success; ``clear`` is only
    ever called by the embedding application (sign-out).
    """

    def __init__(self, store: Optional[CredentialStore] = None) -> None:
        self._store = store
        self._token: Optional[str] = None
        self._user: Any = None

    @classmethod
    def from_store(cls, store: CredentialStore) -> "SessionContext":
        """Create a session and restore any credential the store already holds."""
        session = cls(store)
        session.load()
        return session

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Any:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def load(self) -> bool:
        """Restore the credential from the store. Returns True if one was found."""
        if self._store is None:
            return False
        saved = self._store.load()
        if not saved:
            return False
        self._token, self._user = saved
        log.debug("session_restored")
        return True

    def set_credentials(self, token: str, user: Any = None) -> None:
        self._token = token
        self._user = user
        if self._store is not None:
            self._store.save(token, user)

    def clear(self) -> None:
        self._token = None
        self._user = None
        if self._store is not None:
            self._store.clear()

    def auth_headers(self) -> Dict[str, str]:
        """Bearer header when a token is held; empty otherwise (the server rejects)."""
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}
