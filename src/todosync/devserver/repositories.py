from __future__ import annotations

import hashlib
import secrets
import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

from ..models import TodoRecord, utc_now_iso


def _object_id() -> str:
    # 24 hex chars, the shape of the hosted backend's identifiers
    return uuid.uuid4().hex[:24]


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract contract for account storage and bearer token issuance."""

    @abstractmethod
    def create_user(self, name: str, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Create a user and return its public descriptor, or None if the email is taken."""

    @abstractmethod
    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the user descriptor for valid credentials, else None."""

    @abstractmethod
    def issue_token(self, user_id: str) -> str:
        """Issue a new bearer token for the user."""

    @abstractmethod
    def user_for_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Resolve a bearer token to its user descriptor, or None."""


class InMemoryUserRepository(UserRepository):
    """
    Thread-safe in-memory accounts and tokens.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, Dict[str, Any]] = {}
        self._by_email: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}

    @staticmethod
    def _public(user: Dict[str, Any]) -> Dict[str, Any]:
        return {"_id": user["_id"], "name": user["name"], "email": user["email"]}

    def create_user(self, name: str, email: str, password: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            if email in self._by_email:
                return None
            salt = secrets.token_bytes(16)
            user = {
                "_id": _object_id(),
                "name": name,
                "email": email,
                "salt": salt,
                "password_hash": _hash_password(password, salt),
            }
            self._users[user["_id"]] = user
            self._by_email[email] = user["_id"]
            return self._public(user)

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            user_id = self._by_email.get(email)
            user = self._users.get(user_id) if user_id else None
        if user is None:
            return None
        if not secrets.compare_digest(_hash_password(password, user["salt"]), user["password_hash"]):
            return None
        return self._public(user)

    def issue_token(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[token] = user_id
        return token

    def user_for_token(self, token: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            user_id = self._tokens.get(token)
            user = self._users.get(user_id) if user_id else None
            return None if user is None else self._public(user)


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """Abstract contract for per-user todo storage."""

    @abstractmethod
    def create(self, user_id: str, title: str) -> TodoRecord:
        """Create and return a new todo owned by the user."""

    @abstractmethod
    def get(self, user_id: str, todo_id: str) -> Optional[TodoRecord]:
        """Return the user's todo by id, or None."""

    @abstractmethod
    def update(self, user_id: str, todo_id: str, changes: Dict[str, Any]) -> Optional[TodoRecord]:
        """Apply the given fields. Return the updated todo or None if not found."""

    @abstractmethod
    def delete(self, user_id: str, todo_id: str) -> Optional[TodoRecord]:
        """Delete the user's todo. Return the deleted todo or None if not found."""

    @abstractmethod
    def list(self, user_id: str) -> List[TodoRecord]:
        """Return the user's todos, newest first."""


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory todo storage suitable for tests and local development.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoRecord] = {}
        self._seq: Dict[str, int] = {}
        self._next_seq = 0

    def create(self, user_id: str, title: str) -> TodoRecord:
        now = utc_now_iso()
        record = TodoRecord(
            id=_object_id(), user_id=user_id, title=title, completed=False, created_at=now, updated_at=now
        )
        with self._lock:
            self._items[record.id] = record
            self._seq[record.id] = self._next_seq
            self._next_seq += 1
        return record

    def get(self, user_id: str, todo_id: str) -> Optional[TodoRecord]:
        with self._lock:
            item = self._items.get(todo_id)
            return item if item is not None and item.user_id == user_id else None

    def update(self, user_id: str, todo_id: str, changes: Dict[str, Any]) -> Optional[TodoRecord]:
        with self._lock:
            existing = self.get(user_id, todo_id)
            if existing is None:
                return None
            allowed = {k: v for k, v in changes.items() if k in {"title", "completed"} and v is not None}
            updated = existing.model_copy(update={**allowed, "updated_at": utc_now_iso()})
            self._items[todo_id] = updated
            return updated

    def delete(self, user_id: str, todo_id: str) -> Optional[TodoRecord]:
        with self._lock:
            existing = self.get(user_id, todo_id)
            if existing is None:
                return None
            del self._items[todo_id]
            del self._seq[todo_id]
            return existing

    def list(self, user_id: str) -> List[TodoRecord]:
        with self._lock:
            items = [t for t in self._items.values() if t.user_id == user_id]
            # creation order, not timestamp: several todos can share a millisecond
            return sorted(items, key=lambda t: self._seq[t.id], reverse=True)
