"""
todosync: todo API client with optimistic local updates.

This package exposes the pieces an application wires together: a SessionContext
holding the bearer credential, the TodoApiClient, the auth flow, and TodoSync,
which keeps a TodoListStore reconciled with the server.
"""

from .auth import require_authenticated, sign_in, sign_up
from .client import TodoApiClient
from .errors import (
    AuthenticationError,
    MalformedResponseError,
    NetworkError,
    NotAuthenticatedError,
    RequestError,
    ServerError,
    TodoNotFoundError,
)
from .logging_config import setup_logging
from .models import Confirmed, FilterMode, OptimisticOnly, SyncResult, SyncState, TodoRecord
from .normalizer import extract_list, extract_record, normalize
from .notifications import Level, Notification, NotificationLog
from .session import CredentialStore, InMemoryCredentialStore, SessionContext
from .store import TodoListStore
from .sync import TodoSync
from .view import filter_todos

__all__ = [
    "AuthenticationError",
    "Confirmed",
    "CredentialStore",
    "FilterMode",
    "InMemoryCredentialStore",
    "Level",
    "MalformedResponseError",
    "NetworkError",
    "NotAuthenticatedError",
    "Notification",
    "NotificationLog",
    "OptimisticOnly",
    "RequestError",
    "ServerError",
    "SessionContext",
    "SyncResult",
    "SyncState",
    "TodoApiClient",
    "TodoListStore",
    "TodoNotFoundError",
    "TodoRecord",
    "TodoSync",
    "extract_list",
    "extract_record",
    "filter_todos",
    "normalize",
    "require_authenticated",
    "setup_logging",
    "sign_in",
    "sign_up",
]
