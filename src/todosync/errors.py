from __future__ import annotations

from typing import Optional


class RequestError(Exception):
    """Base error for a failed API request. ``message`` is safe to show to a user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(RequestError):
    """The request could not complete (connection refused, DNS, timeout)."""


class ServerError(RequestError):
    """The server answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(RequestError):
    """A 2xx response whose body could not be used."""


class AuthenticationError(RequestError):
    """Sign-in or sign-up failed. Terminal for that action."""

    def __init__(self, message: str, cause: Optional[RequestError] = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotAuthenticatedError(Exception):
    """No credential is held; the caller must sign in first."""


class TodoNotFoundError(KeyError):
    """No record with the given identifier exists in the local list."""

    def __init__(self, todo_id: str) -> None:
        super().__init__(todo_id)
        self.todo_id = todo_id

    def __str__(self) -> str:
        return f"Todo not found: {self.todo_id}"
