"""
HTTP client for the todo API.

Translates each operation into one request, attaches the session's bearer token
to todo operations and maps every failure onto the ``RequestError`` taxonomy.
It never touches local state.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx
import structlog

from .errors import MalformedResponseError, NetworkError, ServerError
from .schemas import SignInRequest, SignUpRequest, TodoCreate, TodoUpdate
from .session import SessionContext
from .settings import get_settings

log = structlog.get_logger()


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, Mapping):
        return None
    for key in ("message", "detail", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _todo_path(todo_id: str) -> str:
    # ids are opaque; "/", "?" and "#" must not leave the path segment
    return "/todos/" + quote(str(todo_id), safe="")


# PUBLIC_INTERFACE
class TodoApiClient:
    """
    Async client for the sign-in/sign-up and todo endpoints.

    Usage:
        session = SessionContext()
        async with TodoApiClient(session) as api:
            await api.sign_in("a@b.com", "secret1")  # raw body; see todosync.auth for the flow
            body = await api.list_todos()

    ``transport`` lets callers route requests in-process (``httpx.ASGITransport``)
    or stub them (``httpx.MockTransport``).
    """

    def __init__(
        self,
        session: SessionContext,
        base_url: Optional[str] = None,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self.session = session
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.timeout_s
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        failure_message: str,
        json: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = self.session.auth_headers() if authenticated else {}
        log.debug("api_request", method=method, path=path, authenticated=bool(headers))
        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.TransportError as exc:
            log.warning("api_network_error", method=method, path=path, error=str(exc))
            raise NetworkError(failure_message) from exc

        if response.is_error:
            message = _server_message(response) or failure_message
            log.warning("api_server_error", method=method, path=path, status=response.status_code, message=message)
            raise ServerError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            log.warning("api_malformed_response", method=method, path=path, status=response.status_code)
            raise MalformedResponseError(failure_message) from exc

    async def sign_in(self, email: str, password: str) -> Any:
        form = SignInRequest(email=email, password=password)
        return await self._request(
            "POST", "/users/sign-in", json=form.model_dump(), authenticated=False, failure_message="Sign-in failed"
        )

    async def sign_up(self, name: str, email: str, password: str) -> Any:
        form = SignUpRequest(name=name, email=email, password=password)
        return await self._request(
            "POST", "/users/sign-up", json=form.model_dump(), authenticated=False, failure_message="Signup failed"
        )

    async def list_todos(self) -> Any:
        return await self._request("GET", "/todos", failure_message="Failed to load todos")

    async def create_todo(self, title: str) -> Any:
        payload = TodoCreate(title=title)
        return await self._request("POST", "/todos", json=payload.model_dump(), failure_message="Failed to create todo")

    async def update_todo(self, todo_id: str, **fields: Any) -> Any:
        """PUT only the given fields (``title`` and/or ``completed``)."""
        payload = TodoUpdate(**fields)
        return await self._request(
            "PUT", _todo_path(todo_id), json=payload.changes(), failure_message="Failed to update todo"
        )

    async def delete_todo(self, todo_id: str) -> Any:
        return await self._request("DELETE", _todo_path(todo_id), failure_message="Failed to delete todo")
