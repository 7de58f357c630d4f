from typing import Callable

import httpx
import pytest
import pytest_asyncio

from todosync.auth import sign_up
from todosync.client import TodoApiClient
from todosync.devserver import create_app
from todosync.session import SessionContext

BASE_URL = "http://testserver/api/v1"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "TODOSYNC_API_BASE_URL",
        "TODOSYNC_TIMEOUT_S",
        "TODOSYNC_LOG_LEVEL",
        "TODOSYNC_LOG_JSON",
        "TODOSYNC_CORS_ALLOW_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def session():
    return SessionContext()


@pytest_asyncio.fixture
async def api(app, session):
    """Client wired to a fresh in-process dev backend."""
    client = TodoApiClient(session, BASE_URL, transport=httpx.ASGITransport(app=app))
    yield client
    await client.aclose()


@pytest.fixture
def make_client(session) -> Callable[..., TodoApiClient]:
    """Build a client whose requests are answered by ``handler`` (httpx.MockTransport)."""

    def _make(handler, client_session=None) -> TodoApiClient:
        return TodoApiClient(client_session or session, BASE_URL, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def offline():
    """MockTransport handler for an unreachable server."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return handler


@pytest_asyncio.fixture
async def signed_in_api(api, session):
    """Client against the dev backend with a freshly registered account."""
    await sign_up(api, session, name="Ada", email="ada@example.com", password="secret1")
    return api
