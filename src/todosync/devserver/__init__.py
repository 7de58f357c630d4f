"""
In-memory development backend speaking the todo API's wire envelope.

Run it with any ASGI server (``todosync.devserver.main:app``) or mount it in
tests through ``httpx.ASGITransport``.
"""

from .main import create_app

__all__ = ["create_app"]
