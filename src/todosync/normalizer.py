"""
Coercion of loosely shaped API responses into canonical records.

The backend is not consistent about envelopes: listings arrive as a bare list,
as ``{"data": [...]}`` or doubly wrapped, and single-item mutations may or may not
be wrapped in ``data``. Records themselves may miss fields. Everything here is
total: bad input degrades to defaults, never to an exception (``extract_auth``
excepted, since a sign-in without a token cannot proceed).
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any, List

import structlog
from pydantic import ValidationError

from .errors import MalformedResponseError
from .models import PLACEHOLDER_PREFIX, TodoRecord, utc_now_iso
from .schemas import AuthPayload

log = structlog.get_logger()


def placeholder_id() -> str:
    return f"{PLACEHOLDER_PREFIX}{uuid.uuid4().hex}"


def _coerce_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return ""


def _coerce_timestamp(value: Any, default: str) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        return default
    s = value.strip()
    try:
        # fromisoformat only accepts a trailing 'Z' from 3.11 on
        datetime.fromisoformat(s[:-1] + "+00:00" if s.endswith("Z") else s)
    except ValueError:
        return default
    return s


# PUBLIC_INTERFACE
def normalize(raw: Any) -> TodoRecord:
    """
    Build a TodoRecord from whatever the server sent.

    - None or a non-mapping yields a fully defaulted placeholder record.
    - The identifier comes from ``_id``, then ``id``; missing means a ``temp-`` placeholder.
    - ``completed`` must be a real boolean, anything else becomes False.
    - Missing or unparseable timestamps become the current instant.
    """
    if isinstance(raw, TodoRecord):
        return raw

    now = utc_now_iso()
    if not isinstance(raw, Mapping):
        return TodoRecord(id=placeholder_id(), user_id="", title="", completed=False, created_at=now, updated_at=now)

    todo_id = _coerce_id(raw.get("_id")) or _coerce_id(raw.get("id")) or placeholder_id()
    user_id = raw.get("userId")
    title = raw.get("title")
    completed = raw.get("completed")

    return TodoRecord(
        id=todo_id,
        user_id=_coerce_id(user_id),
        title=title if isinstance(title, str) else "",
        completed=completed if isinstance(completed, bool) else False,
        created_at=_coerce_timestamp(raw.get("createdAt"), now),
        updated_at=_coerce_timestamp(raw.get("updatedAt"), now),
    )


# PUBLIC_INTERFACE
def extract_list(response: Any) -> List[Any]:
    """
    Return the raw todo list carried by a listing response.

    Accepts a bare list, ``{"data": [...]}`` and ``{"data": {"data": [...]}}``.
    Any other shape is logged and yields an empty list.
    """
    if isinstance(response, list):
        return response
    if isinstance(response, Mapping):
        data = response.get("data")
        if isinstance(data, list):
            return data
        if isinstance(data, Mapping) and isinstance(data.get("data"), list):
            return data["data"]
    log.warning("unexpected_list_response", response_type=type(response).__name__, response=_preview(response))
    return []


# PUBLIC_INTERFACE
def extract_record(response: Any) -> Any:
    """Unwrap ``{"data": record}``; a bare record is returned as-is."""
    if isinstance(response, Mapping):
        data = response.get("data")
        if isinstance(data, Mapping):
            return data
    return response


# PUBLIC_INTERFACE
def extract_auth(response: Any) -> AuthPayload:
    """
    Pull ``{token, user}`` out of an auth response's ``data`` member.

    Raises:
        MalformedResponseError: no usable token in the body.
    """
    data = response.get("data") if isinstance(response, Mapping) else None
    if not isinstance(data, Mapping):
        raise MalformedResponseError("Unexpected authentication response")
    try:
        return AuthPayload(token=data.get("token"), user=data.get("user"))
    except ValidationError as exc:
        raise MalformedResponseError("Authentication response did not include a token") from exc


def _preview(value: Any, limit: int = 200) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[:limit] + "..."
