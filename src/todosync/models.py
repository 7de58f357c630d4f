from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import RequestError

PLACEHOLDER_PREFIX = "temp-"


def utc_now_iso() -> str:
    """Current UTC instant as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
class TodoRecord(BaseModel):
    """
    Canonical todo item as held by the local list.

    Fields use snake_case in Python and the API's keys on the wire
    (``_id``, ``userId``, ``createdAt``, ``updatedAt``). Instances are immutable;
    edits produce a new record via ``model_copy(update=...)``.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_id": "6650d1c2e4b0a1f2c3d4e5f6",
                "userId": "664f0a9be4b0a1f2c3d4e5aa",
                "title": "Buy milk",
                "completed": False,
                "createdAt": "2024-05-24T17:03:30.123Z",
                "updatedAt": "2024-05-24T17:03:30.123Z",
            }
        },
    )

    id: str = Field(..., alias="_id", min_length=1, description="Identifier, unique within a session")
    user_id: str = Field(default="", alias="userId", description="Owning user, empty when unknown")
    title: str = Field(default="", description="Todo title")
    completed: bool = Field(default=False, description="Completion status flag")
    created_at: str = Field(..., alias="createdAt", description="Creation timestamp (ISO-8601)")
    updated_at: str = Field(..., alias="updatedAt", description="Last update timestamp (ISO-8601)")

    @property
    def is_placeholder(self) -> bool:
        """True when the identifier was generated locally and never confirmed by the server."""
        return self.id.startswith(PLACEHOLDER_PREFIX)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SyncState(str, Enum):
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"


class FilterMode(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class Confirmed:
    """The server acknowledged the operation; ``record`` is its canonical version."""

    record: TodoRecord

    @property
    def confirmed(self) -> bool:
        return True


@dataclass(frozen=True)
class OptimisticOnly:
    """
    The server call failed; ``record`` is the local optimistic version that was kept
    (or, for deletes, the record that was removed anyway).
    """

    record: TodoRecord
    warning: str
    error: Optional[RequestError] = None

    @property
    def confirmed(self) -> bool:
        return False


SyncResult = Union[Confirmed, OptimisticOnly]
