from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import TodoNotFoundError
from .models import SyncState, TodoRecord, utc_now_iso


@dataclass
class _Slot:
    record: TodoRecord
    state: SyncState
    version: int = 0


# PUBLIC_INTERFACE
class TodoListStore:
    """
    Ordered in-memory list of the session's todo records, most recent first.

    Every slot carries a sync state (optimistic or confirmed) and a local version
    number that increases on each optimistic edit. Identifiers are unique. Only
    the event loop thread touches the store, so there is no locking here; callers
    that need per-record ordering get it from ``TodoSync``.
    """

    def __init__(self, records: Optional[Iterable[TodoRecord]] = None) -> None:
        self._slots: List[_Slot] = []
        if records is not None:
            self.replace_all(records)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[TodoRecord]:
        return iter(self.records)

    def __contains__(self, todo_id: object) -> bool:
        return self._index(todo_id) is not None

    @property
    def records(self) -> Tuple[TodoRecord, ...]:
        """Snapshot of the list in display order."""
        return tuple(slot.record for slot in self._slots)

    def _index(self, todo_id: object) -> Optional[int]:
        for i, slot in enumerate(self._slots):
            if slot.record.id == todo_id:
                return i
        return None

    def _slot(self, todo_id: str) -> _Slot:
        i = self._index(todo_id)
        if i is None:
            raise TodoNotFoundError(todo_id)
        return self._slots[i]

    def get(self, todo_id: str) -> Optional[TodoRecord]:
        i = self._index(todo_id)
        return None if i is None else self._slots[i].record

    def state_of(self, todo_id: str) -> Optional[SyncState]:
        i = self._index(todo_id)
        return None if i is None else self._slots[i].state

    def version_of(self, todo_id: str) -> Optional[int]:
        i = self._index(todo_id)
        return None if i is None else self._slots[i].version

    def replace_all(self, records: Iterable[TodoRecord], state: SyncState = SyncState.CONFIRMED) -> None:
        """Replace the whole list. Later duplicates of an identifier are dropped."""
        seen: set[str] = set()
        slots: List[_Slot] = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            slots.append(_Slot(record=record, state=state))
        self._slots = slots

    def prepend(self, record: TodoRecord, state: SyncState = SyncState.OPTIMISTIC) -> None:
        if self._index(record.id) is not None:
            raise ValueError(f"duplicate todo id: {record.id}")
        self._slots.insert(0, _Slot(record=record, state=state))

    def apply(self, todo_id: str, **changes: Any) -> TodoRecord:
        """
        Optimistically apply field changes to a record in place.

        Bumps ``updated_at`` and the slot's version and marks it optimistic.

        Raises:
            TodoNotFoundError: no record with that identifier.
        """
        slot = self._slot(todo_id)
        changes.setdefault("updated_at", utc_now_iso())
        slot.record = slot.record.model_copy(update=changes)
        slot.state = SyncState.OPTIMISTIC
        slot.version += 1
        return slot.record

    def replace(self, todo_id: str, record: TodoRecord, state: SyncState = SyncState.CONFIRMED) -> bool:
        """
        Put ``record`` in the slot currently holding ``todo_id``.

        The replacement may carry a different identifier (a placeholder swapped for
        the server's). Another slot already holding the new identifier is dropped.
        Returns False, without inserting, when ``todo_id`` is no longer present.
        """
        i = self._index(todo_id)
        if i is None:
            return False
        slot = self._slots[i]
        if record.id != todo_id:
            other = self._index(record.id)
            if other is not None:
                del self._slots[other]
        slot.record = record
        slot.state = state
        return True

    def remove(self, todo_id: str) -> Optional[TodoRecord]:
        i = self._index(todo_id)
        if i is None:
            return None
        return self._slots.pop(i).record

    def clear(self) -> None:
        self._slots = []

    def snapshot(self) -> List[Dict[str, Any]]:
        """Wire-shaped copies of every record, in display order."""
        return [slot.record.to_wire() for slot in self._slots]
