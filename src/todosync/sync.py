"""
Optimistic updates of the local todo list, reconciled with the server.

Every mutation changes the local list first, then calls the API:

- success: the server's record replaces the optimistic one (``Confirmed``)
- failure: the optimistic record stays, a warning is emitted (``OptimisticOnly``)

Deletes remove the record before the request goes out and never put it back.

Operations on the same record run one at a time (per-record ``asyncio.Lock``), in
the order they were issued. A create's lock follows the record when its
placeholder id is swapped for the server's, so an edit issued against the
placeholder is sent with the real id once the create lands. A response only
overwrites the local record if no newer optimistic edit happened meanwhile.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import structlog

from .client import TodoApiClient
from .errors import RequestError, TodoNotFoundError
from .models import Confirmed, OptimisticOnly, SyncResult, SyncState, TodoRecord
from .normalizer import extract_list, extract_record, normalize
from .notifications import Level, Notification, NotificationLog, Notifier
from .schemas import TodoCreate, TodoUpdate
from .store import TodoListStore

log = structlog.get_logger()

LOAD_FAILED = "Failed to load todos. Please try again."
CREATED = "Todo created successfully!"
CREATE_WARNING = "Todo may have been created, but we received an error from the server."
UPDATED = "Todo updated successfully!"
UPDATE_WARNING = "Todo may have been updated, but we received an error from the server."
TOGGLE_WARNING = "Todo status may have been updated, but we received an error from the server."
DELETED = "Todo deleted successfully!"
DELETE_WARNING = "Todo may have been deleted, but we received an error from the server."


class _RecordLock:
    """Lock shared by the operations queued on one record, with a count of its users."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


# PUBLIC_INTERFACE
class TodoSync:
    """
    Reconciles the local list with the todo API.

    Args:
        client: API client bound to the user's session.
        store: local list to mutate; a fresh one is created when omitted.
        notifier: receives user-facing notifications; defaults to a NotificationLog.
    """

    def __init__(
        self,
        client: TodoApiClient,
        store: Optional[TodoListStore] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.client = client
        self.store = store if store is not None else TodoListStore()
        self.notifier: Notifier = notifier if notifier is not None else NotificationLog()
        self._locks: Dict[str, _RecordLock] = {}
        self._aliases: Dict[str, str] = {}

    def _emit(self, level: Level, message: str) -> None:
        self.notifier(Notification(level=level, message=message))

    def _resolve(self, todo_id: str) -> str:
        """Follow placeholder -> server id swaps."""
        seen = set()
        while todo_id in self._aliases and todo_id not in seen:
            seen.add(todo_id)
            todo_id = self._aliases[todo_id]
        return todo_id

    @asynccontextmanager
    async def _serialized(self, todo_id: str) -> AsyncIterator[_RecordLock]:
        """
        Run the block after every earlier operation on the same record.

        The lock is dropped once nobody holds or waits on it, together with any
        placeholder alias that pointed at it.
        """
        entry = self._locks.get(todo_id)
        if entry is None:
            entry = self._locks[todo_id] = _RecordLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield entry
        finally:
            entry.users -= 1
            if not entry.users:
                self._locks = {k: v for k, v in self._locks.items() if v is not entry}
                self._prune_aliases()

    def _prune_aliases(self) -> None:
        # an alias is only needed while an operation issued with the placeholder is queued
        self._aliases = {k: v for k, v in self._aliases.items() if self._resolve(k) in self._locks}

    async def load(self) -> List[TodoRecord]:
        """
        Replace the local list with the server's.

        A failed request empties the list and emits an error notification; an
        unrecognised body shape yields an empty list. Never raises RequestError.
        """
        try:
            body = await self.client.list_todos()
        except RequestError as exc:
            log.error("load_todos_failed", error=exc.message)
            self.store.clear()
            self._emit(Level.ERROR, LOAD_FAILED)
            return []

        raw_items = extract_list(body)
        records = [normalize(item) for item in raw_items if isinstance(item, Mapping)]
        if len(records) != len(raw_items):
            log.warning("skipped_non_object_todos", skipped=len(raw_items) - len(records))
        self.store.replace_all(records)
        log.info("todos_loaded", count=len(self.store))
        return list(self.store.records)

    async def create(self, title: str) -> SyncResult:
        """
        Add a todo at the head of the list and confirm it with the server.

        The returned record is the one the store holds afterwards: the server's
        record, or the server's identity carrying the local fields when the todo
        was edited while the request was in flight. If it was deleted locally in
        the meantime, the server's record is returned and the queued delete
        removes it on the server.

        Raises:
            pydantic.ValidationError: blank or over-long title (nothing is inserted).
        """
        title = TodoCreate(title=title).title
        optimistic = normalize({"title": title, "completed": False})
        temp_id = optimistic.id
        self.store.prepend(optimistic, SyncState.OPTIMISTIC)

        async with self._serialized(temp_id) as entry:
            version = self.store.version_of(temp_id)
            try:
                body = await self.client.create_todo(title)
            except RequestError as exc:
                log.warning("create_todo_unconfirmed", todo_id=temp_id, error=exc.message)
                self._emit(Level.WARNING, CREATE_WARNING)
                return OptimisticOnly(self.store.get(temp_id) or optimistic, CREATE_WARNING, exc)

            confirmed = normalize(extract_record(body))
            current_version = self.store.version_of(temp_id)
            if current_version is None:
                log.info("create_confirmed_after_local_delete", todo_id=confirmed.id)
            elif current_version == version:
                self.store.replace(temp_id, confirmed, SyncState.CONFIRMED)
            else:
                # edited while in flight: adopt the server identity, keep the local fields
                local = self.store.get(temp_id)
                assert local is not None
                confirmed = confirmed.model_copy(
                    update={"title": local.title, "completed": local.completed, "updated_at": local.updated_at}
                )
                self.store.replace(temp_id, confirmed, SyncState.OPTIMISTIC)

            if confirmed.id != temp_id:
                self._aliases[temp_id] = confirmed.id
                self._locks[confirmed.id] = entry
                del self._locks[temp_id]

        log.info("todo_created", todo_id=confirmed.id)
        self._emit(Level.SUCCESS, CREATED)
        return Confirmed(confirmed)

    async def update(self, todo_id: str, *, title: str, completed: bool) -> SyncResult:
        """
        Full edit from the edit form: title and completion flag.

        Raises:
            TodoNotFoundError: unknown identifier.
            pydantic.ValidationError: blank title (nothing is changed).
        """
        changes = TodoUpdate(title=title, completed=completed).changes()
        return await self._update(todo_id, changes, success=UPDATED, warning=UPDATE_WARNING)

    async def toggle(self, todo_id: str, completed: bool) -> SyncResult:
        """
        Set only the completion flag. No success notification is emitted.

        Raises:
            TodoNotFoundError: unknown identifier.
        """
        return await self._update(todo_id, {"completed": bool(completed)}, success=None, warning=TOGGLE_WARNING)

    async def _update(
        self, todo_id: str, changes: Dict[str, Any], *, success: Optional[str], warning: str
    ) -> SyncResult:
        todo_id = self._resolve(todo_id)
        optimistic = self.store.apply(todo_id, **changes)
        version = self.store.version_of(todo_id)

        async with self._serialized(todo_id):
            target = self._resolve(todo_id)
            try:
                body = await self.client.update_todo(target, **changes)
            except RequestError as exc:
                log.warning("update_todo_unconfirmed", todo_id=target, error=exc.message)
                self._emit(Level.WARNING, warning)
                return OptimisticOnly(self.store.get(target) or optimistic, warning, exc)

            confirmed = normalize(extract_record(body))
            if confirmed.is_placeholder:
                # server answered without an id; the record is still the one we sent
                confirmed = confirmed.model_copy(update={"id": target})
            if self.store.version_of(target) == version:
                self.store.replace(target, confirmed, SyncState.CONFIRMED)
            else:
                log.debug("stale_update_response_ignored", todo_id=target)

        log.info("todo_updated", todo_id=target, fields=sorted(changes))
        if success:
            self._emit(Level.SUCCESS, success)
        return Confirmed(confirmed)

    async def delete(self, todo_id: str) -> SyncResult:
        """
        Remove a todo locally at once, then ask the server to delete it.

        The record is not restored when the request fails.

        Raises:
            TodoNotFoundError: unknown identifier.
        """
        todo_id = self._resolve(todo_id)
        removed = self.store.remove(todo_id)
        if removed is None:
            raise TodoNotFoundError(todo_id)

        async with self._serialized(todo_id):
            target = self._resolve(todo_id)
            try:
                await self.client.delete_todo(target)
            except RequestError as exc:
                log.warning("delete_todo_unconfirmed", todo_id=target, error=exc.message)
                self._emit(Level.WARNING, DELETE_WARNING)
                return OptimisticOnly(removed, DELETE_WARNING, exc)

        log.info("todo_deleted", todo_id=target)
        self._emit(Level.SUCCESS, DELETED)
        return Confirmed(removed)
