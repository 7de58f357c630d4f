import pytest

from todosync.errors import TodoNotFoundError
from todosync.models import SyncState
from todosync.normalizer import normalize
from todosync.store import TodoListStore


def rec(todo_id, title="t", completed=False):
    return normalize({"_id": todo_id, "title": title, "completed": completed})


class TestTodoListStore:
    def test_replace_all_confirms_and_dedupes(self):
        store = TodoListStore([rec("1"), rec("2"), rec("1", "dup")])
        assert [r.id for r in store] == ["1", "2"]
        assert store.get("1").title == "t"
        assert store.state_of("2") is SyncState.CONFIRMED

    def test_prepend_puts_newest_first(self):
        store = TodoListStore([rec("1")])
        store.prepend(rec("2"))
        assert [r.id for r in store.records] == ["2", "1"]
        assert store.state_of("2") is SyncState.OPTIMISTIC

    def test_prepend_rejects_duplicate(self):
        store = TodoListStore([rec("1")])
        with pytest.raises(ValueError):
            store.prepend(rec("1"))

    def test_apply_edits_one_record(self):
        store = TodoListStore([rec("1", "a"), rec("2", "b"), rec("3", "c")])
        before = {r.id: r for r in store.records}
        updated = store.apply("2", completed=True)
        assert updated.completed is True
        assert store.state_of("2") is SyncState.OPTIMISTIC
        assert store.version_of("2") == 1
        assert store.get("1") == before["1"]
        assert store.get("3") == before["3"]
        assert [r.id for r in store] == ["1", "2", "3"]

    def test_apply_unknown(self):
        with pytest.raises(TodoNotFoundError):
            TodoListStore().apply("nope", title="x")

    def test_replace_rekeys_slot_in_place(self):
        store = TodoListStore([rec("1"), rec("2")])
        store.prepend(rec("temp-x", "new"))
        assert store.replace("temp-x", rec("srv-9", "new"))
        assert [r.id for r in store] == ["srv-9", "1", "2"]
        assert "temp-x" not in store
        assert store.state_of("srv-9") is SyncState.CONFIRMED

    def test_replace_drops_other_slot_with_same_id(self):
        store = TodoListStore([rec("1"), rec("2")])
        store.prepend(rec("temp-x"))
        store.replace("temp-x", rec("2", "server"))
        assert [r.id for r in store] == ["2", "1"]
        assert store.get("2").title == "server"

    def test_replace_missing_does_not_insert(self):
        store = TodoListStore([rec("1")])
        assert store.replace("gone", rec("gone")) is False
        assert len(store) == 1

    def test_remove(self):
        store = TodoListStore([rec("1"), rec("2")])
        removed = store.remove("1")
        assert removed.id == "1"
        assert store.remove("1") is None
        assert [r.id for r in store] == ["2"]

    def test_snapshot_is_a_copy(self):
        store = TodoListStore([rec("1")])
        snap = store.snapshot()
        snap.clear()
        assert len(store) == 1
        assert store.snapshot()[0]["_id"] == "1"

    def test_clear(self):
        store = TodoListStore([rec("1")])
        store.clear()
        assert len(store) == 0
