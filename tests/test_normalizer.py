from datetime import datetime

import pytest

from todosync.errors import MalformedResponseError
from todosync.models import TodoRecord
from todosync.normalizer import extract_auth, extract_list, extract_record, normalize


def assert_record_invariants(record: TodoRecord):
    assert isinstance(record, TodoRecord)
    assert isinstance(record.id, str) and record.id
    assert isinstance(record.user_id, str)
    assert isinstance(record.title, str)
    assert isinstance(record.completed, bool)
    for ts in (record.created_at, record.updated_at):
        datetime.fromisoformat(ts.replace("Z", "+00:00"))


class TestNormalize:
    @pytest.mark.parametrize(
        "raw",
        [
            None,
            {},
            [],
            42,
            "todo",
            {"title": None, "completed": "yes"},
            {"_id": "", "createdAt": "", "updatedAt": "not-a-date"},
            {"_id": True, "userId": 7, "completed": 1},
        ],
    )
    def test_any_input_yields_valid_record(self, raw):
        assert_record_invariants(normalize(raw))

    def test_none_yields_placeholder(self):
        record = normalize(None)
        assert record.is_placeholder
        assert record.title == ""
        assert record.completed is False
        assert record.user_id == ""

    def test_complete_record_is_kept(self):
        raw = {
            "_id": "abc123",
            "userId": "u1",
            "title": "Buy milk",
            "completed": True,
            "createdAt": "2024-05-01T10:00:00.000Z",
            "updatedAt": "2024-05-02T11:30:00.000Z",
        }
        record = normalize(raw)
        assert record.id == "abc123"
        assert record.user_id == "u1"
        assert record.title == "Buy milk"
        assert record.completed is True
        assert record.created_at == "2024-05-01T10:00:00.000Z"
        assert record.updated_at == "2024-05-02T11:30:00.000Z"
        assert not record.is_placeholder

    def test_identifier_falls_back_to_id_key(self):
        assert normalize({"id": "xyz"}).id == "xyz"
        assert normalize({"id": 17}).id == "17"
        assert normalize({"_id": "first", "id": "second"}).id == "first"

    def test_non_boolean_completed_is_false(self):
        assert normalize({"completed": "true"}).completed is False
        assert normalize({"completed": 1}).completed is False

    def test_placeholder_ids_are_unique(self):
        assert normalize({}).id != normalize({}).id

    def test_record_passes_through(self):
        record = normalize({"_id": "a"})
        assert normalize(record) is record

    def test_wire_keys(self):
        wire = normalize({"_id": "a", "title": "t"}).to_wire()
        assert set(wire) == {"_id", "userId", "title", "completed", "createdAt", "updatedAt"}


class TestExtractList:
    items = [{"_id": "1"}, {"_id": "2"}]

    def test_recognised_shapes_yield_same_list(self):
        assert extract_list(self.items) == self.items
        assert extract_list({"data": self.items}) == self.items
        assert extract_list({"data": {"data": self.items}}) == self.items

    @pytest.mark.parametrize("response", [None, {}, {"data": None}, {"data": {"items": []}}, "oops", 3, {"todos": []}])
    def test_other_shapes_yield_empty(self, response):
        assert extract_list(response) == []


class TestExtractRecord:
    def test_unwraps_data(self):
        assert extract_record({"data": {"_id": "1"}}) == {"_id": "1"}

    def test_bare_record(self):
        assert extract_record({"_id": "1", "title": "x"}) == {"_id": "1", "title": "x"}

    def test_other_values_pass_through(self):
        assert extract_record(None) is None


class TestExtractAuth:
    def test_token_and_user(self):
        payload = extract_auth({"data": {"token": "t1", "user": {"name": "Ada"}}})
        assert payload.token == "t1"
        assert payload.user == {"name": "Ada"}

    @pytest.mark.parametrize("response", [None, {}, {"data": {}}, {"data": {"token": ""}}, {"token": "t1"}])
    def test_missing_token_is_malformed(self, response):
        with pytest.raises(MalformedResponseError):
            extract_auth(response)
