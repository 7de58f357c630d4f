import dataclasses
import json
from datetime import datetime

import pytest
import structlog
from fastapi.testclient import TestClient

from todosync.devserver import create_app
from todosync.settings import get_settings


@pytest.fixture
def client():
    return TestClient(create_app())


def sign_up(client, email="ada@example.com", password="secret1", name="Ada"):
    res = client.post("/api/v1/users/sign-up", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201
    return res.json()["data"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def assert_todo_shape(todo: dict):
    for key in ["_id", "userId", "title", "completed", "createdAt", "updatedAt"]:
        assert key in todo
    assert isinstance(todo["_id"], str)
    assert isinstance(todo["title"], str)
    assert isinstance(todo["completed"], bool)
    datetime.fromisoformat(todo["createdAt"].replace("Z", "+00:00"))
    datetime.fromisoformat(todo["updatedAt"].replace("Z", "+00:00"))


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json()["message"] == "Healthy"


class TestUsers:
    def test_sign_up_and_sign_in(self, client):
        data = sign_up(client)
        assert data["token"]
        assert data["user"]["email"] == "ada@example.com"
        assert "password_hash" not in data["user"]

        res = client.post("/api/v1/users/sign-in", json={"email": "ada@example.com", "password": "secret1"})
        assert res.status_code == 200
        assert res.json()["data"]["user"]["_id"] == data["user"]["_id"]

    def test_sign_in_bad_password(self, client):
        sign_up(client)
        res = client.post("/api/v1/users/sign-in", json={"email": "ada@example.com", "password": "nope"})
        assert res.status_code == 401
        assert res.json() == {"message": "Invalid email or password"}

    def test_duplicate_email(self, client):
        sign_up(client)
        res = client.post(
            "/api/v1/users/sign-up", json={"name": "Other", "email": "ada@example.com", "password": "secret1"}
        )
        assert res.status_code == 409
        assert res.json()["message"] == "User already exists"


class TestTodosCRUD:
    def test_requires_bearer_token(self, client):
        assert client.get("/api/v1/todos").status_code == 401
        res = client.get("/api/v1/todos", headers=auth("forged"))
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid or expired token"

    def test_create_list_update_delete(self, client):
        token = sign_up(client)["token"]

        res = client.post("/api/v1/todos", json={"title": "  Buy milk "}, headers=auth(token))
        assert res.status_code == 201
        todo = res.json()["data"]
        assert_todo_shape(todo)
        assert todo["title"] == "Buy milk"
        assert todo["completed"] is False
        tid = todo["_id"]

        res = client.put(f"/api/v1/todos/{tid}", json={"completed": True}, headers=auth(token))
        assert res.status_code == 200
        updated = res.json()["data"]
        assert updated["completed"] is True
        assert updated["title"] == "Buy milk"

        res = client.get("/api/v1/todos", headers=auth(token))
        assert [t["_id"] for t in res.json()["data"]] == [tid]

        res = client.delete(f"/api/v1/todos/{tid}", headers=auth(token))
        assert res.status_code == 200
        assert res.json()["data"]["_id"] == tid

        res = client.delete(f"/api/v1/todos/{tid}", headers=auth(token))
        assert res.status_code == 404
        assert res.json()["message"] == "Todo not found"

    def test_list_is_newest_first(self, client):
        token = sign_up(client)["token"]
        for title in ["one", "two", "three"]:
            client.post("/api/v1/todos", json={"title": title}, headers=auth(token))
        res = client.get("/api/v1/todos", headers=auth(token))
        assert [t["title"] for t in res.json()["data"]] == ["three", "two", "one"]

    def test_todos_are_scoped_to_user(self, client):
        ada = sign_up(client)["token"]
        bob = sign_up(client, email="bob@example.com", name="Bob")["token"]
        tid = client.post("/api/v1/todos", json={"title": "secret"}, headers=auth(ada)).json()["data"]["_id"]

        assert client.get("/api/v1/todos", headers=auth(bob)).json()["data"] == []
        assert client.put(f"/api/v1/todos/{tid}", json={"completed": True}, headers=auth(bob)).status_code == 404


class TestValidationErrors:
    def test_create_validation_error_title_empty(self, client):
        token = sign_up(client)["token"]
        res = client.post("/api/v1/todos", json={"title": "  "}, headers=auth(token))
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_sign_up_short_password(self, client):
        res = client.post("/api/v1/users/sign-up", json={"name": "Ada", "email": "ada@example.com", "password": "123"})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestLogging:
    def test_app_emits_json_logs(self, capsys):
        settings = dataclasses.replace(get_settings(), log_json=True)
        try:
            client = TestClient(create_app(settings))
            assert client.get("/api/v1/todos").status_code == 401
            lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
            entries = [json.loads(line) for line in lines if line.startswith("{")]
            errors = [e for e in entries if e["event"] == "devserver_http_error"]
            assert errors and errors[0]["status"] == 401
            assert errors[0]["level"] == "info"
        finally:
            structlog.reset_defaults()
