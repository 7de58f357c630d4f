from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from ...schemas import TodoCreate, TodoUpdate
from ..auth import require_user
from ..repositories import TodoRepository

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)


class TodoEnvelope(BaseModel):
    """
    Envelope for single-item responses.
    """
    data: Dict[str, Any] = Field(..., description="Todo item with wire keys (_id, userId, ...)")


class TodoListEnvelope(BaseModel):
    """
    Envelope for list responses.
    """
    data: List[Dict[str, Any]] = Field(..., description="Todo items, newest first")


def get_todo_repository(request: Request) -> TodoRepository:
    return request.app.state.todos


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListEnvelope,
    summary="List Todos",
    description="List the caller's todos, newest first.",
    responses={
        200: {"description": "List retrieved successfully"},
        401: {"description": "Missing or invalid bearer token"},
    },
)
def list_todos(
    user: Dict[str, Any] = Depends(require_user),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoListEnvelope:
    """
    List todos of the authenticated user.
    """
    return TodoListEnvelope(data=[t.to_wire() for t in repo.list(user["_id"])])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(
    payload: TodoCreate,
    user: Dict[str, Any] = Depends(require_user),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoEnvelope:
    """
    Create a new Todo.
    """
    created = repo.create(user["_id"], payload.title)
    return TodoEnvelope(data=created.to_wire())


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description="Update the provided fields (title, completed) of a Todo item.",
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def update_todo(
    todo_id: str,
    payload: TodoUpdate,
    user: Dict[str, Any] = Depends(require_user),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoEnvelope:
    """
    Partial update of a Todo item; omitted fields keep their value.
    """
    updated = repo.update(user["_id"], todo_id, payload.changes())
    if updated is None:
        raise _not_found()
    return TodoEnvelope(data=updated.to_wire())


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Delete Todo",
    description="Delete a Todo item by ID and return it.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(
    todo_id: str,
    user: Dict[str, Any] = Depends(require_user),
    repo: TodoRepository = Depends(get_todo_repository),
) -> TodoEnvelope:
    """
    Delete a Todo. Returns the deleted item, 404 if not found.
    """
    deleted = repo.delete(user["_id"], todo_id)
    if deleted is None:
        raise _not_found()
    return TodoEnvelope(data=deleted.to_wire())
