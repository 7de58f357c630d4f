from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ..logging_config import setup_logging
from ..settings import Settings, get_settings
from .repositories import InMemoryTodoRepository, InMemoryUserRepository
from .routers import todos as todos_router
from .routers import users as users_router

log = structlog.get_logger()

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "Sign-up and sign-in returning bearer tokens."},
    {"name": "todos", "description": "CRUD operations for the caller's Todo items."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the development backend: same routes and envelopes as the hosted todo
    API, backed by in-memory repositories stored on ``app.state``.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    app = FastAPI(
        title="Todo Dev Backend",
        description="In-memory stand-in for the todo API, for local development and tests.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.users = InMemoryUserRepository()
    app.state.todos = InMemoryTodoRepository()

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Response format:
            {
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": [... pydantic error details ...]
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_errors(exc),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Errors carry ``message``, the key the client reads."""
        log.info("devserver_http_error", path=request.url.path, status=exc.status_code, detail=exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.
        """
        return {"message": "Healthy"}

    app.include_router(users_router.router)
    app.include_router(todos_router.router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raised ValueError, which is not JSON serialisable
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        errors.append(err)
    return errors


# ASGI entry point, e.g. ``uvicorn todosync.devserver.main:app``
app = create_app()
