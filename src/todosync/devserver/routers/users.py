from __future__ import annotations

import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from ...schemas import SignInRequest, SignUpRequest
from ..auth import get_user_repository
from ..repositories import UserRepository

router = APIRouter(
    prefix="/api/v1/users",
    tags=["users"],
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(v: str) -> str:
    s = v.strip().lower()
    if not _EMAIL_RE.match(s):
        raise ValueError("email must be a valid address")
    return s


class SignInBody(SignInRequest):
    """
    Server-side sign-in form: emails are matched case-insensitively.
    """

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class SignUpBody(SignUpRequest):
    """
    Server-side registration rules: valid email, 6+ character password.
    """

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    password: str = Field(..., min_length=6, description="Account password (6+ characters)")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class AuthData(BaseModel):
    token: str = Field(..., description="Bearer token for todo requests")
    user: Dict[str, Any] = Field(..., description="Public user descriptor")


class AuthEnvelope(BaseModel):
    """
    Envelope for sign-in/sign-up responses: ``{"data": {"token", "user"}}``.
    """
    data: AuthData


# PUBLIC_INTERFACE
@router.post(
    "/sign-up",
    response_model=AuthEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Register a new account and return a bearer token for it.",
    responses={
        201: {"description": "Account created"},
        409: {"description": "Email already registered"},
    },
)
def sign_up(payload: SignUpBody, users: UserRepository = Depends(get_user_repository)) -> AuthEnvelope:
    """
    Create an account.
    """
    user = users.create_user(payload.name, payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")
    token = users.issue_token(user["_id"])
    return AuthEnvelope(data=AuthData(token=token, user=user))


# PUBLIC_INTERFACE
@router.post(
    "/sign-in",
    response_model=AuthEnvelope,
    summary="Sign in",
    description="Exchange email and password for a bearer token.",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid credentials"},
    },
)
def sign_in(payload: SignInBody, users: UserRepository = Depends(get_user_repository)) -> AuthEnvelope:
    """
    Authenticate an existing account.
    """
    user = users.authenticate(payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    token = users.issue_token(user["_id"])
    return AuthEnvelope(data=AuthData(token=token, user=user))
