from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _validate_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


def _require_filled(v: str) -> str:
    # the value is sent as entered; format and length rules belong to the server
    if not v.strip():
        raise ValueError("must not be blank")
    return v


# PUBLIC_INTERFACE
class SignInRequest(BaseModel):
    """
    Credentials posted to the sign-in endpoint, exactly as the user typed them.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"email": "a@b.com", "password": "secret1"}})

    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _require_filled(v)


# PUBLIC_INTERFACE
class SignUpRequest(BaseModel):
    """
    Registration form posted to the sign-up endpoint. Only blank fields are
    rejected locally.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Ada", "email": "ada@example.com", "password": "secret1"}}
    )

    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("name", "email")
    @classmethod
    def validate_filled(cls, v: str) -> str:
        return _require_filled(v)


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy groceries"}})

    title: str = Field(..., description="Short title for the todo item", min_length=1, max_length=200)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _validate_title(v)  # type: ignore[return-value]


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields are sent and applied.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"title": "Buy groceries and supplies", "completed": True}})

    title: Optional[str] = Field(default=None, description="Short title for the todo item", min_length=1, max_length=200)
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        return _validate_title(v)

    def changes(self) -> dict[str, Any]:
        """Only the fields that were explicitly set."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# PUBLIC_INTERFACE
class AuthPayload(BaseModel):
    """
    ``data`` member of a successful sign-in/sign-up response.
    """

    token: str = Field(..., min_length=1, description="Opaque bearer token")
    user: Any = Field(default=None, description="User descriptor as returned by the server")
