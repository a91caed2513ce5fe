"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the quiz frontend does."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Registration request."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    full_name: str | None = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class RegisterResponse(BaseModel):
    message: str


class LoginRequest(BaseModel):
    """Sign in with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class SessionUser(BaseModel):
    """The user embedded in a sign-in response."""

    id: int
    username: str
    email: str
    full_name: str | None = None
    profile_picture: str | None = None
    coins: int = 0
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class TokenResponse(CamelModel):
    """Session token returned after a successful sign-in."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: SessionUser
