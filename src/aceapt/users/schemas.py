"""Request/response schemas for profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from aceapt.auth.schemas import CamelModel


class ProfileStats(CamelModel):
    total_questions: int = 0
    correct_answers: int = 0
    rank: int = 0


class PublicProfileResponse(BaseModel):
    """Profile visible to anyone. Never includes the email address."""

    id: int
    username: str
    full_name: str | None = None
    profile_picture: str | None = None
    coins: int
    created_at: datetime | None = None
    stats: ProfileStats


class ProfileResponse(PublicProfileResponse):
    """The caller's own profile."""

    email: str


class ProfileUpdateRequest(CamelModel):
    """``{fullName, profilePicture}``; omitted or empty values clear the field."""

    full_name: str | None = Field(None, max_length=100)
    profile_picture: str | None = Field(None, max_length=255)


class MessageResponse(BaseModel):
    message: str
