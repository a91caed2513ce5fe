"""Leaderboard response schemas."""

from __future__ import annotations

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    profile_picture: str | None = None
    coins: int
    rank: int
