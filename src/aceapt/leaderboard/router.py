"""Leaderboard router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.config import get_settings
from aceapt.database import get_session
from aceapt.leaderboard.schemas import LeaderboardEntry
from aceapt.leaderboard.service import get_leaderboard

router = APIRouter(prefix="/api/leaderboard", tags=["Leaderboard"])


@router.get("", response_model=list[LeaderboardEntry])
async def leaderboard(
    db: AsyncSession = Depends(get_session),
) -> list[LeaderboardEntry]:
    """Top users by coin balance. Tied balances share a rank."""
    rows = await get_leaderboard(db, get_settings().leaderboard_limit)
    return [LeaderboardEntry(**row) for row in rows]
