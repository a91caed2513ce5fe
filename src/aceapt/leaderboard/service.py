"""Leaderboard reads."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.db.models import User
from aceapt.leaderboard.ranking import assign_ranks


async def get_leaderboard(db: AsyncSession, limit: int) -> list[dict[str, Any]]:
    """Top ``limit`` users by coins, each with its rank.

    Every user with a greater balance sorts ahead, so ranks computed over
    this prefix equal ranks over the whole table.
    """
    result = await db.execute(
        select(User.id, User.username, User.full_name, User.profile_picture, User.coins)
        .order_by(User.coins.desc(), User.id.asc())
        .limit(limit)
    )
    rows = [dict(row._mapping) for row in result]
    return assign_ranks(rows)


async def get_rank_for_coins(db: AsyncSession, coins: int) -> int:
    """``COUNT(users with more coins) + 1`` evaluated in the database."""
    result = await db.execute(select(func.count(User.id)).where(User.coins > coins))
    return int(result.scalar() or 0) + 1
