"""User profile business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import case, func, select

from aceapt.db.models import User, UserProgress
from aceapt.errors import NotFoundError
from aceapt.leaderboard.service import get_rank_for_coins

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def lock_user(db: AsyncSession, user_id: int) -> User:
    """
    Load the user row with ``SELECT ... FOR UPDATE``.

    Settlement services call this first so that all balance changes for one
    user are serialized until their transaction ends. The row is re-read even
    if the session already holds the object.

    Raises:
        NotFoundError: If the user does not exist.
    """
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def get_progress_stats(db: AsyncSession, user_id: int) -> dict[str, int]:
    """Count attempted questions and how many of them are currently correct."""
    result = await db.execute(
        select(
            func.count(UserProgress.id),
            func.sum(case((UserProgress.is_correct.is_(True), 1), else_=0)),
        ).where(UserProgress.user_id == user_id)
    )
    total, correct = result.one()
    return {"total_questions": int(total or 0), "correct_answers": int(correct or 0)}


async def get_profile(db: AsyncSession, user_id: int) -> tuple[User, dict[str, int]]:
    """
    Fetch a user with their stats: attempted, correct, and coin rank.

    Raises:
        NotFoundError: If the user does not exist.
    """
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)

    stats = await get_progress_stats(db, user_id)
    stats["rank"] = await get_rank_for_coins(db, user.coins)
    return user, stats


async def update_profile(
    db: AsyncSession,
    user_id: int,
    full_name: str | None = None,
    profile_picture: str | None = None,
) -> User:
    """Replace the display fields. Empty values clear the field."""
    user = await lock_user(db, user_id)
    user.full_name = full_name or None
    user.profile_picture = profile_picture or None
    await db.commit()
    logger.info("profile_updated", user_id=user_id)
    return user
