"""Profile router for /api/user/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.auth.dependencies import Identity, get_current_identity
from aceapt.database import get_session
from aceapt.db.models import User
from aceapt.users.schemas import (
    MessageResponse,
    ProfileResponse,
    ProfileStats,
    ProfileUpdateRequest,
    PublicProfileResponse,
)
from aceapt.users.service import get_profile, update_profile

router = APIRouter(prefix="/api/user", tags=["Users"])


def _stats(stats: dict[str, int]) -> ProfileStats:
    return ProfileStats(
        total_questions=stats["total_questions"],
        correct_answers=stats["correct_answers"],
        rank=stats["rank"],
    )


def _public_profile(user: User, stats: dict[str, int]) -> PublicProfileResponse:
    return PublicProfileResponse(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        profile_picture=user.profile_picture,
        coins=user.coins,
        created_at=user.created_at,
        stats=_stats(stats),
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_own_profile(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Own profile, including email, progress stats and coin rank."""
    user, stats = await get_profile(db, identity.user_id)
    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        profile_picture=user.profile_picture,
        coins=user.coins,
        created_at=user.created_at,
        stats=_stats(stats),
    )


@router.put("/profile", response_model=MessageResponse)
async def update_own_profile(
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Update display name and picture."""
    await update_profile(
        db,
        identity.user_id,
        full_name=body.full_name,
        profile_picture=body.profile_picture,
    )
    return MessageResponse(message="Profile updated successfully")


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_public_profile(
    user_id: int,
    db: AsyncSession = Depends(get_session),
) -> PublicProfileResponse:
    """Another user's profile with stats. No email."""
    user, stats = await get_profile(db, user_id)
    return _public_profile(user, stats)
