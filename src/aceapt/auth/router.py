"""Authentication router for all /api/auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.auth.jwt import create_access_token
from aceapt.auth.schemas import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    SessionUser,
    TokenResponse,
)
from aceapt.auth.service import authenticate_user, register_user
from aceapt.config import get_settings
from aceapt.database import get_session
from aceapt.redis_client import get_redis

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> RegisterResponse:
    """Register with username, email and password. Starts with 0 coins."""
    await register_user(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
    )
    return RegisterResponse(message="User registered successfully")


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    redis: Redis = Depends(get_redis),  # type: ignore[assignment]
) -> TokenResponse:
    """Sign in with email + password and receive a session token."""
    settings = get_settings()
    user = await authenticate_user(db, redis, body.email, body.password)
    return TokenResponse(
        access_token=create_access_token(user.id, user.username, user.coins),
        token_type="bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=SessionUser.model_validate(user),
    )
