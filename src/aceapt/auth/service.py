"""
Credential store business logic.

Handles user registration, sign-in and account lockout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from aceapt.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from aceapt.config import get_settings
from aceapt.db.models import User
from aceapt.errors import AccountLockedError, AuthError, ConflictError, ValidationError

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Emails are stored lowercased; the comparison ignores case anyway."""
    normalized = email.strip().lower()
    result = await db.execute(select(User).where(func.lower(User.email) == normalized))
    return result.scalars().first()


async def username_or_email_taken(db: AsyncSession, username: str, email: str) -> bool:
    result = await db.execute(
        select(func.count(User.id)).where(
            or_(User.username == username, func.lower(User.email) == email.lower())
        )
    )
    return (result.scalar() or 0) > 0


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
) -> User:
    """
    Register a new user with a zero coin balance and commit.

    Raises:
        ValidationError: If the password is too weak.
        ConflictError: If the username or email is already registered.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise ValidationError(str(e)) from e

    if await username_or_email_taken(db, username, email):
        msg = "Username or email already exists"
        raise ConflictError(msg)

    user = User(
        username=username,
        email=email.lower().strip(),
        password_hash=hash_password(password),
        full_name=full_name or None,
        coins=0,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race against a concurrent registration with the same identity
        await db.rollback()
        msg = "Username or email already exists"
        raise ConflictError(msg) from e

    logger.info("user_registered", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


async def authenticate_user(
    db: AsyncSession,
    redis: Redis,
    email: str,
    password: str,
) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        AuthError: If the credentials are invalid.
        AccountLockedError: If too many recent attempts failed.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        msg = "Invalid email or password"
        raise AuthError(msg)

    if await check_account_lockout(redis, user.id):
        msg = "Account temporarily locked. Try again later."
        raise AccountLockedError(msg)

    if not verify_password(password, user.password_hash):
        await increment_failed_login(redis, user.id)
        logger.info("login_failed", user_id=user.id)
        msg = "Invalid email or password"
        raise AuthError(msg)

    await clear_failed_login(redis, user.id)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.commit()
        logger.info("password_rehashed", user_id=user.id)

    return user


# ---------------------------------------------------------------------------
# Sign-in lockout
#
# One Redis counter per user counts failed passwords. The first failure starts
# the lockout window; the key expires with it, which unlocks the account.
# ---------------------------------------------------------------------------


def _failures_key(user_id: int) -> str:
    return f"login_attempts:{user_id}"


async def check_account_lockout(redis: Redis, user_id: int) -> bool:
    """True while the failure count is at or above the configured threshold."""
    failures = await redis.get(_failures_key(user_id))
    return failures is not None and int(failures) >= get_settings().account_lockout_threshold


async def increment_failed_login(redis: Redis, user_id: int) -> int:
    key = _failures_key(user_id)
    failures = int(await redis.incr(key))
    if failures == 1:
        await redis.expire(key, get_settings().account_lockout_duration_minutes * 60)
    return failures


async def clear_failed_login(redis: Redis, user_id: int) -> None:
    await redis.delete(_failures_key(user_id))
