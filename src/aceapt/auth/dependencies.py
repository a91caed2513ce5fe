"""FastAPI authentication dependencies.

The session token is verified once here and handed to services as an
``Identity``; services never look at request headers themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.auth.jwt import verify_token
from aceapt.auth.service import get_user_by_id
from aceapt.database import get_session
from aceapt.errors import AuthError

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """A verified caller. Only constructed from a valid session token."""

    user_id: int
    username: str


async def _resolve_identity(token: str, db: AsyncSession) -> Identity:
    try:
        payload = verify_token(token)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise AuthError("Not authenticated") from e

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise AuthError("Not authenticated")
    return Identity(user_id=user.id, username=user.username)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Identity:
    """Require a valid session. Raises AuthError (401) otherwise."""
    if credentials is None:
        raise AuthError("Not authenticated")
    return await _resolve_identity(credentials.credentials, db)


async def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Identity | None:
    """Resolve the caller if a valid session is present, otherwise None."""
    if credentials is None:
        return None
    try:
        return await _resolve_identity(credentials.credentials, db)
    except AuthError:
        return None
