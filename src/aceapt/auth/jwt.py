"""
HS256 session tokens.

A token carries the user id (``sub``), the username and a snapshot of the
coin balance at issue time. The snapshot is informational only; balances are
always re-read from the database before they are used.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from aceapt.config import get_settings

SESSION_TOKEN_TYPE = "access"


def create_access_token(user_id: int, username: str, coins: int) -> str:
    """Sign a session token for ``user_id`` valid for the configured lifetime."""
    settings = get_settings()
    issued_at = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "coins": coins,
        "type": SESSION_TOKEN_TYPE,
        "iss": settings.jwt_issuer,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.jwt_access_token_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = SESSION_TOKEN_TYPE) -> dict[str, Any]:
    """
    Check signature, issuer, expiry and token type; return the claims.

    Raises:
        jwt.InvalidTokenError: For any of those failures. Expiry is reported
            as "Token has expired" so callers need only one except clause.
    """
    settings = get_settings()
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        raise jwt.InvalidTokenError("Token has expired") from None

    token_type = claims.get("type")
    if token_type != expected_type:
        msg = f"Expected token type '{expected_type}', got '{token_type}'"
        raise jwt.InvalidTokenError(msg)
    return claims
