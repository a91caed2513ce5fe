"""Liveness, readiness and version probes. Exempt from rate limiting."""

from fastapi import APIRouter, Depends
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aceapt.config import get_settings
from aceapt.database import get_session
from aceapt.db.models import User
from aceapt.redis_client import redis_ping

router = APIRouter(tags=["Health"])


async def _database_checks(db: AsyncSession) -> dict[str, str]:
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        return {"database": f"error: {exc.__class__.__name__}"}

    try:
        await db.execute(select(User.id).limit(1))
    except SQLAlchemyError as exc:
        return {"database": "ok", "schema": f"error: tables missing, run migrations ({exc.__class__.__name__})"}
    return {"database": "ok", "schema": "ok"}


@router.get("/health")
async def health() -> dict[str, str]:
    """The process is up."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_session)) -> dict[str, object]:  # noqa: B008
    """Database reachable, schema migrated, Redis reachable. ``degraded`` otherwise."""
    checks = await _database_checks(db)
    checks["redis"] = await redis_ping()
    status = "ready" if all(value == "ok" for value in checks.values()) else "degraded"
    return {"status": status, "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"version": settings.app_version, "environment": settings.environment}
