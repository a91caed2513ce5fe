"""ASGI entry point: ``uvicorn aceapt.main:app``."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from aceapt.answers.router import router as answers_router
from aceapt.auth.router import router as auth_router
from aceapt.catalog.router import router as catalog_router
from aceapt.config import get_settings
from aceapt.database import close_db, init_db
from aceapt.health.router import router as health_router
from aceapt.leaderboard.router import router as leaderboard_router
from aceapt.middleware import setup_middleware
from aceapt.purchases.router import router as purchases_router
from aceapt.redis_client import close_redis, init_redis
from aceapt.users.router import router as users_router

logger = structlog.get_logger()

# /api/user/{user_id} is a catch-all under /api/user, so users_router goes last
ROUTERS = (
    health_router,
    auth_router,
    catalog_router,
    answers_router,
    purchases_router,
    leaderboard_router,
    users_router,
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and Redis pools for the lifetime of the process."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("api_started", environment=settings.environment, version=settings.app_version)
    try:
        yield
    finally:
        await close_db()
        await close_redis()
        logger.info("api_stopped")


def create_app() -> FastAPI:
    """Build the app; tests call this directly and skip the lifespan."""
    settings = get_settings()
    app = FastAPI(
        title="Ace Aptitude API",
        description="Aptitude quiz backend: questions, coin rewards, test series and leaderboards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    setup_middleware(app, settings)
    for router in ROUTERS:
        app.include_router(router)
    return app


app = create_app()
