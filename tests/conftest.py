"""Shared test fixtures.

The app runs against a throwaway SQLite database built from the ORM metadata,
and Redis is replaced by an AsyncMock double.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from aceapt.database import close_db, get_engine, get_session, init_db
from aceapt.db.base import Base
from aceapt.db.models import Category, Question, TestSeries, Topic, User
from aceapt.main import create_app
from aceapt.redis_client import get_redis

DEFAULT_PASSWORD = "SecurePass1"


@pytest_asyncio.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database file with all tables created."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'ace_test.db'}")
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await close_db()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for seeding and assertions."""
    sessions = get_session()
    session = await sessions.__anext__()
    yield session
    await sessions.aclose()


@pytest.fixture
def fake_redis() -> MagicMock:
    """Redis double: no stored lockout counters, increments start at 1."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest_asyncio.fixture
async def client(db_engine: AsyncEngine, fake_redis: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a fresh app instance."""
    app = create_app()
    app.dependency_overrides[get_redis] = lambda: fake_redis
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: register + sign in a user, return its id, token and auth headers."""

    async def _make_user(username: str = "alice", full_name: str | None = None) -> dict:
        email = f"{username}@example.com"
        response = await client.post("/api/auth/register", json={
            "username": username,
            "email": email,
            "password": DEFAULT_PASSWORD,
            "fullName": full_name,
        })
        assert response.status_code == 201, response.text

        response = await client.post("/api/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
        assert response.status_code == 200, response.text
        data = response.json()
        return {
            "user_id": data["user"]["id"],
            "username": username,
            "email": email,
            "token": data["accessToken"],
            "headers": {"Authorization": f"Bearer {data['accessToken']}"},
        }

    return _make_user


@pytest_asyncio.fixture
async def user(make_user: Callable[..., Awaitable[dict]]) -> dict:
    return await make_user("alice", full_name="Alice Example")


@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> dict[str, int]:
    """Seed one category, two topics, two test series and three questions."""
    quant = Category(name="Quantitative Aptitude", description="Numbers", icon="calculator", color="blue")
    db_session.add(quant)
    await db_session.flush()

    percentages = Topic(category_id=quant.id, name="Percentages", description="Percent change")
    averages = Topic(category_id=quant.id, name="Averages", description="Means")
    mock_series = TestSeries(name="Placement Mock Series", description="Full-length mocks", coin_cost=20)
    premium_series = TestSeries(name="Premium Series", description="Hard sets", coin_cost=50)
    db_session.add_all([percentages, averages, mock_series, premium_series])
    await db_session.flush()

    q1 = Question(
        topic_id=percentages.id,
        question="What is 25% of 80?",
        option_a="10", option_b="20", option_c="25", option_d="40",
        correct_option="B",
        difficulty_level="easy",
        coins_reward=5,
        explanation="0.25 * 80 = 20",
    )
    q2 = Question(
        topic_id=percentages.id,
        question="A price rises from 50 to 60. Percent increase?",
        option_a="10%", option_b="12%", option_c="16%", option_d="20%",
        correct_option="D",
        difficulty_level="medium",
        coins_reward=10,
        explanation="10 / 50 = 20%",
    )
    q3 = Question(
        topic_id=averages.id,
        test_series_id=mock_series.id,
        question="Average of 2, 4 and 9?",
        option_a="3", option_b="4", option_c="5", option_d="6",
        correct_option="C",
        difficulty_level="easy",
        coins_reward=0,
        explanation="15 / 3 = 5",
    )
    db_session.add_all([q1, q2, q3])
    await db_session.commit()

    return {
        "category_id": quant.id,
        "topic_id": percentages.id,
        "other_topic_id": averages.id,
        "series_id": mock_series.id,
        "premium_series_id": premium_series.id,
        "q1": q1.id,
        "q2": q2.id,
        "q3": q3.id,
    }


async def set_coins(db: AsyncSession, user_id: int, coins: int) -> None:
    await db.execute(update(User).where(User.id == user_id).values(coins=coins))
    await db.commit()


async def get_coins(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(select(User.coins).where(User.id == user_id))
    return result.scalar_one()


@pytest.fixture
def coins(db_session: AsyncSession) -> SimpleNamespace:
    """``await coins.get(user_id)`` and ``await coins.set(user_id, n)`` against the test database."""
    return SimpleNamespace(
        get=lambda user_id: get_coins(db_session, user_id),
        set=lambda user_id, value: set_coins(db_session, user_id, value),
    )
