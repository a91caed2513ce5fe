"""Shared Redis client. Holds rate-limit windows and failed sign-in counters only."""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 20) -> None:
    """Create the process-wide client; connections are opened lazily."""
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """FastAPI dependency. Raises RuntimeError before ``init_redis``."""
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client


async def redis_ping() -> str:
    """``"ok"`` or a short error description, for the readiness probe."""
    try:
        await get_redis().ping()
    except (RuntimeError, redis.RedisError) as exc:
        return f"error: {exc}"
    return "ok"
