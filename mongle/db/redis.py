"""Redis async client backing the local gauge cache."""

import redis.asyncio as redis

from mongle.config import settings

redis_client: redis.Redis | None = None


def get_redis_client(url: str | None = None) -> redis.Redis:
    """Shared client for the cache; created on first use from REDIS_URL."""
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(url or settings.REDIS_URL, decode_responses=True)
    return redis_client


async def close_redis() -> None:
    """Close the shared client if open (engine shutdown)."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
