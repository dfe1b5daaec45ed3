"""Redis connection for the shared abuse counters.

Only opened when ABUSE_COUNTER_BACKEND=redis. Listings, offers and
notifications always live in PostgreSQL.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


async def ping_redis() -> None:
    """Raise if the counter backend is Redis and Redis is unreachable."""
    if settings.ABUSE_COUNTER_BACKEND != "redis":
        return
    client = await get_redis()
    await client.ping()


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
