"""Redis-backed abuse counters, shared across instances.

Keys:
  abuse:reports:{user_id}  — plain INCR, no expiry
  abuse:spam:{user_id}     — INCR, then EXPIRE refreshed on every occurrence,
                             so the key lives `window` seconds past the last
                             spam hit (same semantics as the in-memory store)
"""

from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from src.bt_common.redis_client import get_redis

_REPORTS_KEY = "abuse:reports:{user_id}"
_SPAM_KEY = "abuse:spam:{user_id}"


class RedisAbuseCounters:
    def __init__(
        self,
        window_seconds: int,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        self._window = window_seconds
        self._redis_factory = redis_factory

    async def incr_reports(self, user_id: str) -> int:
        redis = await self._redis_factory()
        return int(await redis.incr(_REPORTS_KEY.format(user_id=user_id)))

    async def record_spam(self, user_id: str) -> int:
        redis = await self._redis_factory()
        key = _SPAM_KEY.format(user_id=user_id)
        count = int(await redis.incr(key))
        await redis.expire(key, self._window)
        return count
