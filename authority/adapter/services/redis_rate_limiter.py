import hashlib
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from authority.app.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitDecision,
    RateLimiter,
)

logger = logging.getLogger(__name__)


class RedisRateLimiter(RateLimiter):
    """
    Redis fixed window: INCR the window key and set its TTL on first hit.

    When Redis cannot be reached the decision is made by a process-local
    limiter instead, so an outage degrades limits rather than blocking logins.
    """

    def __init__(
        self,
        redis_url: str,
        socket_timeout: float = 2.0,
        prefix: str = "rate",
        fallback: Optional[RateLimiter] = None,
    ):
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self.prefix = prefix
        self.fallback = fallback or InMemoryRateLimiter()

    def _key(self, key: str) -> str:
        # Hashed so caller-supplied components cannot collide through delimiters
        digest = hashlib.sha256(key.encode()).hexdigest()
        return f"{self.prefix}:{digest}"

    async def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitDecision:
        redis_key = self._key(key)
        try:
            pipe = self.client.pipeline()
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds, nx=True)
            pipe.ttl(redis_key)
            count, _, ttl = await pipe.execute()
        except RedisError as exc:
            logger.warning(f"Redis rate limit unavailable, using in-process window: {exc}")
            return await self.fallback.hit(key, limit, window_seconds)

        count = int(count)
        reset = int(ttl) if ttl and int(ttl) > 0 else window_seconds
        return RateLimitDecision(
            allowed=count <= limit,
            remaining=max(0, limit - count),
            reset_seconds=reset,
        )

    async def close(self) -> None:
        await self.client.aclose()
