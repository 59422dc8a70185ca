"""
Unit tests for the Redis rate limiter.

The Redis client is replaced with a mock pipeline; no server is needed.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from authority.adapter.services.redis_rate_limiter import RedisRateLimiter
from authority.app.services.rate_limiter import InMemoryRateLimiter


def make_limiter(execute):
    limiter = RedisRateLimiter("redis://localhost:6379/0", fallback=InMemoryRateLimiter())
    pipe = MagicMock()
    pipe.execute = execute
    limiter.client = MagicMock()
    limiter.client.pipeline.return_value = pipe
    return limiter, pipe


@pytest.mark.asyncio
async def test_allows_within_limit():
    # Arrange
    limiter, pipe = make_limiter(AsyncMock(return_value=[3, True, 840]))

    # Act
    decision = await limiter.hit("auth:10.0.0.1", limit=5, window_seconds=900)

    # Assert
    assert decision.allowed is True
    assert decision.remaining == 2
    assert decision.reset_seconds == 840
    pipe.expire.assert_called_once()
    assert pipe.expire.call_args.kwargs == {"nx": True}


@pytest.mark.asyncio
async def test_blocks_over_limit():
    limiter, _ = make_limiter(AsyncMock(return_value=[6, False, 120]))

    decision = await limiter.hit("auth:10.0.0.1", limit=5, window_seconds=900)

    assert decision.allowed is False
    assert decision.remaining == 0
    assert decision.reset_seconds == 120


@pytest.mark.asyncio
async def test_missing_ttl_falls_back_to_window():
    limiter, _ = make_limiter(AsyncMock(return_value=[1, True, -1]))

    decision = await limiter.hit("auth:10.0.0.1", limit=5, window_seconds=900)

    assert decision.reset_seconds == 900


@pytest.mark.asyncio
async def test_keys_are_hashed_with_prefix():
    limiter, pipe = make_limiter(AsyncMock(return_value=[1, True, 900]))

    await limiter.hit("auth:10.0.0.1", limit=5, window_seconds=900)

    key = pipe.incr.call_args.args[0]
    assert key.startswith("rate:")
    assert "10.0.0.1" not in key


@pytest.mark.asyncio
async def test_redis_outage_uses_in_process_window():
    """An unreachable Redis must still enforce limits locally"""
    # Arrange
    limiter, _ = make_limiter(AsyncMock(side_effect=RedisConnectionError("refused")))

    # Act
    decisions = [await limiter.hit("auth:10.0.0.1", limit=2, window_seconds=900) for _ in range(3)]

    # Assert
    assert [d.allowed for d in decisions] == [True, True, False]
