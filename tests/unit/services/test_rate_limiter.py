import pytest

from authority.app.services.rate_limiter import InMemoryRateLimiter


class ManualTime:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


@pytest.mark.asyncio
async def test_fixed_window_blocks_after_limit():
    limiter = InMemoryRateLimiter(ManualTime())

    decisions = [await limiter.hit("auth:1.2.3.4", 3, 60) for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    assert decisions[-1].reset_seconds == 60


@pytest.mark.asyncio
async def test_window_resets():
    time = ManualTime()
    limiter = InMemoryRateLimiter(time)
    for _ in range(3):
        await limiter.hit("k", 2, 60)

    time.value += 60

    assert (await limiter.hit("k", 2, 60)).allowed


@pytest.mark.asyncio
async def test_keys_are_independent():
    limiter = InMemoryRateLimiter(ManualTime())
    await limiter.hit("a", 1, 60)

    assert not (await limiter.hit("a", 1, 60)).allowed
    assert (await limiter.hit("b", 1, 60)).allowed


@pytest.mark.asyncio
async def test_reset_forgets_key():
    limiter = InMemoryRateLimiter(ManualTime())
    await limiter.hit("a", 1, 60)
    limiter.reset("a")

    assert (await limiter.hit("a", 1, 60)).allowed
