"""
Unit tests for the parent elevation rate limiter
"""

import asyncio

import pytest

from family_auth.adapter.stores.memory_store import InMemoryKeyValueStore
from family_auth.app.services.rate_limiter import (
    ParentElevationRateLimiter,
    RateLimitDecision,
    RateLimitSettings,
)
from tests.utils.fakes import FakeClock


def make_limiter(clock, **overrides):
    settings = RateLimitSettings(**overrides)
    store = InMemoryKeyValueStore()
    return ParentElevationRateLimiter(store, settings, clock=clock), store


def test_key_uses_first_forwarded_hop():
    assert ParentElevationRateLimiter.key("member-1", "10.0.0.5, 172.16.0.1") == "10.0.0.5::member-1"
    assert ParentElevationRateLimiter.key("member-1", "  192.168.1.2 ") == "192.168.1.2::member-1"


def test_key_defaults_to_unknown_ip():
    assert ParentElevationRateLimiter.key("member-1") == "unknown::member-1"
    assert ParentElevationRateLimiter.key("member-1", "") == "unknown::member-1"
    assert ParentElevationRateLimiter.key("member-1", " , 10.0.0.1") == "unknown::member-1"


def test_retry_after_seconds_rounds_up():
    assert RateLimitDecision(allowed=False, retry_after_ms=1).retry_after_seconds == 1
    assert RateLimitDecision(allowed=False, retry_after_ms=1000).retry_after_seconds == 1
    assert RateLimitDecision(allowed=False, retry_after_ms=1001).retry_after_seconds == 2


@pytest.mark.asyncio
async def test_backoff_after_free_failures():
    """Two free failures, then a one second block that lapses on its own"""
    clock = FakeClock()
    limiter, _ = make_limiter(clock, free_failures=2, base_backoff_ms=1000, max_backoff_ms=8000)
    key = limiter.key("parent-1", "10.0.0.1")

    await limiter.record_failure(key)
    await limiter.record_failure(key)
    assert (await limiter.check(key)).allowed

    await limiter.record_failure(key)
    decision = await limiter.check(key)
    assert not decision.allowed
    assert decision.retry_after_ms == 1000

    clock.advance(1000)
    assert (await limiter.check(key)).allowed


@pytest.mark.asyncio
async def test_clear_resets_immediately():
    clock = FakeClock()
    limiter, store = make_limiter(clock, free_failures=2, base_backoff_ms=1000, max_backoff_ms=8000)
    key = limiter.key("parent-1", "10.0.0.1")

    for _ in range(3):
        await limiter.record_failure(key)
    assert not (await limiter.check(key)).allowed

    await limiter.clear(key)

    assert (await limiter.check(key)).allowed
    assert len(store) == 0


@pytest.mark.asyncio
async def test_backoff_doubles_and_caps():
    clock = FakeClock()
    limiter, _ = make_limiter(clock, free_failures=2, base_backoff_ms=1000, max_backoff_ms=8000)
    key = limiter.key("parent-1")

    blocks = []
    for _ in range(7):
        entry = await limiter.record_failure(key)
        blocks.append(entry.blocked_until_ms - clock())

    assert blocks == [0, 0, 1000, 2000, 4000, 8000, 8000]


@pytest.mark.asyncio
async def test_window_expiry_restores_budget():
    clock = FakeClock()
    limiter, _ = make_limiter(clock, window_ms=2000, free_failures=1)
    key = limiter.key("parent-1", "10.0.0.1")

    await limiter.record_failure(key)
    await limiter.record_failure(key)
    assert not (await limiter.check(key)).allowed

    clock.advance(3000)
    assert (await limiter.check(key)).allowed

    # Budget restored: the next failure is free again
    entry = await limiter.record_failure(key)
    assert entry.failure_count == 1
    assert entry.first_failure_at_ms == clock()
    assert (await limiter.check(key)).allowed


@pytest.mark.asyncio
async def test_block_never_shrinks():
    clock = FakeClock()
    limiter, _ = make_limiter(clock, free_failures=0, base_backoff_ms=1000, max_backoff_ms=300000)
    key = limiter.key("parent-1")

    for _ in range(4):
        await limiter.record_failure(key)
    blocked_until = (await limiter.record_failure(key)).blocked_until_ms

    # An out-of-order failure stamped in the past must not pull the block back
    entry = await limiter.record_failure(key, now_ms=clock() - 60000)
    assert entry.blocked_until_ms >= blocked_until


@pytest.mark.asyncio
async def test_check_does_not_mutate_store():
    clock = FakeClock()
    limiter, store = make_limiter(clock, window_ms=2000, free_failures=1)
    key = limiter.key("parent-1")

    await limiter.record_failure(key)
    clock.advance(5000)

    assert (await limiter.check(key)).allowed
    assert len(store) == 1


@pytest.mark.asyncio
async def test_keys_are_independent():
    clock = FakeClock()
    limiter, _ = make_limiter(clock, free_failures=0)

    await limiter.record_failure(limiter.key("parent-1", "10.0.0.1"))

    assert not (await limiter.check(limiter.key("parent-1", "10.0.0.1"))).allowed
    assert (await limiter.check(limiter.key("parent-2", "10.0.0.1"))).allowed
    assert (await limiter.check(limiter.key("parent-1", "10.0.0.2"))).allowed


class YieldingStore(InMemoryKeyValueStore):
    """Gives other tasks a chance to run between read and write, like a network store"""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)


@pytest.mark.asyncio
async def test_concurrent_failures_on_one_key_are_all_counted():
    clock = FakeClock()
    limiter = ParentElevationRateLimiter(YieldingStore(), RateLimitSettings(), clock=clock)
    key = limiter.key("parent-1", "10.0.0.1")

    await asyncio.gather(*(limiter.record_failure(key) for _ in range(8)))

    entry = await limiter.record_failure(key)
    assert entry.failure_count == 9


def test_settings_from_config():
    class Config:
        PARENT_ELEVATION_RATE_LIMIT_WINDOW_MS = 1
        PARENT_ELEVATION_RATE_LIMIT_BASE_BACKOFF_MS = 2
        PARENT_ELEVATION_RATE_LIMIT_MAX_BACKOFF_MS = 3
        PARENT_ELEVATION_RATE_LIMIT_FREE_FAILURES = 4

    settings = RateLimitSettings.from_config(Config)

    assert settings == RateLimitSettings(
        window_ms=1, base_backoff_ms=2, max_backoff_ms=3, free_failures=4
    )
