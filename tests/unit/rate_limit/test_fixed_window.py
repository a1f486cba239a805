"""Tests for the fixed window rate limiter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from storefront.core.rate_limit import (
    EndpointClass,
    FixedWindowRateLimiter,
    MemoryRateLimitStore,
    RedisRateLimitStore,
    build_presets,
)
from tests.fakes import FrozenClock, utc


@pytest.fixture
def limiter_clock() -> FrozenClock:
    return FrozenClock(utc(2024, 6, 3, 8, 0))


@pytest.fixture
def memory_store(limiter_clock: FrozenClock) -> MemoryRateLimitStore:
    return MemoryRateLimitStore(clock=limiter_clock.timestamp)


@pytest.fixture
def limiter(
    memory_store: MemoryRateLimitStore, limiter_clock: FrozenClock
) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        memory_store,
        build_presets(5, 60, 3, 60),
        clock=limiter_clock.timestamp,
    )


class TestKeys:
    """Tests for counter key construction."""

    def test_key_scopes_ip_tenant_and_class(self, limiter):
        """Test the key carries every scoping component."""
        tenant_id = uuid4()
        key = limiter.build_key("203.0.113.7", tenant_id, EndpointClass.STANDARD)
        assert key == f"ratelimit:203.0.113.7:{tenant_id}:standard"

    def test_custom_prefix(self, memory_store):
        """Test key building with custom prefix."""
        limiter = FixedWindowRateLimiter(memory_store, build_presets(1, 1, 1, 1), prefix="rl")
        assert limiter.build_key("ip", "t", EndpointClass.PAYMENTS) == "rl:ip:t:payments"

    def test_unknown_preset_raises(self, limiter):
        with pytest.raises(KeyError):
            limiter.preset("bulk")


class TestFixedWindow:
    """Tests for admission and reset behavior."""

    @pytest.mark.asyncio
    async def test_requests_up_to_ceiling_allowed(self, limiter):
        """Test that the first five requests pass with decreasing remaining."""
        remaining = []
        for _ in range(5):
            result = await limiter.check("k", EndpointClass.STANDARD)
            assert result.allowed is True
            assert result.retry_after is None
            remaining.append(result.remaining)

        assert remaining == [4, 3, 2, 1, 0]

    @pytest.mark.asyncio
    async def test_request_over_ceiling_rejected(self, limiter, limiter_clock):
        """Test the sixth request is rejected with a retry hint."""
        for _ in range(5):
            await limiter.check("k", EndpointClass.STANDARD)

        limiter_clock.advance(seconds=20)
        result = await limiter.check("k", EndpointClass.STANDARD)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.limit == 5
        assert result.retry_after == 40

    @pytest.mark.asyncio
    async def test_rejected_requests_do_not_inflate_counter(
        self, limiter, memory_store
    ):
        """Test the counter stays at ceiling + 1 however many rejections follow."""
        for _ in range(10):
            await limiter.check("k", EndpointClass.STANDARD)

        assert await memory_store.current_count("k") == 6

    @pytest.mark.asyncio
    async def test_window_resets_after_expiry(self, limiter, memory_store, limiter_clock):
        """Test a fresh window opens once the old one has expired."""
        for _ in range(6):
            await limiter.check("k", EndpointClass.STANDARD)

        limiter_clock.advance(seconds=61)
        result = await limiter.check("k", EndpointClass.STANDARD)

        assert result.allowed is True
        assert await memory_store.current_count("k") == 1

    @pytest.mark.asyncio
    async def test_rejections_do_not_extend_window(self, limiter, limiter_clock):
        """Test reset_at stays anchored to the first request of the window."""
        first = await limiter.check("k", EndpointClass.STANDARD)
        for _ in range(10):
            limiter_clock.advance(seconds=5)
            last = await limiter.check("k", EndpointClass.STANDARD)

        assert last.reset_at == first.reset_at

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, limiter):
        """Test exhausting one key leaves another untouched."""
        for _ in range(6):
            await limiter.check("a", EndpointClass.STANDARD)

        result = await limiter.check("b", EndpointClass.STANDARD)
        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_payments_preset_is_stricter(self, limiter):
        results = [await limiter.check("p", EndpointClass.PAYMENTS) for _ in range(4)]
        assert [r.allowed for r in results] == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_concurrent_hits_admit_exactly_ceiling(self, limiter):
        """Test that concurrent checks on one key never over-admit."""
        results = await asyncio.gather(
            *(limiter.check("burst", EndpointClass.STANDARD) for _ in range(20))
        )
        assert sum(r.allowed for r in results) == 5


class TestMemoryStoreSweep:
    """Tests for expired bucket cleanup."""

    @pytest.mark.asyncio
    async def test_expired_buckets_swept(self, limiter_clock):
        store = MemoryRateLimitStore(clock=limiter_clock.timestamp, cleanup_interval=10)
        await store.hit("old", 5, 5)

        limiter_clock.advance(seconds=11)
        await store.hit("new", 5, 5)

        assert "old" not in store._buckets
        assert "new" in store._buckets


class TestRedisRateLimitStore:
    """Tests for the Redis counter store."""

    @pytest.mark.asyncio
    async def test_hit_runs_script_and_derives_reset(self, limiter_clock):
        """Test the Lua script result is mapped to (count, reset_at)."""
        store = RedisRateLimitStore(clock=limiter_clock.timestamp)

        mock_client = MagicMock()
        mock_client.eval = AsyncMock(return_value=[3, 45000])

        with patch("storefront.core.rate_limit.backend.redis_client") as mock_redis:
            mock_redis.return_value.__aenter__ = AsyncMock(return_value=mock_client)
            mock_redis.return_value.__aexit__ = AsyncMock(return_value=None)

            count, reset_at = await store.hit("ratelimit:k", 5, 60)

        assert count == 3
        assert reset_at == limiter_clock.timestamp() + 45
        args = mock_client.eval.call_args.args
        assert args[1:] == (1, "ratelimit:k", 5, 60000)

    @pytest.mark.asyncio
    async def test_limiter_rejects_on_redis_count(self, limiter_clock):
        """Test the limiter rejects when Redis reports ceiling + 1."""
        limiter = FixedWindowRateLimiter(
            RedisRateLimitStore(clock=limiter_clock.timestamp),
            build_presets(5, 60, 3, 60),
            clock=limiter_clock.timestamp,
        )

        mock_client = MagicMock()
        mock_client.eval = AsyncMock(return_value=[6, 30000])

        with patch("storefront.core.rate_limit.backend.redis_client") as mock_redis:
            mock_redis.return_value.__aenter__ = AsyncMock(return_value=mock_client)
            mock_redis.return_value.__aexit__ = AsyncMock(return_value=None)

            result = await limiter.check("k", EndpointClass.STANDARD)

        assert result.allowed is False
        assert result.retry_after == 30
