"""Fixed window rate limiter with pluggable counter stores.

A window opens on the first request for a key and admits ``requests``
hits until it expires. Once the counter passes the ceiling further
requests are rejected without incrementing it, so a flood of rejected
requests never extends or inflates the window.
"""

import asyncio
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import structlog

from storefront.core.cache.redis import redis_client


logger = structlog.get_logger()

Clock = Callable[[], float]


class EndpointClass(StrEnum):
    """Rate-limit preset names, one per class of public endpoint."""

    STANDARD = "standard"
    PAYMENTS = "payments"


@dataclass(frozen=True)
class RateLimitPreset:
    """A ``(window, ceiling)`` pair applied to one endpoint class."""

    name: str
    requests: int
    window_seconds: int


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: int | None = None


class RateLimitStore(Protocol):
    """Counter storage for the fixed window algorithm.

    ``hit`` must be atomic per key: two concurrent callers can never both
    observe a count below the ceiling for the same last slot.
    """

    async def hit(self, key: str, limit: int, window_seconds: int) -> tuple[int, float]:
        """Register a request and return ``(count, reset_at)``."""
        ...


@dataclass
class _Bucket:
    count: int
    reset_at: float


class MemoryRateLimitStore:
    """Process-local counters guarded by a single asyncio lock.

    Expired buckets are swept at most once per ``cleanup_interval``.
    """

    def __init__(self, clock: Clock = time.time, cleanup_interval: float = 300.0) -> None:
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = asyncio.Lock()
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = clock()

    def _sweep(self, now: float) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        expired = [key for key, bucket in self._buckets.items() if bucket.reset_at <= now]
        for key in expired:
            del self._buckets[key]

    async def hit(self, key: str, limit: int, window_seconds: int) -> tuple[int, float]:
        async with self._lock:
            now = self._clock()
            self._sweep(now)

            bucket = self._buckets.get(key)
            if bucket is None or bucket.reset_at <= now:
                bucket = _Bucket(count=1, reset_at=now + window_seconds)
                self._buckets[key] = bucket
                return bucket.count, bucket.reset_at

            if bucket.count <= limit:
                bucket.count += 1
            return bucket.count, bucket.reset_at

    async def current_count(self, key: str) -> int:
        """Count in the live window for ``key`` (0 when none is open)."""
        async with self._lock:
            bucket = self._buckets.get(key)
            if bucket is None or bucket.reset_at <= self._clock():
                return 0
            return bucket.count


# Window open, capped increment and TTL read in one server-side step.
_FIXED_WINDOW_SCRIPT = """
local limit = tonumber(ARGV[1])
local window_ms = tonumber(ARGV[2])
local current = redis.call('GET', KEYS[1])
if not current then
  redis.call('SET', KEYS[1], 1, 'PX', window_ms)
  return {1, window_ms}
end
current = tonumber(current)
if current <= limit then
  current = redis.call('INCR', KEYS[1])
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl < 0 then
  redis.call('PEXPIRE', KEYS[1], window_ms)
  ttl = window_ms
end
return {current, ttl}
"""


class RedisRateLimitStore:
    """Shared counters in Redis, updated by a single Lua script call."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock

    async def hit(self, key: str, limit: int, window_seconds: int) -> tuple[int, float]:
        now = self._clock()
        async with redis_client() as client:
            count, ttl_ms = await client.eval(
                _FIXED_WINDOW_SCRIPT,
                1,
                key,
                limit,
                window_seconds * 1000,
            )
        return int(count), now + int(ttl_ms) / 1000


class FixedWindowRateLimiter:
    """Rate limiter keyed by client IP, tenant and endpoint class.

    Usage:
        limiter = FixedWindowRateLimiter(MemoryRateLimitStore(), presets)
        key = limiter.build_key(ip, tenant.id, EndpointClass.STANDARD)
        result = await limiter.check(key, EndpointClass.STANDARD)
    """

    def __init__(
        self,
        store: RateLimitStore,
        presets: dict[str, RateLimitPreset],
        prefix: str = "ratelimit",
        clock: Clock = time.time,
    ) -> None:
        self.store = store
        self.presets = presets
        self.prefix = prefix
        self._clock = clock

    def build_key(self, client_ip: str, tenant_id: object, endpoint_class: str) -> str:
        """Build the counter key for one client on one tenant.

        Scoping by tenant keeps one storefront's burst from throttling
        another whose visitors share the same edge IP pool.
        """
        return f"{self.prefix}:{client_ip}:{tenant_id}:{endpoint_class}"

    def preset(self, name: str) -> RateLimitPreset:
        """Look up a preset by endpoint class name.

        Raises:
            KeyError: If no preset with that name is configured
        """
        return self.presets[name]

    async def check(self, key: str, preset_name: str) -> RateLimitResult:
        """Count a request against ``key`` and decide whether it may proceed.

        Args:
            key: Counter key from :meth:`build_key`
            preset_name: Endpoint class selecting the window and ceiling

        Returns:
            RateLimitResult with allowed status and reset metadata
        """
        preset = self.preset(preset_name)
        count, reset_at = await self.store.hit(key, preset.requests, preset.window_seconds)

        allowed = count <= preset.requests
        retry_after = None
        if not allowed:
            retry_after = max(1, math.ceil(reset_at - self._clock()))
            logger.warning(
                "rate_limit_exceeded",
                key=key,
                preset=preset.name,
                count=count,
                limit=preset.requests,
            )

        return RateLimitResult(
            allowed=allowed,
            limit=preset.requests,
            remaining=max(0, preset.requests - count),
            reset_at=math.ceil(reset_at),
            retry_after=retry_after,
        )


def build_presets(
    standard_requests: int,
    standard_window: int,
    payments_requests: int,
    payments_window: int,
) -> dict[str, RateLimitPreset]:
    """Build the preset table for the two public endpoint classes."""
    return {
        EndpointClass.STANDARD: RateLimitPreset(
            name=EndpointClass.STANDARD,
            requests=standard_requests,
            window_seconds=standard_window,
        ),
        EndpointClass.PAYMENTS: RateLimitPreset(
            name=EndpointClass.PAYMENTS,
            requests=payments_requests,
            window_seconds=payments_window,
        ),
    }
