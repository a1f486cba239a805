"""Fixed window rate limiting for public intake endpoints.

Counters are keyed by client IP, tenant and endpoint class, with
in-process and Redis-backed stores.
"""

from storefront.core.rate_limit.backend import (
    EndpointClass,
    FixedWindowRateLimiter,
    MemoryRateLimitStore,
    RateLimitPreset,
    RateLimitResult,
    RedisRateLimitStore,
    build_presets,
)


__all__ = [
    "EndpointClass",
    "FixedWindowRateLimiter",
    "MemoryRateLimitStore",
    "RateLimitPreset",
    "RateLimitResult",
    "RedisRateLimitStore",
    "build_presets",
]
