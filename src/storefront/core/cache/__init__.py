"""Redis connection management and cache helpers."""

from storefront.core.cache.redis import RedisCache, close_redis_pool, redis_client


__all__ = [
    "RedisCache",
    "close_redis_pool",
    "redis_client",
]
