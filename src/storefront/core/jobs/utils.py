"""Shared helpers for the ARQ pool and worker."""

from arq.connections import RedisSettings

from storefront.config import settings


def get_redis_settings() -> RedisSettings:
    """Build ARQ Redis settings from the configured Redis URL."""
    return RedisSettings.from_dsn(str(settings.redis_url))
