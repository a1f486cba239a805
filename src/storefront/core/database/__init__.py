"""Database layer - session management, base models, and mixins."""

from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin
from storefront.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "TenantMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
]
