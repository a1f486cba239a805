"""Activity log model."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class ActivityLog(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Event shown in the website's activity feed.

    Attributes:
        action: Event name (booking_created, order_created, ...)
        details: Event payload as dispatched
    """

    __tablename__ = "activity_log"

    action: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
