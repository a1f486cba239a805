"""Opening-hours database models.

Times are stored as the ``HH:MM[:SS]`` text the dashboard writes.
Weekdays use Monday=0 through Sunday=6.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Integer, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class BusinessHour(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Legacy single open/close range per weekday."""

    __tablename__ = "business_hours"
    __table_args__ = (UniqueConstraint("website_id", "day_of_week"),)

    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    open_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    close_time: Mapped[str | None] = mapped_column(String(8), nullable=True)


class BusinessHourSlot(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """One of several weekly opening windows (split shifts)."""

    __tablename__ = "business_hour_slots"

    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False, index=True)
    open_time: Mapped[str] = mapped_column(String(8), nullable=False)
    close_time: Mapped[str] = mapped_column(String(8), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class SpecialDay(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Per-date exception to the weekly schedule (holiday, custom hours).

    Attributes:
        day: The calendar date overridden (``date`` column)
        is_open: False closes the whole day
        open_time: Single range used when no slots are configured
        close_time: Single range used when no slots are configured
        note: Free text shown in the dashboard
    """

    __tablename__ = "special_days"
    __table_args__ = (UniqueConstraint("website_id", "date"),)

    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    is_open: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    open_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    close_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)

    slots: Mapped[list["SpecialDaySlot"]] = relationship(
        "SpecialDaySlot",
        cascade="all, delete-orphan",
        order_by="SpecialDaySlot.sort_order",
        lazy="selectin",
    )


class SpecialDaySlot(Base, UUIDMixin):
    """Opening window belonging to a special day."""

    __tablename__ = "special_day_slots"

    special_day_id: Mapped[UUID] = mapped_column(
        ForeignKey("special_days.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    open_time: Mapped[str] = mapped_column(String(8), nullable=False)
    close_time: Mapped[str] = mapped_column(String(8), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
