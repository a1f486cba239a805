"""Catalog database models."""

from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class MenuItem(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Orderable menu item for pickup orders."""

    __tablename__ = "menu_items"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ServiceItem(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Bookable service (haircut, consultation, ...).

    Attributes:
        price: Price per unit
        duration_minutes: Time the service blocks per unit
    """

    __tablename__ = "services"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Professional(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Staff member an appointment can be booked with."""

    __tablename__ = "professionals"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
