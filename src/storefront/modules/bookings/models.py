"""Booking and customer database models."""

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_LABEL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_STATUS_LENGTH,
)
from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class BookingStatus(StrEnum):
    """Booking lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class BookingType(StrEnum):
    RESERVATION = "reservation"
    APPOINTMENT = "appointment"


class Customer(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Customer of a website, optionally linked to a portal login.

    Attributes:
        auth_user_id: Portal user that owns this customer record
    """

    __tablename__ = "customers"

    auth_user_id: Mapped[UUID | None] = mapped_column(nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(MAX_PHONE_LENGTH), nullable=True)
    email: Mapped[str | None] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=True)


class Booking(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Table reservation or service appointment.

    Status starts as ``pending`` (reservations) or ``confirmed``
    (appointments) and is later moved by dashboard actions, or to
    ``cancelled`` by the customer.
    """

    __tablename__ = "bookings"

    booking_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    booking_date: Mapped[date] = mapped_column(nullable=False, index=True)
    booking_time: Mapped[str] = mapped_column(String(8), nullable=False)

    customer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(MAX_PHONE_LENGTH), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=True)

    # Reservations
    guests: Mapped[int | None] = mapped_column(Integer, nullable=True)
    zone: Mapped[str | None] = mapped_column(String(MAX_LABEL_LENGTH), nullable=True)
    occasion: Mapped[str | None] = mapped_column(String(MAX_LABEL_LENGTH), nullable=True)

    # Appointments
    services: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list, nullable=False)
    professional_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("professionals.id", ondelete="SET NULL"),
        nullable=True,
    )
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, status={self.status}, website_id={self.website_id})>"
