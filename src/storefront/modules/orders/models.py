"""Order database models."""

from datetime import date
from decimal import Decimal
from enum import StrEnum
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MAX_STATUS_LENGTH,
)
from storefront.core.database.base import Base, TenantMixin, TimestampMixin, UUIDMixin


class OrderStatus(StrEnum):
    """Order lifecycle states owned by the intake service."""

    PENDING = "pending"
    FAILED = "failed"


class Order(Base, UUIDMixin, TimestampMixin, TenantMixin):
    """Pickup order.

    An order always has at least one :class:`OrderItem`; the intake
    service deletes the order if its items cannot be stored.

    Attributes:
        total_amount: Server-computed total in major currency units
        payment_mode: on_pickup or online, copied from the website config
        payment_intent_id: Provider correlation ID for online payment
        payment_status: Last known provider status of the intent
    """

    __tablename__ = "orders"

    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(String(MAX_NAME_LENGTH), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(MAX_PHONE_LENGTH), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(MAX_EMAIL_LENGTH), nullable=True)
    pickup_date: Mapped[date] = mapped_column(nullable=False, index=True)
    pickup_time: Mapped[str] = mapped_column(String(8), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_status: Mapped[str | None] = mapped_column(String(50), nullable=True)


class OrderItem(Base, UUIDMixin, TimestampMixin):
    """One distinct menu item of an order, priced at order time."""

    __tablename__ = "order_items"

    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id: Mapped[UUID] = mapped_column(
        ForeignKey("menu_items.id", ondelete="RESTRICT"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
