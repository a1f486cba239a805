"""intake_schema

Revision ID: 5f3a9c1d2e01
Revises:
Create Date: 2026-10-01 00:01:00.000000

Creates the tables read and written by the public intake service:
websites and their alternate domains, opening hours, catalog, customers,
bookings, orders with their items, and the activity log.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "5f3a9c1d2e01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _website_fk() -> sa.Column:
    return sa.Column(
        "website_id",
        sa.Uuid(),
        sa.ForeignKey("websites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "websites",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("domain", sa.String(255), nullable=True, unique=True),
        sa.Column("subdomain", sa.String(63), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("business_type", sa.String(50), nullable=True),
        sa.Column(
            "config",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
    )
    op.create_index("ix_websites_id", "websites", ["id"])
    op.create_index("ix_websites_domain", "websites", ["domain"])
    op.create_index("ix_websites_subdomain", "websites", ["subdomain"])

    op.create_table(
        "website_domains",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("domain", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )

    # Opening hours
    op.create_table(
        "business_hours",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("open_time", sa.String(8), nullable=True),
        sa.Column("close_time", sa.String(8), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("website_id", "day_of_week"),
    )
    op.create_table(
        "business_hour_slots",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False, index=True),
        sa.Column("open_time", sa.String(8), nullable=False),
        sa.Column("close_time", sa.String(8), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "special_days",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("open_time", sa.String(8), nullable=True),
        sa.Column("close_time", sa.String(8), nullable=True),
        sa.Column("note", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("website_id", "date"),
    )
    op.create_table(
        "special_day_slots",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "special_day_id",
            sa.Uuid(),
            sa.ForeignKey("special_days.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("open_time", sa.String(8), nullable=False),
        sa.Column("close_time", sa.String(8), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    # Catalog
    op.create_table(
        "menu_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "services",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "professionals",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Bookings
    op.create_table(
        "customers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("auth_user_id", sa.Uuid(), nullable=True, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(254), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("booking_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("booking_date", sa.Date(), nullable=False, index=True),
        sa.Column("booking_time", sa.String(8), nullable=False),
        sa.Column(
            "customer_id",
            sa.Uuid(),
            sa.ForeignKey("customers.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("customer_phone", sa.String(50), nullable=False),
        sa.Column("customer_email", sa.String(254), nullable=True),
        sa.Column("guests", sa.Integer(), nullable=True),
        sa.Column("zone", sa.String(120), nullable=True),
        sa.Column("occasion", sa.String(120), nullable=True),
        sa.Column(
            "services",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "professional_id",
            sa.Uuid(),
            sa.ForeignKey("professionals.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Orders
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("customer_phone", sa.String(50), nullable=False),
        sa.Column("customer_email", sa.String(254), nullable=True),
        sa.Column("pickup_date", sa.Date(), nullable=False, index=True),
        sa.Column("pickup_time", sa.String(8), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_mode", sa.String(20), nullable=False),
        sa.Column("payment_intent_id", sa.String(255), nullable=True),
        sa.Column("payment_status", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "order_items",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "menu_item_id",
            sa.Uuid(),
            sa.ForeignKey("menu_items.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _website_fk(),
        sa.Column("action", sa.String(50), nullable=False, index=True),
        sa.Column(
            "details",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        *_timestamps(),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    for table in (
        "activity_log",
        "order_items",
        "orders",
        "bookings",
        "customers",
        "professionals",
        "services",
        "menu_items",
        "special_day_slots",
        "special_days",
        "business_hour_slots",
        "business_hours",
        "website_domains",
        "websites",
    ):
        op.drop_table(table)
