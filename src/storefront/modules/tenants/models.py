"""Website (tenant) database models."""

from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.core.constants import MAX_DOMAIN_LENGTH
from storefront.core.database.base import Base, TimestampMixin, UUIDMixin


class Website(Base, UUIDMixin, TimestampMixin):
    """Website model representing one onboarded business.

    Websites are created by the provisioning flow and are read-only to
    the intake service.

    Attributes:
        domain: Primary custom domain (e.g. "mybistro.com")
        subdomain: Label under the platform domain (e.g. "mybistro")
        is_active: Whether the website accepts public traffic
        business_type: restaurant, salon, clinic, ...
        config: Opaque settings (payment mode, pickup window, timezone)
    """

    __tablename__ = "websites"

    domain: Mapped[str | None] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        unique=True,
        nullable=True,
        index=True,
    )
    subdomain: Mapped[str | None] = mapped_column(
        String(63),
        unique=True,
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    business_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    config: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        default=dict,
        nullable=False,
    )

    aliases: Mapped[list["WebsiteDomain"]] = relationship(
        "WebsiteDomain",
        back_populates="website",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Website(id={self.id}, domain={self.domain}, subdomain={self.subdomain})>"


class WebsiteDomain(Base, UUIDMixin, TimestampMixin):
    """Alternate domain serving the same website."""

    __tablename__ = "website_domains"

    website_id: Mapped[UUID] = mapped_column(
        ForeignKey("websites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    domain: Mapped[str] = mapped_column(
        String(MAX_DOMAIN_LENGTH),
        unique=True,
        nullable=False,
    )

    website: Mapped[Website] = relationship("Website", back_populates="aliases")
