"""Tenant snapshot schemas.

A :class:`Tenant` is the cached, read-only view of a website that the
intake pipeline works with. It is rebuilt from the database or the
tenant cache and never written back.
"""

from typing import Any, Literal
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError


logger = structlog.get_logger()


class TenantConfig(BaseModel):
    """Typed view over the website's opaque ``config`` JSON.

    Unknown keys are ignored; the dashboard stores many unrelated
    settings in the same document.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    business_name: str | None = None
    timezone: str = "UTC"
    currency: str | None = None
    payment_mode: Literal["on_pickup", "online"] = "on_pickup"
    pickup_start: str = "12:00"
    pickup_end: str = "22:00"
    order_lead_minutes: int = Field(default=0, ge=0)
    email_booking_confirmation: bool = True

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> "TenantConfig":
        """Parse stored config, falling back to defaults when it is unusable."""
        try:
            return cls.model_validate(raw or {})
        except ValidationError as exc:
            logger.warning("tenant_config_invalid", errors=exc.error_count())
            return cls()


class Tenant(BaseModel):
    """Resolved website snapshot.

    Attributes:
        id: Website UUID
        domain: Primary custom domain, lowercased
        subdomain: Platform subdomain label
        alternate_domains: Extra domains serving the same site
        is_active: Active flag at resolution time
        business_type: restaurant, salon, clinic, ...
        config: Parsed configuration
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    domain: str | None = None
    subdomain: str | None = None
    alternate_domains: list[str] = Field(default_factory=list)
    is_active: bool = True
    business_type: str | None = None
    config: TenantConfig = Field(default_factory=TenantConfig)

    @property
    def online_payments(self) -> bool:
        """Whether orders are paid online through a payment intent."""
        return self.config.payment_mode == "online"
