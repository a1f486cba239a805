"""Public intake payloads and responses.

Payload models are strict: unknown keys anywhere reject the whole
payload and values are never coerced between JSON types. String fields
are trimmed and length-capped after validation.
"""

from collections.abc import Callable
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from storefront.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_GUESTS,
    MAX_LABEL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_PHONE_LENGTH,
    MIN_GUESTS,
    UUID_PATTERN,
)


def _required(max_length: int) -> Callable[[str], str]:
    def clean(value: str) -> str:
        value = value.strip()[:max_length]
        if not value:
            raise ValueError("must not be blank")
        return value

    return clean


def _optional(max_length: int) -> Callable[[str | None], str | None]:
    def clean(value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()[:max_length] or None

    return clean


UUIDStr = Annotated[str, StringConstraints(pattern=UUID_PATTERN)]
DateStr = Annotated[str, StringConstraints(max_length=10)]
TimeStr = Annotated[str, StringConstraints(max_length=8)]

Name = Annotated[str, AfterValidator(_required(MAX_NAME_LENGTH))]
Phone = Annotated[str, AfterValidator(_required(MAX_PHONE_LENGTH))]
Email = Annotated[str | None, AfterValidator(_optional(MAX_EMAIL_LENGTH))]
Notes = Annotated[str | None, AfterValidator(_optional(MAX_NOTES_LENGTH))]
Label = Annotated[str | None, AfterValidator(_optional(MAX_LABEL_LENGTH))]


class StrictPayload(BaseModel):
    """Base for all public payloads."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)


class LineItemPayload(StrictPayload):
    """Reference to a catalog item with a quantity."""

    id: UUIDStr
    quantity: Annotated[float, Field(allow_inf_nan=False)] = 1


class CustomerPayload(StrictPayload):
    name: Name
    phone: Phone
    email: Email = None


class ReservationPayload(StrictPayload):
    """Restaurant table reservation."""

    website_id: UUIDStr | None = None
    name: Name
    phone: Phone
    email: Email = None
    date: DateStr
    time: TimeStr
    guests: Annotated[int, Field(ge=MIN_GUESTS, le=MAX_GUESTS)]
    zone: Label = None
    occasion: Label = None
    notes: Notes = None


class AppointmentPayload(StrictPayload):
    """Service appointment (salon, clinic, ...)."""

    website_id: UUIDStr | None = None
    name: Name
    phone: Phone
    email: Email = None
    date: DateStr
    time: TimeStr
    services: list[LineItemPayload]
    professional_id: UUIDStr | None = None
    customer_id: UUIDStr | None = None
    notes: Notes = None


class OrderPayload(StrictPayload):
    """Pickup order."""

    website_id: UUIDStr | None = None
    items: list[LineItemPayload]
    customer: CustomerPayload
    pickup_date: DateStr
    pickup_time: TimeStr
    notes: Notes = None


class CancellationPayload(StrictPayload):
    """Customer cancellation of an existing booking."""

    booking_id: UUIDStr


class BookingCreatedResponse(BaseModel):
    success: bool = True
    booking_id: str
    status: str
    message: str


class OrderCreatedResponse(BaseModel):
    success: bool = True
    order_id: str
    status: str
    total_amount: float
    currency: str
    client_secret: str | None = None


class CancellationResponse(BaseModel):
    success: bool = True
    status: str = "cancelled"
