"""Reusable payload validation and line-item normalization."""

import math
from dataclasses import dataclass
from typing import TypeVar
from uuid import UUID

import pydantic
import structlog

from storefront.core import messages
from storefront.core.errors import ValidationError
from storefront.modules.intake.schemas import LineItemPayload, StrictPayload


logger = structlog.get_logger()

PayloadT = TypeVar("PayloadT", bound=StrictPayload)


def parse_payload(model: type[PayloadT], body: bytes | str) -> PayloadT:
    """Validate a raw JSON request body against a strict payload model.

    Anything other than a JSON object, any key outside the model's
    fields and any type mismatch rejects the payload as a whole.

    Raises:
        ValidationError: With a generic message; field details are only logged
    """
    try:
        return model.model_validate_json(body)
    except pydantic.ValidationError as exc:
        errors = exc.errors(include_url=False, include_input=False)
        kinds = {error["type"] for error in errors}
        logger.info(
            "payload_rejected",
            payload=model.__name__,
            errors=[
                {"loc": ".".join(str(part) for part in error["loc"]), "type": error["type"]}
                for error in errors
            ],
        )
        message = (
            messages.MISSING_FIELDS
            if kinds == {"missing"}
            else messages.INVALID_PAYLOAD
        )
        raise ValidationError(message, details={"errors": sorted(kinds)}) from exc


@dataclass(frozen=True)
class NormalizedItem:
    id: UUID
    quantity: int


def normalize_items(
    items: list[LineItemPayload],
    max_items: int,
    empty_message: str = messages.EMPTY_ORDER,
) -> list[NormalizedItem]:
    """Collapse duplicate ids and clean quantities.

    Entries with a non-positive quantity are skipped, the rest are
    floored and summed per id, and ids whose total is zero are dropped.
    First-seen order is kept.

    Raises:
        ValidationError: If nothing is left or there are more than
            ``max_items`` distinct items
    """
    totals: dict[str, int] = {}
    for item in items:
        if item.quantity <= 0:
            continue
        key = item.id.lower()
        totals[key] = totals.get(key, 0) + math.floor(item.quantity)

    normalized = [
        NormalizedItem(id=UUID(item_id), quantity=total)
        for item_id, total in totals.items()
        if total > 0
    ]

    if not normalized:
        raise ValidationError(empty_message, error_code="empty_items")
    if len(normalized) > max_items:
        raise ValidationError(messages.TOO_MANY_ITEMS, error_code="too_many_items")
    return normalized
