"""Error taxonomy and ``{"error": ...}`` response handlers."""

from storefront.core.errors.exceptions import (
    AvailabilityError,
    ForbiddenError,
    IntakeError,
    NotFoundError,
    RateLimitedError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from storefront.core.errors.handlers import ErrorBody, register_exception_handlers


__all__ = [
    "AvailabilityError",
    "ErrorBody",
    "ForbiddenError",
    "IntakeError",
    "NotFoundError",
    "RateLimitedError",
    "StorageError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
