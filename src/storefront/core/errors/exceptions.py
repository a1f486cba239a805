"""Domain exceptions for the intake pipeline.

Every orchestrator step either returns normally or raises one of these.
They are converted to ``{"error": ...}`` responses by the exception
handlers, so ``message`` must always be safe to show to a client.
"""

from typing import Any

from storefront.core import messages


class IntakeError(Exception):
    """Base exception for all intake errors.

    Attributes:
        message: Human-readable, client-safe error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional context, logged but never returned
    """

    message: str = messages.INTERNAL_ERROR
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(IntakeError):
    """Raised when a payload is malformed or breaks a business rule.

    Example:
        raise ValidationError(messages.EMPTY_ORDER, error_code="empty_order")
    """

    message = messages.INVALID_PAYLOAD
    error_code = "validation_error"
    status_code = 400


class AvailabilityError(IntakeError):
    """Raised when the requested slot is outside every open window."""

    message = messages.SLOT_UNAVAILABLE
    error_code = "slot_unavailable"
    status_code = 400


class UnauthorizedError(IntakeError):
    """Raised when a bearer token is missing or invalid."""

    message = messages.UNAUTHORIZED
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(IntakeError):
    """Raised on origin or ownership mismatch.

    Example:
        raise ForbiddenError(messages.ORIGIN_NOT_ALLOWED, error_code="origin_not_allowed")
    """

    message = messages.FORBIDDEN
    error_code = "forbidden"
    status_code = 403


class NotFoundError(IntakeError):
    """Raised for unknown tenants or records.

    The message stays generic so it never reveals whether the resource
    exists under a different tenant.
    """

    message = messages.TENANT_NOT_FOUND
    error_code = "not_found"
    status_code = 404


class RateLimitedError(IntakeError):
    """Raised when a rate-limit window is exhausted.

    Attributes:
        retry_after: Seconds until the window resets
        reset_at: Unix timestamp when the window resets
    """

    message = messages.RATE_LIMITED
    error_code = "rate_limited"
    status_code = 429

    def __init__(
        self,
        retry_after: int,
        reset_at: int,
        limit: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.retry_after = retry_after
        self.reset_at = reset_at
        self.limit = limit
        super().__init__(**kwargs)


class StorageError(IntakeError):
    """Raised when a backend write or provider call fails unexpectedly.

    The underlying exception goes into ``details`` for logging only.
    """

    message = messages.STORAGE_FAILURE
    error_code = "storage_error"
    status_code = 500
