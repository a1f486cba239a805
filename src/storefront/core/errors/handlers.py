"""Exception handlers producing the public ``{"error": ...}`` body.

Public intake clients only understand a flat error object, so every
failure (domain, request validation or unexpected) is rendered through
:class:`ErrorBody`.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront.core import messages
from storefront.core.errors.exceptions import IntakeError, RateLimitedError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class ErrorBody(BaseModel):
    """Error response schema.

    Attributes:
        error: Client-safe message
        code: Machine-readable error code
        trace_id: Request trace ID for support
        retry_after: Seconds until a rate-limit window resets
    """

    error: str
    code: str
    trace_id: str | None = None
    retry_after: int | None = None


def _get_trace_id(request: Request) -> str | None:
    """Extract trace ID from request state if available."""
    return getattr(request.state, "trace_id", None)


def _response_headers(request: Request) -> dict[str, str]:
    """CORS headers granted earlier in this request, if any."""
    cors_headers = getattr(request.state, "cors_headers", None)
    return dict(cors_headers) if cors_headers else {}


async def intake_exception_handler(request: Request, exc: IntakeError) -> JSONResponse:
    """Handle intake domain exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "intake_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    headers = _response_headers(request)
    body = ErrorBody(
        error=exc.message,
        code=exc.error_code,
        trace_id=_get_trace_id(request),
    )

    if isinstance(exc, RateLimitedError):
        body.retry_after = exc.retry_after
        headers["Retry-After"] = str(exc.retry_after)
        headers["X-RateLimit-Remaining"] = "0"
        headers["X-RateLimit-Reset"] = str(exc.reset_at)
        if exc.limit is not None:
            headers["X-RateLimit-Limit"] = str(exc.limit)

    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI query/path validation errors as a plain 400."""
    fields: list[str] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        fields.append(".".join(str(part) for part in loc))

    logger.warning(
        "request_validation_error",
        path=str(request.url.path),
        fields=fields,
    )

    content: dict[str, Any] = ErrorBody(
        error=messages.INVALID_PAYLOAD,
        code="validation_error",
        trace_id=_get_trace_id(request),
    ).model_dump(exclude_none=True)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=content,
        headers=_response_headers(request),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    The actual error details are logged but not exposed to clients.
    """
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorBody(
            error=messages.INTERNAL_ERROR,
            code="internal_error",
            trace_id=_get_trace_id(request),
        ).model_dump(exclude_none=True),
        headers=_response_headers(request),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(
        IntakeError, cast("ExceptionHandler", intake_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
