"""Public opening-hours lookup used by booking widgets."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from storefront.core import messages
from storefront.core.constants import DATE_PATTERN, UUID_PATTERN
from storefront.core.errors import ForbiddenError, NotFoundError, ValidationError
from storefront.core.utils.time import format_minutes, parse_request_date
from storefront.modules.availability.engine import AvailabilityEngine
from storefront.modules.availability.schemas import AvailabilityResponse, WindowOut
from storefront.modules.intake.dependencies import (
    Guard,
    Resolver,
    get_availability_engine,
    request_host,
)


router = APIRouter(prefix="/public", tags=["public availability"])


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Open windows for a date",
)
async def get_availability(
    request: Request,
    resolver: Resolver,
    guard: Guard,
    engine: Annotated[AvailabilityEngine, Depends(get_availability_engine)],
    date: Annotated[str, Query(pattern=DATE_PATTERN)],
    website_id: Annotated[str | None, Query(pattern=UUID_PATTERN)] = None,
) -> JSONResponse:
    """Return the open windows of ``date`` for the website.

    An untrusted Origin is rejected; a trusted one gets CORS headers.
    """
    day = parse_request_date(date)
    if day is None:
        raise ValidationError(messages.INVALID_DATE_TIME, error_code="invalid_date_time")

    tenant = await resolver.resolve(website_id or request_host(request))
    if tenant is None:
        raise NotFoundError(messages.TENANT_NOT_FOUND, error_code="tenant_not_found")
    request.state.tenant_id = tenant.id

    origin = request.headers.get("Origin")
    headers = guard.cors_headers(origin, tenant)
    if origin is not None and headers is None:
        raise ForbiddenError(messages.ORIGIN_NOT_ALLOWED, error_code="origin_not_allowed")
    request.state.cors_headers = headers

    windows = await engine.get_open_windows(tenant.id, day)
    body = AvailabilityResponse(
        date=day.isoformat(),
        windows=[
            WindowOut(start=format_minutes(window.start), end=format_minutes(window.end))
            for window in windows
        ],
    )
    return JSONResponse(body.model_dump(), headers=headers or {})
