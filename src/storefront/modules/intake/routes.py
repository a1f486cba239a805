"""Public intake endpoints.

Bodies are read raw and validated by the pipeline itself, so that
unknown keys and type mismatches are rejected the same way for every
endpoint.
"""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, BackgroundTasks, Request, Response, status
from fastapi.responses import JSONResponse

from storefront.modules.intake.dependencies import (
    Context,
    Dispatcher,
    Guard,
    Orchestrator,
    Resolver,
    request_host,
)
from storefront.modules.intake.notifications import dispatch_safely
from storefront.modules.intake.orchestrator import IntakeContext, IntakeOutcome
from storefront.modules.tenants.origin import origin_host


router = APIRouter(prefix="/public", tags=["public intake"])

Flow = Callable[[bytes, IntakeContext], Awaitable[IntakeOutcome]]


async def _run(
    flow: Flow,
    request: Request,
    ctx: IntakeContext,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    body = await request.body()
    try:
        outcome = await flow(body, ctx)
    finally:
        # Read by the exception handlers and the request logger
        request.state.cors_headers = ctx.cors_headers
        request.state.tenant_id = ctx.tenant_id

    if outcome.event is not None:
        background_tasks.add_task(dispatch_safely, dispatcher, outcome.event)

    return JSONResponse(outcome.body, headers=ctx.cors_headers or {})


async def preflight(request: Request, resolver: Resolver, guard: Guard) -> Response:
    """Answer a CORS preflight for the tenant the origin belongs to.

    Development origins (localhost) are not tenant hosts, so the tenant
    is then taken from the request host instead.
    """
    origin = request.headers.get("Origin")
    if origin is None or origin_host(origin) is None:
        return Response(status_code=status.HTTP_403_FORBIDDEN)

    tenant = await resolver.resolve(origin)
    if tenant is None:
        tenant = await resolver.resolve(request_host(request))

    headers = guard.cors_headers(origin, tenant) if tenant else None
    if headers is None:
        return Response(status_code=status.HTTP_403_FORBIDDEN)
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


@router.post("/reservations", summary="Create a table reservation")
async def create_reservation(
    request: Request,
    orchestrator: Orchestrator,
    ctx: Context,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    return await _run(orchestrator.create_reservation, request, ctx, dispatcher, background_tasks)


@router.post("/appointments", summary="Book a service appointment")
async def create_appointment(
    request: Request,
    orchestrator: Orchestrator,
    ctx: Context,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    return await _run(orchestrator.create_appointment, request, ctx, dispatcher, background_tasks)


@router.post("/orders", summary="Place a pickup order")
async def create_order(
    request: Request,
    orchestrator: Orchestrator,
    ctx: Context,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    return await _run(orchestrator.create_order, request, ctx, dispatcher, background_tasks)


@router.post("/bookings/cancel", summary="Cancel an owned booking")
async def cancel_booking(
    request: Request,
    orchestrator: Orchestrator,
    ctx: Context,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
) -> JSONResponse:
    return await _run(orchestrator.cancel_booking, request, ctx, dispatcher, background_tasks)


for _path in ("/reservations", "/appointments", "/orders", "/bookings/cancel"):
    router.add_api_route(_path, preflight, methods=["OPTIONS"], include_in_schema=False)
