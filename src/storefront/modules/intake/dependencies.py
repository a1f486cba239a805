"""Dependency wiring for the public intake endpoints.

Long-lived stores (tenant cache, rate limiter, origin guard, payment
provider, notification dispatcher) are built once in ``create_app`` and
kept on ``app.state``; repositories are built per request around the
request's database session.
"""

from typing import Annotated

from fastapi import Depends, Request

from storefront.api.dependencies import DBSession
from storefront.config import settings
from storefront.core.auth import BearerToken
from storefront.core.logging import get_client_ip
from storefront.modules.availability.engine import AvailabilityEngine
from storefront.modules.availability.repos import AvailabilityRepository
from storefront.modules.bookings.repos import BookingRepository
from storefront.modules.catalog.repos import CatalogRepository
from storefront.modules.intake.notifications import NotificationDispatcher
from storefront.modules.intake.orchestrator import IntakeContext, IntakeOrchestrator, IntakeRules
from storefront.modules.orders.repos import OrderRepository
from storefront.modules.tenants.origin import OriginGuard
from storefront.modules.tenants.repos import TenantRepository
from storefront.modules.tenants.resolver import TenantResolver


def request_host(request: Request) -> str | None:
    """Host the request was addressed to, preferring the proxy's header."""
    return request.headers.get("X-Forwarded-Host") or request.headers.get("Host")


def get_tenant_resolver(request: Request, db: DBSession) -> TenantResolver:
    return TenantResolver(
        TenantRepository(db),
        request.app.state.tenant_cache,
        settings.platform_domain,
        settings.reserved_subdomains,
    )


def get_origin_guard(request: Request) -> OriginGuard:
    return request.app.state.origin_guard


def get_availability_engine(db: DBSession) -> AvailabilityEngine:
    return AvailabilityEngine(AvailabilityRepository(db))


def get_orchestrator(
    request: Request,
    db: DBSession,
    resolver: Annotated[TenantResolver, Depends(get_tenant_resolver)],
    availability: Annotated[AvailabilityEngine, Depends(get_availability_engine)],
) -> IntakeOrchestrator:
    """Build the intake pipeline for one request."""
    state = request.app.state
    return IntakeOrchestrator(
        resolver=resolver,
        origin_guard=state.origin_guard,
        rate_limiter=state.rate_limiter,
        availability=availability,
        catalog=CatalogRepository(db),
        bookings=BookingRepository(db),
        orders=OrderRepository(db),
        payments=state.payments,
        rules=IntakeRules.from_settings(settings),
    )


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notifier


def get_intake_context(request: Request, token: BearerToken) -> IntakeContext:
    """Collect the transport details the pipeline needs."""
    return IntakeContext(
        client_ip=get_client_ip(request),
        origin=request.headers.get("Origin"),
        host=request_host(request),
        bearer_token=token,
    )


Orchestrator = Annotated[IntakeOrchestrator, Depends(get_orchestrator)]
Resolver = Annotated[TenantResolver, Depends(get_tenant_resolver)]
Guard = Annotated[OriginGuard, Depends(get_origin_guard)]
Dispatcher = Annotated[NotificationDispatcher, Depends(get_dispatcher)]
Context = Annotated[IntakeContext, Depends(get_intake_context)]
