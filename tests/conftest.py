"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.core.rate_limit import FixedWindowRateLimiter, MemoryRateLimitStore, build_presets
from storefront.main import create_app
from storefront.modules.availability.engine import AvailabilityEngine
from storefront.modules.catalog.models import MenuItem, Professional, ServiceItem
from storefront.modules.intake.dependencies import (
    get_availability_engine,
    get_dispatcher,
    get_orchestrator,
    get_tenant_resolver,
)
from storefront.modules.intake.orchestrator import IntakeContext, IntakeOrchestrator, IntakeRules
from storefront.modules.tenants.origin import OriginGuard
from storefront.modules.tenants.resolver import MemoryTenantCache, TenantResolver
from storefront.modules.tenants.schemas import Tenant, TenantConfig
from tests.factories.tenant import TenantFactory
from tests.fakes import (
    FakeAvailabilityStore,
    FakeBookings,
    FakeCatalog,
    FakeOrders,
    FakePayments,
    FakeTenantStore,
    FrozenClock,
    RecordingDispatcher,
    utc,
)


PLATFORM_DOMAIN = "storefront.app"
TENANT_ORIGIN = "https://mytenant.example.com"

# Standard preset is kept small so tests can exhaust it quickly
STANDARD_LIMIT = 5
PAYMENTS_LIMIT = 3


@pytest.fixture
def clock() -> FrozenClock:
    """Monday 2024-06-03 08:00 UTC, one week before the scenario date."""
    return FrozenClock(utc(2024, 6, 3, 8, 0))


@pytest.fixture
def tenant() -> Tenant:
    """Active restaurant served from mytenant.example.com."""
    return TenantFactory.build(
        domain="mytenant.example.com",
        subdomain="mytenant",
        alternate_domains=["mytenant.es"],
        config=TenantConfig(business_name="T1", timezone="UTC"),
    )


@pytest.fixture
def other_tenant() -> Tenant:
    return TenantFactory.build(domain="othershop.example.org", subdomain="othershop")


@pytest.fixture
def tenant_store(tenant: Tenant, other_tenant: Tenant) -> FakeTenantStore:
    return FakeTenantStore([tenant, other_tenant])


@pytest.fixture
def availability_store(tenant: Tenant) -> FakeAvailabilityStore:
    """Tenant open Mon-Fri 09:00-13:00 and 16:00-20:00."""
    store = FakeAvailabilityStore()
    store.add_weekly(tenant.id, range(0, 5), ("09:00", "13:00"), ("16:00", "20:00"))
    return store


def _menu_item(tenant: Tenant, name: str, price: str, is_active: bool = True) -> MenuItem:
    return MenuItem(
        id=uuid4(), website_id=tenant.id, name=name, price=Decimal(price), is_active=is_active
    )


@pytest.fixture
def catalog(tenant: Tenant, other_tenant: Tenant) -> FakeCatalog:
    catalog = FakeCatalog()
    catalog.menu_items = [
        _menu_item(tenant, "Pizza", "9.50"),
        _menu_item(tenant, "Salad", "6.25"),
        _menu_item(tenant, "Retired", "4.00", is_active=False),
        _menu_item(other_tenant, "Foreign", "3.00"),
    ]
    catalog.services = [
        ServiceItem(
            id=uuid4(),
            website_id=tenant.id,
            name="Haircut",
            price=Decimal("18.00"),
            duration_minutes=30,
            is_active=True,
        ),
        ServiceItem(
            id=uuid4(),
            website_id=tenant.id,
            name="Beard trim",
            price=Decimal("8.00"),
            duration_minutes=15,
            is_active=True,
        ),
    ]
    catalog.professionals = [
        Professional(id=uuid4(), website_id=tenant.id, name="Ana", is_active=True),
    ]
    return catalog


@pytest.fixture
def bookings() -> FakeBookings:
    return FakeBookings()


@pytest.fixture
def orders() -> FakeOrders:
    return FakeOrders()


@pytest.fixture
def payments() -> FakePayments:
    return FakePayments()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def resolver(tenant_store: FakeTenantStore) -> TenantResolver:
    return TenantResolver(
        tenant_store, MemoryTenantCache(ttl_seconds=60), PLATFORM_DOMAIN, ["admin"]
    )


@pytest.fixture
def origin_guard() -> OriginGuard:
    return OriginGuard(PLATFORM_DOMAIN, allow_dev_origins=False)


@pytest.fixture
def rate_limiter(clock: FrozenClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        MemoryRateLimitStore(clock=clock.timestamp),
        build_presets(STANDARD_LIMIT, 60, PAYMENTS_LIMIT, 60),
        clock=clock.timestamp,
    )


@pytest.fixture
def availability(availability_store: FakeAvailabilityStore) -> AvailabilityEngine:
    return AvailabilityEngine(availability_store)


@pytest.fixture
def orchestrator(
    resolver: TenantResolver,
    origin_guard: OriginGuard,
    rate_limiter: FixedWindowRateLimiter,
    availability: AvailabilityEngine,
    catalog: FakeCatalog,
    bookings: FakeBookings,
    orders: FakeOrders,
    payments: FakePayments,
    clock: FrozenClock,
) -> IntakeOrchestrator:
    return IntakeOrchestrator(
        resolver=resolver,
        origin_guard=origin_guard,
        rate_limiter=rate_limiter,
        availability=availability,
        catalog=catalog,
        bookings=bookings,
        orders=orders,
        payments=payments,
        rules=IntakeRules(cancellation_lead_minutes=120, max_order_items=50),
        clock=clock,
    )


@pytest.fixture
def ctx() -> IntakeContext:
    """Browser request from the tenant's own website."""
    return IntakeContext(client_ip="203.0.113.7", origin=TENANT_ORIGIN)


@pytest.fixture
async def app(
    orchestrator: IntakeOrchestrator,
    resolver: TenantResolver,
    availability: AvailabilityEngine,
    dispatcher: RecordingDispatcher,
) -> AsyncGenerator[FastAPI, None]:
    """Create test application instance wired to the in-memory fakes."""
    application = create_app()

    application.dependency_overrides[get_orchestrator] = lambda: orchestrator
    application.dependency_overrides[get_tenant_resolver] = lambda: resolver
    application.dependency_overrides[get_availability_engine] = lambda: availability
    application.dependency_overrides[get_dispatcher] = lambda: dispatcher

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://mytenant.example.com",
    ) as client:
        yield client
