"""Public intake pipeline.

Every flow walks the same states and aborts at the first failing one
by raising an :class:`~storefront.core.errors.IntakeError`:

    validate shape -> resolve tenant -> check origin -> check rate limit
    -> business rules -> availability -> persist -> respond

Nothing is written before the persist state. The only multi-step write
(an order and its items, plus the optional payment intent) runs as a
:class:`~storefront.modules.intake.saga.Saga`.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Protocol, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import Settings
from storefront.core import messages
from storefront.core.auth import CustomerIdentity, decode_token
from storefront.core.errors import (
    AvailabilityError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from storefront.core.rate_limit import EndpointClass, FixedWindowRateLimiter
from storefront.core.utils.time import (
    format_minutes,
    local_datetime,
    parse_request_date,
    parse_request_time,
    parse_time_to_minutes,
    tenant_timezone,
    utcnow,
)
from storefront.modules.availability.engine import (
    AvailabilityEngine,
    clip_windows,
    is_within_windows,
)
from storefront.modules.bookings.models import Booking, BookingStatus, BookingType, Customer
from storefront.modules.catalog.models import MenuItem, Professional, ServiceItem
from storefront.modules.intake.notifications import EventKind, NotificationEvent
from storefront.modules.intake.saga import Results, Saga, SagaFailedError, SagaStep
from storefront.modules.intake.schemas import (
    AppointmentPayload,
    BookingCreatedResponse,
    CancellationPayload,
    CancellationResponse,
    OrderCreatedResponse,
    OrderPayload,
    ReservationPayload,
)
from storefront.modules.intake.validation import NormalizedItem, normalize_items, parse_payload
from storefront.modules.orders.models import Order, OrderItem, OrderStatus
from storefront.modules.orders.payments import PaymentIntent, PaymentProvider
from storefront.modules.tenants.origin import OriginGuard
from storefront.modules.tenants.resolver import TenantResolver
from storefront.modules.tenants.schemas import Tenant


logger = structlog.get_logger()

T = TypeVar("T")

CENTS = Decimal("0.01")


class CatalogStore(Protocol):
    async def get_menu_items(self, website_id: UUID, item_ids: list[UUID]) -> list[MenuItem]: ...

    async def get_services(self, website_id: UUID, service_ids: list[UUID]) -> list[ServiceItem]: ...

    async def get_professional(
        self, website_id: UUID, professional_id: UUID
    ) -> Professional | None: ...


class BookingStore(Protocol):
    async def insert(self, booking: Booking) -> Booking: ...

    async def get(self, booking_id: UUID, website_id: UUID) -> Booking | None: ...

    async def cancel(self, booking_id: UUID, website_id: UUID) -> bool: ...

    async def get_customer(self, customer_id: UUID, website_id: UUID) -> Customer | None: ...

    async def update_customer_phone(self, customer: Customer, phone: str) -> None: ...


class OrderStore(Protocol):
    async def insert_order(self, order: Order) -> Order: ...

    async def insert_items(self, items: list[OrderItem]) -> list[OrderItem]: ...

    async def delete_order(self, order_id: UUID) -> None: ...

    async def mark_failed(self, order_id: UUID) -> None: ...

    async def set_payment(self, order_id: UUID, intent_id: str, payment_status: str) -> None: ...


@dataclass
class IntakeContext:
    """Per-request transport details.

    ``tenant_id`` and ``cors_headers`` are filled in as the pipeline
    advances so that error responses can carry them.
    """

    client_ip: str
    origin: str | None = None
    host: str | None = None
    bearer_token: str | None = None
    tenant_id: UUID | None = None
    cors_headers: dict[str, str] | None = None


@dataclass(frozen=True)
class IntakeOutcome:
    """Response body plus the event to dispatch after responding."""

    body: dict[str, Any]
    event: NotificationEvent | None = None


@dataclass(frozen=True)
class IntakeRules:
    cancellation_lead_minutes: int = 120
    max_order_items: int = 50
    default_currency: str = "eur"

    @classmethod
    def from_settings(cls, settings: Settings) -> "IntakeRules":
        return cls(
            cancellation_lead_minutes=settings.cancellation_lead_minutes,
            max_order_items=settings.max_order_items,
            default_currency=settings.default_currency,
        )


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS)


def _minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1")))


class IntakeOrchestrator:
    """Runs the reservation, appointment, order and cancellation flows.

    Collaborators are injected so the pipeline runs the same against
    the database repositories and in-memory test doubles.
    """

    def __init__(
        self,
        *,
        resolver: TenantResolver,
        origin_guard: OriginGuard,
        rate_limiter: FixedWindowRateLimiter,
        availability: AvailabilityEngine,
        catalog: CatalogStore,
        bookings: BookingStore,
        orders: OrderStore,
        payments: PaymentProvider | None = None,
        rules: IntakeRules | None = None,
        clock: Callable[[], datetime] = utcnow,
        token_decoder: Callable[[str], CustomerIdentity | None] = decode_token,
    ) -> None:
        self.resolver = resolver
        self.origin_guard = origin_guard
        self.rate_limiter = rate_limiter
        self.availability = availability
        self.catalog = catalog
        self.bookings = bookings
        self.orders = orders
        self.payments = payments
        self.rules = rules or IntakeRules()
        self.clock = clock
        self.token_decoder = token_decoder

    # ------------------------------------------------------------------
    # Shared states
    # ------------------------------------------------------------------

    async def _resolve_tenant(self, host_or_id: str | None, ctx: IntakeContext) -> Tenant:
        tenant = await self.resolver.resolve(host_or_id or ctx.host)
        if tenant is None or not tenant.is_active:
            raise NotFoundError(messages.TENANT_NOT_FOUND, error_code="tenant_not_found")
        ctx.tenant_id = tenant.id
        structlog.contextvars.bind_contextvars(tenant_id=str(tenant.id))
        return tenant

    def _check_origin(self, tenant: Tenant, ctx: IntakeContext, allow_missing: bool) -> None:
        """Reject untrusted origins and record CORS headers for trusted ones.

        A missing origin passes only when ``allow_missing`` is set, which
        is reserved for bearer-authenticated endpoints.
        """
        if ctx.origin is None:
            if allow_missing:
                return
            logger.warning("origin_missing", tenant_id=str(tenant.id))
            raise ForbiddenError(messages.ORIGIN_NOT_ALLOWED, error_code="origin_required")

        headers = self.origin_guard.cors_headers(ctx.origin, tenant)
        if headers is None:
            logger.warning("origin_rejected", origin=ctx.origin, tenant_id=str(tenant.id))
            raise ForbiddenError(messages.ORIGIN_NOT_ALLOWED, error_code="origin_not_allowed")
        ctx.cors_headers = headers

    async def _check_rate_limit(
        self, tenant: Tenant, ctx: IntakeContext, endpoint_class: EndpointClass
    ) -> None:
        key = self.rate_limiter.build_key(ctx.client_ip, tenant.id, endpoint_class)
        result = await self.rate_limiter.check(key, endpoint_class)
        if not result.allowed:
            raise RateLimitedError(
                retry_after=result.retry_after or 1,
                reset_at=result.reset_at,
                limit=result.limit,
            )

    @staticmethod
    def _parse_slot(day_value: str, time_value: str) -> tuple[date, int]:
        day = parse_request_date(day_value)
        minutes = parse_request_time(time_value)
        if day is None or minutes is None:
            raise ValidationError(messages.INVALID_DATE_TIME, error_code="invalid_date_time")
        return day, minutes

    def _ensure_not_past(self, tenant: Tenant, day: date, minutes: int) -> datetime:
        requested_at = local_datetime(day, minutes, tenant_timezone(tenant.config.timezone))
        if requested_at < self.clock():
            raise ValidationError(messages.DATE_TIME_IN_PAST, error_code="date_in_past")
        return requested_at

    async def _ensure_open(
        self,
        tenant: Tenant,
        day: date,
        minutes: int,
        clip: tuple[int, int] | None = None,
    ) -> None:
        windows = await self.availability.get_open_windows(tenant.id, day)
        if clip is not None:
            windows = clip_windows(windows, *clip)
        if not is_within_windows(minutes, windows):
            logger.info(
                "slot_unavailable",
                tenant_id=str(tenant.id),
                date=day.isoformat(),
                time=format_minutes(minutes),
            )
            raise AvailabilityError()

    async def _persist(self, operation: Awaitable[T], record: str) -> T:
        try:
            return await operation
        except SQLAlchemyError as exc:
            logger.error("intake_storage_failed", record=record, error=str(exc))
            raise StorageError(details={"record": record}) from exc

    @staticmethod
    def _booking_event(
        kind: EventKind, tenant: Tenant, booking: Booking, status: str | None = None
    ) -> NotificationEvent:
        return NotificationEvent(
            kind=kind,
            payload={
                "website_id": str(tenant.id),
                "business_name": tenant.config.business_name,
                "booking_id": str(booking.id),
                "booking_type": booking.booking_type,
                "status": status or booking.status,
                "date": booking.booking_date.isoformat(),
                "time": booking.booking_time,
                "customer_name": booking.customer_name,
                "customer_phone": booking.customer_phone,
                "customer_email": booking.customer_email,
                "guests": booking.guests,
                "total_price": float(booking.total_price) if booking.total_price is not None else None,
                "send_email": bool(
                    booking.customer_email and tenant.config.email_booking_confirmation
                ),
            },
        )

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def create_reservation(self, body: bytes, ctx: IntakeContext) -> IntakeOutcome:
        """Accept a table reservation in ``pending`` status."""
        payload = parse_payload(ReservationPayload, body)
        day, minutes = self._parse_slot(payload.date, payload.time)

        tenant = await self._resolve_tenant(payload.website_id, ctx)
        self._check_origin(tenant, ctx, allow_missing=False)
        await self._check_rate_limit(tenant, ctx, EndpointClass.STANDARD)

        self._ensure_not_past(tenant, day, minutes)
        await self._ensure_open(tenant, day, minutes)

        booking = await self._persist(
            self.bookings.insert(
                Booking(
                    website_id=tenant.id,
                    booking_type=BookingType.RESERVATION,
                    status=BookingStatus.PENDING,
                    booking_date=day,
                    booking_time=format_minutes(minutes),
                    customer_name=payload.name,
                    customer_phone=payload.phone,
                    customer_email=payload.email,
                    guests=payload.guests,
                    zone=payload.zone,
                    occasion=payload.occasion,
                    services=[],
                    notes=payload.notes,
                )
            ),
            "booking",
        )
        logger.info("intake_reservation_created", booking_id=str(booking.id), guests=payload.guests)

        response = BookingCreatedResponse(
            booking_id=str(booking.id),
            status=booking.status,
            message=messages.RESERVATION_CREATED,
        )
        return IntakeOutcome(
            body=response.model_dump(),
            event=self._booking_event(EventKind.BOOKING_CREATED, tenant, booking),
        )

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    async def create_appointment(self, body: bytes, ctx: IntakeContext) -> IntakeOutcome:
        """Accept a service appointment in ``confirmed`` status.

        Prices and durations come from the catalog, never from the
        payload. An unknown ``customer_id`` is ignored rather than
        rejected, since it only links the booking to a portal account.
        """
        payload = parse_payload(AppointmentPayload, body)
        day, minutes = self._parse_slot(payload.date, payload.time)

        tenant = await self._resolve_tenant(payload.website_id, ctx)
        self._check_origin(tenant, ctx, allow_missing=False)
        await self._check_rate_limit(tenant, ctx, EndpointClass.STANDARD)

        self._ensure_not_past(tenant, day, minutes)
        items = normalize_items(
            payload.services, self.rules.max_order_items, messages.MISSING_FIELDS
        )
        services = await self.catalog.get_services(tenant.id, [item.id for item in items])
        by_id = {service.id: service for service in services}
        if any(item.id not in by_id for item in items):
            raise ValidationError(messages.SERVICES_UNAVAILABLE, error_code="services_unavailable")

        lines = []
        total = Decimal("0")
        duration = 0
        for item in items:
            service = by_id[item.id]
            total += service.price * item.quantity
            duration += service.duration_minutes * item.quantity
            lines.append(
                {
                    "id": str(service.id),
                    "name": service.name,
                    "quantity": item.quantity,
                    "price": float(service.price),
                    "duration_minutes": service.duration_minutes,
                }
            )

        professional_id = None
        if payload.professional_id:
            professional = await self.catalog.get_professional(
                tenant.id, UUID(payload.professional_id)
            )
            if professional is None:
                raise ValidationError(
                    messages.PROFESSIONAL_UNAVAILABLE, error_code="professional_unavailable"
                )
            professional_id = professional.id

        customer = None
        if payload.customer_id:
            customer = await self.bookings.get_customer(UUID(payload.customer_id), tenant.id)
            if customer is None:
                logger.info("appointment_customer_ignored", customer_id=payload.customer_id)

        await self._ensure_open(tenant, day, minutes)

        booking = await self._persist(
            self.bookings.insert(
                Booking(
                    website_id=tenant.id,
                    booking_type=BookingType.APPOINTMENT,
                    status=BookingStatus.CONFIRMED,
                    booking_date=day,
                    booking_time=format_minutes(minutes),
                    customer_id=customer.id if customer else None,
                    customer_name=payload.name,
                    customer_phone=payload.phone,
                    customer_email=payload.email,
                    services=lines,
                    professional_id=professional_id,
                    total_price=_money(total),
                    duration_minutes=duration,
                    notes=payload.notes,
                )
            ),
            "booking",
        )

        # Only a stored booking refreshes the linked customer's phone
        if customer is not None and customer.phone != payload.phone:
            await self._persist(
                self.bookings.update_customer_phone(customer, payload.phone), "customer"
            )

        logger.info(
            "intake_appointment_created",
            booking_id=str(booking.id),
            services=len(lines),
            duration_minutes=duration,
        )

        response = BookingCreatedResponse(
            booking_id=str(booking.id),
            status=booking.status,
            message=messages.APPOINTMENT_CREATED,
        )
        return IntakeOutcome(
            body=response.model_dump(),
            event=self._booking_event(EventKind.BOOKING_CONFIRMED, tenant, booking),
        )

    # ------------------------------------------------------------------
    # Pickup orders
    # ------------------------------------------------------------------

    def _pickup_window(self, tenant: Tenant) -> tuple[int, int] | None:
        start = parse_time_to_minutes(tenant.config.pickup_start)
        end = parse_time_to_minutes(tenant.config.pickup_end)
        if start is None or end is None or start >= end:
            logger.warning("pickup_window_invalid", tenant_id=str(tenant.id))
            return None
        return start, end

    def _order_saga(
        self,
        tenant: Tenant,
        order: Order,
        lines: list[tuple[NormalizedItem, MenuItem]],
        currency: str,
    ) -> Saga:
        amount = _minor_units(order.total_amount)

        # Steps share the order id, not the ORM instance a failed commit expires
        async def insert_order(_results: Results) -> UUID:
            created = await self.orders.insert_order(order)
            return created.id

        async def delete_order(results: Results) -> None:
            await self.orders.delete_order(results["order"])

        async def insert_items(results: Results) -> list[OrderItem]:
            order_id = results["order"]
            return await self.orders.insert_items(
                [
                    OrderItem(
                        order_id=order_id,
                        menu_item_id=menu_item.id,
                        name=menu_item.name,
                        unit_price=menu_item.price,
                        quantity=item.quantity,
                        subtotal=_money(menu_item.price * item.quantity),
                    )
                    for item, menu_item in lines
                ]
            )

        steps = [
            SagaStep("order", insert_order, compensate=delete_order),
            SagaStep("items", insert_items, pivot=True),
        ]

        if tenant.online_payments and self.payments is not None:
            payments = self.payments

            async def create_intent(results: Results) -> PaymentIntent:
                order_id = results["order"]
                intent = await payments.create_payment_intent(
                    amount,
                    currency,
                    {"order_id": str(order_id), "website_id": str(tenant.id)},
                )
                await self.orders.set_payment(order_id, intent.id, intent.status)
                return intent

            async def mark_failed(results: Results, _cause: Exception) -> None:
                await self.orders.mark_failed(results["order"])

            steps.append(SagaStep("payment", create_intent, recover=mark_failed))

        return Saga("order", steps, context={"website_id": str(tenant.id)})

    async def create_order(self, body: bytes, ctx: IntakeContext) -> IntakeOutcome:
        """Accept a pickup order, with an online payment intent when configured.

        The order row, its items and the payment intent are separate
        writes. A failure storing the items deletes the order; a failure
        creating the intent marks the order ``failed``.
        """
        payload = parse_payload(OrderPayload, body)
        day, minutes = self._parse_slot(payload.pickup_date, payload.pickup_time)

        tenant = await self._resolve_tenant(payload.website_id, ctx)
        self._check_origin(tenant, ctx, allow_missing=False)
        endpoint_class = (
            EndpointClass.PAYMENTS if tenant.online_payments else EndpointClass.STANDARD
        )
        await self._check_rate_limit(tenant, ctx, endpoint_class)

        if tenant.online_payments and self.payments is None:
            logger.error("payment_provider_missing", tenant_id=str(tenant.id))
            raise StorageError(messages.PAYMENT_FAILURE, error_code="payment_unavailable")

        pickup_at = self._ensure_not_past(tenant, day, minutes)
        items = normalize_items(payload.items, self.rules.max_order_items)
        menu_items = await self.catalog.get_menu_items(tenant.id, [item.id for item in items])
        by_id = {menu_item.id: menu_item for menu_item in menu_items}
        if any(item.id not in by_id for item in items):
            raise ValidationError(messages.ITEMS_UNAVAILABLE, error_code="items_unavailable")

        lines = [(item, by_id[item.id]) for item in items]
        subtotals = (menu_item.price * item.quantity for item, menu_item in lines)
        total = _money(sum(subtotals, Decimal("0")))
        if total <= 0:
            raise ValidationError(messages.INVALID_TOTAL, error_code="invalid_total")

        lead = timedelta(minutes=tenant.config.order_lead_minutes)
        if pickup_at < self.clock() + lead:
            raise ValidationError(messages.PICKUP_TOO_SOON, error_code="pickup_too_soon")

        await self._ensure_open(tenant, day, minutes, clip=self._pickup_window(tenant))

        currency = (tenant.config.currency or self.rules.default_currency).lower()
        order = Order(
            website_id=tenant.id,
            status=OrderStatus.PENDING,
            customer_name=payload.customer.name,
            customer_phone=payload.customer.phone,
            customer_email=payload.customer.email,
            pickup_date=day,
            pickup_time=format_minutes(minutes),
            notes=payload.notes,
            total_amount=total,
            currency=currency,
            payment_mode=tenant.config.payment_mode,
        )

        try:
            results = await self._order_saga(tenant, order, lines, currency).execute()
        except SagaFailedError as exc:
            message = messages.PAYMENT_FAILURE if exc.step == "payment" else messages.STORAGE_FAILURE
            raise StorageError(message, details={"step": exc.step}) from exc

        order_id: UUID = results["order"]
        intent: PaymentIntent | None = results.get("payment")
        logger.info(
            "intake_order_created",
            order_id=str(order_id),
            items=len(lines),
            total_amount=str(total),
            payment_mode=tenant.config.payment_mode,
        )

        response = OrderCreatedResponse(
            order_id=str(order_id),
            status=OrderStatus.PENDING,
            total_amount=float(total),
            currency=currency,
            client_secret=intent.client_secret if intent else None,
        )
        event = NotificationEvent(
            kind=EventKind.ORDER_CREATED,
            payload={
                "website_id": str(tenant.id),
                "business_name": tenant.config.business_name,
                "order_id": str(order_id),
                "customer_name": payload.customer.name,
                "customer_phone": payload.customer.phone,
                "customer_email": payload.customer.email,
                "pickup_date": day.isoformat(),
                "pickup_time": format_minutes(minutes),
                "total_amount": float(total),
                "currency": currency,
                "payment_mode": tenant.config.payment_mode,
                "items": [
                    {"id": str(menu_item.id), "name": menu_item.name, "quantity": item.quantity}
                    for item, menu_item in lines
                ],
            },
        )
        return IntakeOutcome(body=response.model_dump(exclude_none=True), event=event)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    async def _check_ownership(
        self, booking: Booking, identity: CustomerIdentity, tenant: Tenant
    ) -> None:
        customer = None
        if booking.customer_id is not None:
            customer = await self.bookings.get_customer(booking.customer_id, tenant.id)
        if customer is None or customer.auth_user_id != identity.user_id:
            logger.warning(
                "cancellation_not_owner",
                booking_id=str(booking.id),
                user_id=str(identity.user_id),
            )
            raise ForbiddenError()

    async def cancel_booking(self, body: bytes, ctx: IntakeContext) -> IntakeOutcome:
        """Cancel a booking on behalf of its owner.

        Cancelling twice succeeds both times with a single transition and
        a single event. Completed bookings and bookings starting within
        the lead time cannot be cancelled.
        """
        if not ctx.bearer_token:
            raise UnauthorizedError()
        payload = parse_payload(CancellationPayload, body)
        identity = self.token_decoder(ctx.bearer_token)
        if identity is None:
            raise UnauthorizedError(error_code="invalid_token")

        tenant = await self._resolve_tenant(str(identity.tenant_id), ctx)
        booking_id = UUID(payload.booking_id)
        booking = await self.bookings.get(booking_id, tenant.id)
        if booking is None:
            raise NotFoundError(messages.BOOKING_NOT_FOUND, error_code="booking_not_found")

        self._check_origin(tenant, ctx, allow_missing=True)
        await self._check_rate_limit(tenant, ctx, EndpointClass.STANDARD)
        await self._check_ownership(booking, identity, tenant)

        done = IntakeOutcome(body=CancellationResponse().model_dump())

        if booking.status == BookingStatus.COMPLETED:
            raise ValidationError(messages.CANCEL_COMPLETED, error_code="booking_completed")
        if booking.status == BookingStatus.CANCELLED:
            logger.info("cancellation_already_applied", booking_id=str(booking.id))
            return done

        starts_at = local_datetime(
            booking.booking_date,
            parse_time_to_minutes(booking.booking_time) or 0,
            tenant_timezone(tenant.config.timezone),
        )
        if starts_at - self.clock() < timedelta(minutes=self.rules.cancellation_lead_minutes):
            raise ValidationError(messages.CANCEL_TOO_LATE, error_code="cancellation_too_late")

        changed = await self._persist(self.bookings.cancel(booking.id, tenant.id), "booking")
        if not changed:
            # Another request moved the booking between the read and the update
            current = await self.bookings.get(booking.id, tenant.id)
            if current is not None and current.status == BookingStatus.COMPLETED:
                raise ValidationError(messages.CANCEL_COMPLETED, error_code="booking_completed")
            logger.info("cancellation_already_applied", booking_id=str(booking.id))
            return done

        logger.info("intake_booking_cancelled", booking_id=str(booking.id))
        return IntakeOutcome(
            body=done.body,
            event=self._booking_event(
                EventKind.BOOKING_CANCELLED, tenant, booking, status=BookingStatus.CANCELLED
            ),
        )
