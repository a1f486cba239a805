"""Notification dispatch boundary.

The intake pipeline only decides whether to notify and with which
event descriptor. Delivery happens elsewhere and never affects the
outcome of the request that produced the event.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

import structlog

from storefront.core.jobs import enqueue


logger = structlog.get_logger()


class EventKind(StrEnum):
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    ORDER_CREATED = "order_created"


@dataclass(frozen=True)
class NotificationEvent:
    """Event descriptor handed to the dispatcher.

    ``payload`` holds only JSON-safe values (ids as strings, totals as
    numbers) so it can be queued as is.
    """

    kind: EventKind
    payload: dict[str, Any] = field(default_factory=dict)


class NotificationDispatcher(Protocol):
    async def notify(self, event_kind: str, payload: dict[str, Any]) -> None: ...


class ArqNotificationDispatcher:
    """Queue events for the ARQ worker's ``deliver_notification`` job."""

    job_name = "deliver_notification"

    async def notify(self, event_kind: str, payload: dict[str, Any]) -> None:
        job = await enqueue(self.job_name, event_kind, payload)
        logger.info(
            "notification_enqueued",
            event_kind=event_kind,
            job_id=getattr(job, "job_id", None),
        )


class LoggingNotificationDispatcher:
    """Development dispatcher that only logs events."""

    async def notify(self, event_kind: str, payload: dict[str, Any]) -> None:
        logger.info("notification_logged", event_kind=event_kind, payload=payload)


async def dispatch_safely(
    dispatcher: NotificationDispatcher, event: NotificationEvent
) -> None:
    """Deliver an event after the response, logging any failure.

    Runs as a background task once storage has committed, so an
    exception here must not propagate.
    """
    try:
        await dispatcher.notify(str(event.kind), event.payload)
    except Exception:
        logger.exception(
            "notification_dispatch_failed",
            event_kind=event.kind,
            website_id=event.payload.get("website_id"),
        )
