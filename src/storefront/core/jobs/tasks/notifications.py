"""Notification delivery task.

Email and push rendering live in external services. The worker records
each dispatched event in the tenant's activity log, which is what those
services and the dashboard feed read from.
"""

from typing import Any
from uuid import UUID

import structlog

from storefront.modules.activity.repos import ActivityRepository


log = structlog.get_logger()


async def deliver_notification(
    ctx: dict[str, Any],
    event_kind: str,
    payload: dict[str, Any],
) -> dict[str, Any]:
    """Record a notification event for its tenant.

    Args:
        ctx: Worker context containing database session factory
        event_kind: Event name (booking_created, order_created, ...)
        payload: Event descriptor; must carry ``website_id``

    Returns:
        Dict with the event kind and the activity entry ID
    """
    session_factory = ctx["db_session_factory"]
    website_id = UUID(str(payload["website_id"]))

    async with session_factory() as session:
        entry = await ActivityRepository(session).record(
            website_id=website_id,
            action=event_kind,
            details=payload,
        )

    log.info(
        "notification_delivered",
        event_kind=event_kind,
        website_id=str(website_id),
        activity_id=str(entry.id),
    )

    return {"event_kind": event_kind, "activity_id": str(entry.id)}
