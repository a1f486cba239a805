"""Activity log repository."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.activity.models import ActivityLog


class ActivityRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(self, website_id: UUID, action: str, details: dict[str, Any]) -> ActivityLog:
        """Append an entry and commit."""
        entry = ActivityLog(website_id=website_id, action=action, details=details)
        self.session.add(entry)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry
