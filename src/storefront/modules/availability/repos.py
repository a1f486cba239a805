"""Opening-hours repository."""

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.availability.models import BusinessHour, BusinessHourSlot, SpecialDay


class AvailabilityRepository:
    """Read-only queries over a website's opening hours."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_special_day(self, website_id: UUID, day: date) -> SpecialDay | None:
        """Get the override for an exact date, with its slots."""
        stmt = select(SpecialDay).where(
            SpecialDay.website_id == website_id,
            SpecialDay.day == day,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_weekly_slots(self, website_id: UUID, weekday: int) -> list[BusinessHourSlot]:
        """List active weekly slots for a weekday, in display order."""
        stmt = (
            select(BusinessHourSlot)
            .where(
                BusinessHourSlot.website_id == website_id,
                BusinessHourSlot.day_of_week == weekday,
                BusinessHourSlot.is_active.is_(True),
            )
            .order_by(BusinessHourSlot.sort_order, BusinessHourSlot.open_time)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_business_hour(self, website_id: UUID, weekday: int) -> BusinessHour | None:
        """Get the legacy single range for a weekday."""
        stmt = select(BusinessHour).where(
            BusinessHour.website_id == website_id,
            BusinessHour.day_of_week == weekday,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
