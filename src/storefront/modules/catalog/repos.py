"""Catalog repository.

All lookups are scoped to one website and only return active rows, so
an item of another website is indistinguishable from a missing one.
"""

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.catalog.models import MenuItem, Professional, ServiceItem


class CatalogRepository:
    """Read-only catalog queries."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_menu_items(self, website_id: UUID, item_ids: Collection[UUID]) -> list[MenuItem]:
        """Get the active menu items among ``item_ids``."""
        if not item_ids:
            return []
        stmt = select(MenuItem).where(
            MenuItem.website_id == website_id,
            MenuItem.id.in_(list(item_ids)),
            MenuItem.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_services(
        self, website_id: UUID, service_ids: Collection[UUID]
    ) -> list[ServiceItem]:
        """Get the active services among ``service_ids``."""
        if not service_ids:
            return []
        stmt = select(ServiceItem).where(
            ServiceItem.website_id == website_id,
            ServiceItem.id.in_(list(service_ids)),
            ServiceItem.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_professional(self, website_id: UUID, professional_id: UUID) -> Professional | None:
        """Get an active professional of the website."""
        stmt = select(Professional).where(
            Professional.website_id == website_id,
            Professional.id == professional_id,
            Professional.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
