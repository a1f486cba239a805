"""Website repository for tenant lookups."""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.modules.tenants.models import Website, WebsiteDomain
from storefront.modules.tenants.schemas import Tenant, TenantConfig


def to_snapshot(website: Website) -> Tenant:
    """Convert a website row into a tenant snapshot."""
    return Tenant(
        id=website.id,
        domain=website.domain.lower() if website.domain else None,
        subdomain=website.subdomain.lower() if website.subdomain else None,
        alternate_domains=[alias.domain.lower() for alias in website.aliases],
        is_active=website.is_active,
        business_type=website.business_type,
        config=TenantConfig.from_raw(website.config),
    )


class TenantRepository:
    """Read-only queries over active websites.

    Every lookup filters on ``is_active`` so inactive websites are
    indistinguishable from unknown ones.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _first(self, *criteria: object) -> Tenant | None:
        stmt = select(Website).where(Website.is_active.is_(True), *criteria)
        result = await self.session.execute(stmt)
        website = result.scalars().first()
        return to_snapshot(website) if website else None

    async def find_active_by_id(self, website_id: UUID) -> Tenant | None:
        """Get an active website by ID."""
        return await self._first(Website.id == website_id)

    async def find_active_by_domain(self, domain: str) -> Tenant | None:
        """Get an active website by primary domain, subdomain label or alias.

        Args:
            domain: Lowercased host without ``www.``

        Returns:
            Tenant snapshot if found, None otherwise
        """
        alias_owner = select(WebsiteDomain.website_id).where(WebsiteDomain.domain == domain)
        return await self._first(
            or_(
                Website.domain == domain,
                Website.subdomain == domain,
                Website.id.in_(alias_owner),
            )
        )

    async def find_active_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Get an active website by its platform subdomain label."""
        return await self._first(Website.subdomain == subdomain)
