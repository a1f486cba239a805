"""Tenant resolution from request hosts or trusted website IDs.

Resolved tenants are cached for a short TTL. Entries are never
invalidated explicitly, so a deactivated website may keep serving until
its entry expires.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, Protocol
from uuid import UUID

import structlog

from storefront.core.cache.redis import RedisCache
from storefront.modules.tenants.schemas import Tenant


logger = structlog.get_logger()


class TenantStore(Protocol):
    """Source of active tenants (normally :class:`TenantRepository`)."""

    async def find_active_by_id(self, website_id: UUID) -> Tenant | None: ...

    async def find_active_by_domain(self, domain: str) -> Tenant | None: ...

    async def find_active_by_subdomain(self, subdomain: str) -> Tenant | None: ...


class TenantCache(Protocol):
    """TTL cache of tenant snapshots keyed by lookup string."""

    async def get(self, key: str) -> Tenant | None: ...

    async def set(self, key: str, tenant: Tenant) -> None: ...


class MemoryTenantCache:
    """Process-local tenant cache with monotonic-clock expiry."""

    def __init__(
        self,
        ttl_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Tenant]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Tenant | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, tenant = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return tenant

    async def set(self, key: str, tenant: Tenant) -> None:
        async with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, tenant)


class RedisTenantCache:
    """Tenant cache shared between workers through Redis."""

    def __init__(self, ttl_seconds: int = 60, prefix: str = "tenant:") -> None:
        self.ttl_seconds = ttl_seconds
        self._cache = RedisCache(prefix=prefix)

    async def get(self, key: str) -> Tenant | None:
        data = await self._cache.get_json(key)
        return Tenant.model_validate(data) if data else None

    async def set(self, key: str, tenant: Tenant) -> None:
        await self._cache.set_json(key, tenant.model_dump(mode="json"), self.ttl_seconds)


@dataclass(frozen=True)
class HostLookup:
    """How a parsed host should be looked up."""

    kind: Literal["domain", "subdomain"]
    value: str

    @property
    def cache_key(self) -> str:
        prefix = "sub" if self.kind == "subdomain" else "domain"
        return f"{prefix}:{self.value}"


def normalize_host(raw: str) -> str:
    """Lowercase a host or URL and strip scheme, path, port and trailing dot.

    Examples:
        >>> normalize_host("HTTPS://Shop.Example.com:8443/menu")
        'shop.example.com'
    """
    host = raw.strip().lower()
    if "://" in host:
        host = host.split("://", 1)[1]
    host = host.split("/", 1)[0].split("?", 1)[0]
    if "@" in host:
        host = host.rsplit("@", 1)[1]
    if host.startswith("["):
        # IPv6 literal, port follows the closing bracket
        host = host[1:].split("]", 1)[0]
    elif host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


def strip_www(host: str) -> str:
    """Drop a leading ``www.`` label."""
    return host[4:] if host.startswith("www.") else host


def parse_host(
    raw: str,
    platform_domain: str,
    reserved_subdomains: frozenset[str] | set[str] = frozenset(),
) -> HostLookup | None:
    """Work out whether a host names a platform subdomain or a custom domain.

    Returns:
        HostLookup, or None when the host can never name a tenant (empty,
        the bare platform domain, or a reserved subdomain)

    Examples:
        >>> parse_host("mybistro.storefront.app", "storefront.app")
        HostLookup(kind='subdomain', value='mybistro')
        >>> parse_host("https://www.MyBistro.com", "storefront.app")
        HostLookup(kind='domain', value='mybistro.com')
    """
    host = strip_www(normalize_host(raw))
    if not host:
        return None

    if host == platform_domain:
        return None

    suffix = f".{platform_domain}"
    if host.endswith(suffix):
        label = host[: -len(suffix)]
        if not label or "." in label or label in reserved_subdomains:
            return None
        return HostLookup(kind="subdomain", value=label)

    return HostLookup(kind="domain", value=host)


def parse_website_id(value: str | UUID) -> UUID | None:
    """Return ``value`` as a UUID if it is one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except ValueError:
        return None


class TenantResolver:
    """Resolve a host header or trusted website ID to an active tenant.

    Usage:
        resolver = TenantResolver(TenantRepository(session), cache, "storefront.app")
        tenant = await resolver.resolve(request.headers["host"])
        if tenant is None:
            raise NotFoundError()
    """

    def __init__(
        self,
        store: TenantStore,
        cache: TenantCache,
        platform_domain: str,
        reserved_subdomains: list[str] | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.platform_domain = platform_domain
        self.reserved_subdomains = frozenset(
            label.lower() for label in (reserved_subdomains or [])
        )

    async def resolve(self, host_or_id: str | UUID | None) -> Tenant | None:
        """Resolve to an active tenant, or None when there is none.

        Unknown results are not cached, so a newly provisioned website is
        reachable immediately.
        """
        if host_or_id is None:
            return None

        website_id = parse_website_id(host_or_id)
        if website_id is not None:
            return await self._cached(
                f"id:{website_id}", lambda: self.store.find_active_by_id(website_id)
            )

        lookup = parse_host(str(host_or_id), self.platform_domain, self.reserved_subdomains)
        if lookup is None:
            logger.debug("tenant_host_unresolvable", host=str(host_or_id))
            return None

        if lookup.kind == "subdomain":
            return await self._cached(
                lookup.cache_key, lambda: self.store.find_active_by_subdomain(lookup.value)
            )
        return await self._cached(
            lookup.cache_key, lambda: self.store.find_active_by_domain(lookup.value)
        )

    async def _cached(
        self, key: str, load: Callable[[], Awaitable[Tenant | None]]
    ) -> Tenant | None:
        tenant = await self.cache.get(key)
        if tenant is not None:
            return tenant

        tenant = await load()
        if tenant is None:
            logger.info("tenant_not_found", lookup=key)
            return None

        await self.cache.set(key, tenant)
        return tenant
