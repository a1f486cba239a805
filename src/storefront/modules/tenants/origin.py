"""Origin trust for tenant websites.

A browser origin is trusted when its host is one of the hosts the
tenant's website is served from. CORS headers are only ever issued for
trusted origins; untrusted origins get no headers at all so the browser
hides the response from the calling page.
"""

from storefront.core.constants import DEV_HOSTS
from storefront.modules.tenants.resolver import normalize_host, strip_www
from storefront.modules.tenants.schemas import Tenant


ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"


def origin_host(origin: str | None) -> str | None:
    """Extract the comparable host of an Origin header.

    Returns:
        Lowercased host without scheme, port or ``www.``, or None for an
        absent or opaque ("null") origin
    """
    if origin is None:
        return None
    host = strip_www(normalize_host(origin))
    if not host or host == "null":
        return None
    return host


class OriginGuard:
    """Decide whether an Origin header is trusted for a tenant.

    Args:
        platform_domain: Domain under which tenant subdomains are served
        allow_dev_origins: Trust localhost origins (never in production)
    """

    def __init__(self, platform_domain: str, allow_dev_origins: bool = False) -> None:
        self.platform_domain = platform_domain
        self.allow_dev_origins = allow_dev_origins

    def tenant_hosts(self, tenant: Tenant) -> set[str]:
        """All hosts the tenant's website is served from, without ``www.``."""
        hosts = {strip_www(domain) for domain in tenant.alternate_domains}
        if tenant.domain:
            hosts.add(strip_www(tenant.domain))
        if tenant.subdomain:
            hosts.add(f"{tenant.subdomain}.{self.platform_domain}")
        return hosts

    def is_allowed(self, origin: str | None, tenant: Tenant) -> bool:
        """Check an Origin header against the tenant's hosts.

        An absent origin is not denied here; each endpoint decides
        whether it accepts requests without one.
        """
        if origin is None:
            return True
        host = origin_host(origin)
        if host is None:
            return False
        if self.allow_dev_origins and host in DEV_HOSTS:
            return True
        return host in self.tenant_hosts(tenant)

    def cors_headers(self, origin: str | None, tenant: Tenant) -> dict[str, str] | None:
        """CORS response headers for a trusted origin, None otherwise."""
        if origin is None or not self.is_allowed(origin, tenant):
            return None
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Vary": "Origin",
        }
