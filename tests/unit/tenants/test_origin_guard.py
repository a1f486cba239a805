"""Tests for tenant origin trust and CORS headers."""

import pytest

from storefront.modules.tenants.origin import OriginGuard, origin_host
from tests.factories.tenant import TenantFactory


@pytest.fixture
def tenant():
    return TenantFactory.build(
        domain="mytenant.example.com",
        subdomain="mytenant",
        alternate_domains=["www.mytenant.es"],
    )


@pytest.fixture
def guard():
    return OriginGuard("storefront.app", allow_dev_origins=False)


class TestOriginHost:
    def test_extracts_comparable_host(self):
        assert origin_host("HTTPS://WWW.MyTenant.example.com:443") == "mytenant.example.com"

    def test_absent_and_opaque(self):
        assert origin_host(None) is None
        assert origin_host("null") is None


class TestOriginGuard:
    """Tests for OriginGuard.is_allowed."""

    @pytest.mark.parametrize(
        "origin",
        [
            "https://mytenant.example.com",
            "HTTPS://MyTenant.example.com",
            "mytenant.example.com",
            "http://www.mytenant.example.com",
            "https://mytenant.es",
            "https://www.mytenant.es",
            "https://mytenant.storefront.app",
        ],
    )
    def test_tenant_hosts_allowed(self, guard, tenant, origin):
        assert guard.is_allowed(origin, tenant) is True

    @pytest.mark.parametrize(
        "origin",
        [
            "https://evil.example.com",
            "https://mytenant.example.com.evil.net",
            "https://other.storefront.app",
            "https://storefront.app",
            "null",
        ],
    )
    def test_foreign_hosts_rejected(self, guard, tenant, origin):
        assert guard.is_allowed(origin, tenant) is False

    def test_absent_origin_left_to_endpoint(self, guard, tenant):
        """Test a missing Origin is not denied by the guard itself."""
        assert guard.is_allowed(None, tenant) is True

    def test_dev_origins_only_when_enabled(self, tenant):
        assert OriginGuard("storefront.app").is_allowed("http://localhost:3000", tenant) is False
        dev_guard = OriginGuard("storefront.app", allow_dev_origins=True)
        assert dev_guard.is_allowed("http://localhost:3000", tenant) is True
        assert dev_guard.is_allowed("http://127.0.0.1:5173", tenant) is True

    def test_tenant_without_domain(self, guard):
        tenant = TenantFactory.build(domain=None, subdomain="solo", alternate_domains=[])
        assert guard.tenant_hosts(tenant) == {"solo.storefront.app"}


class TestCorsHeaders:
    def test_trusted_origin_echoed(self, guard, tenant):
        headers = guard.cors_headers("https://mytenant.example.com", tenant)

        assert headers == {
            "Access-Control-Allow-Origin": "https://mytenant.example.com",
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type, Authorization",
            "Vary": "Origin",
        }

    def test_untrusted_origin_gets_nothing(self, guard, tenant):
        """Test no CORS header, not even a wildcard, for a foreign origin."""
        assert guard.cors_headers("https://evil.example.com", tenant) is None

    def test_absent_origin_gets_nothing(self, guard, tenant):
        assert guard.cors_headers(None, tenant) is None
