"""Tests for tenant resolution and host parsing."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from storefront.modules.tenants.resolver import (
    HostLookup,
    MemoryTenantCache,
    RedisTenantCache,
    TenantResolver,
    normalize_host,
    parse_host,
    parse_website_id,
)
from tests.factories.tenant import TenantFactory
from tests.fakes import FakeTenantStore


PLATFORM = "storefront.app"


class TestNormalizeHost:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("MyTenant.Example.com", "mytenant.example.com"),
            ("HTTPS://MyTenant.example.com", "mytenant.example.com"),
            ("https://shop.example.com:8443/menu?x=1", "shop.example.com"),
            ("shop.example.com.", "shop.example.com"),
            ("  shop.example.com  ", "shop.example.com"),
            ("http://[::1]:8000", "::1"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_host(raw) == expected


class TestParseHost:
    """Tests for deciding between subdomain and custom domain lookups."""

    def test_platform_subdomain(self):
        assert parse_host("mybistro.storefront.app", PLATFORM) == HostLookup(
            "subdomain", "mybistro"
        )

    def test_custom_domain_strips_www(self):
        assert parse_host("https://www.MyBistro.com", PLATFORM) == HostLookup(
            "domain", "mybistro.com"
        )

    def test_www_platform_subdomain(self):
        assert parse_host("www.mybistro.storefront.app", PLATFORM) == HostLookup(
            "subdomain", "mybistro"
        )

    def test_bare_platform_domain_unresolvable(self):
        assert parse_host("storefront.app", PLATFORM) is None
        assert parse_host("www.storefront.app", PLATFORM) is None

    def test_reserved_subdomain_unresolvable(self):
        assert parse_host("admin.storefront.app", PLATFORM, {"admin"}) is None

    def test_nested_subdomain_unresolvable(self):
        assert parse_host("a.b.storefront.app", PLATFORM) is None

    def test_empty_host(self):
        assert parse_host("   ", PLATFORM) is None

    def test_cache_keys(self):
        assert HostLookup("subdomain", "x").cache_key == "sub:x"
        assert HostLookup("domain", "x.com").cache_key == "domain:x.com"


class TestParseWebsiteId:
    def test_uuid_string(self):
        value = uuid4()
        assert parse_website_id(str(value)) == value

    def test_host_is_not_an_id(self):
        assert parse_website_id("mytenant.example.com") is None


class TestTenantResolver:
    """Tests for TenantResolver."""

    @pytest.fixture
    def tenant(self):
        return TenantFactory.build(
            domain="mytenant.example.com",
            subdomain="mytenant",
            alternate_domains=["mytenant.es"],
        )

    @pytest.fixture
    def store(self, tenant):
        return FakeTenantStore([tenant])

    @pytest.fixture
    def resolver(self, store):
        return TenantResolver(store, MemoryTenantCache(ttl_seconds=60), PLATFORM, ["admin"])

    @pytest.mark.asyncio
    async def test_resolves_custom_domain_case_insensitively(self, resolver, tenant):
        assert await resolver.resolve("WWW.MyTenant.Example.com") == tenant

    @pytest.mark.asyncio
    async def test_resolves_alternate_domain(self, resolver, tenant):
        assert await resolver.resolve("mytenant.es") == tenant

    @pytest.mark.asyncio
    async def test_resolves_platform_subdomain(self, resolver, tenant):
        assert await resolver.resolve("mytenant.storefront.app") == tenant

    @pytest.mark.asyncio
    async def test_resolves_website_id(self, resolver, tenant):
        assert await resolver.resolve(str(tenant.id)) == tenant
        assert await resolver.resolve(tenant.id) == tenant

    @pytest.mark.asyncio
    async def test_unknown_host(self, resolver):
        assert await resolver.resolve("unknown.example.com") is None

    @pytest.mark.asyncio
    async def test_none_and_reserved(self, resolver, store):
        """Test unresolvable input never reaches the store."""
        assert await resolver.resolve(None) is None
        assert await resolver.resolve("admin.storefront.app") is None
        assert store.calls == 0

    @pytest.mark.asyncio
    async def test_inactive_tenant_not_resolved(self, store, resolver):
        store.tenants.append(TenantFactory.build(domain="closed.example.com", is_active=False))
        assert await resolver.resolve("closed.example.com") is None

    @pytest.mark.asyncio
    async def test_hit_served_from_cache(self, resolver, store):
        """Test a second lookup of the same host skips the store."""
        await resolver.resolve("mytenant.example.com")
        await resolver.resolve("mytenant.example.com")
        assert store.calls == 1

    @pytest.mark.asyncio
    async def test_negative_result_not_cached(self, resolver, store):
        """Test a newly provisioned tenant is found right after a miss."""
        assert await resolver.resolve("new.example.com") is None

        fresh = TenantFactory.build(domain="new.example.com")
        store.tenants.append(fresh)

        assert await resolver.resolve("new.example.com") == fresh


class TestMemoryTenantCache:
    @pytest.mark.asyncio
    async def test_entry_expires(self):
        now = [1000.0]
        cache = MemoryTenantCache(ttl_seconds=60, clock=lambda: now[0])
        tenant = TenantFactory.build()

        await cache.set("domain:x.com", tenant)
        assert await cache.get("domain:x.com") == tenant

        now[0] += 60
        assert await cache.get("domain:x.com") is None

    @pytest.mark.asyncio
    async def test_missing_key(self):
        assert await MemoryTenantCache().get("domain:nope") is None


class TestRedisTenantCache:
    """Tests for the Redis-backed tenant cache."""

    @pytest.mark.asyncio
    async def test_round_trips_snapshot_with_ttl(self):
        tenant = TenantFactory.build()
        cache = RedisTenantCache(ttl_seconds=30)

        with (
            patch.object(cache._cache, "set_json", new=AsyncMock()) as set_json,
            patch.object(
                cache._cache,
                "get_json",
                new=AsyncMock(return_value=tenant.model_dump(mode="json")),
            ),
        ):
            await cache.set(f"id:{tenant.id}", tenant)
            cached = await cache.get(f"id:{tenant.id}")

        set_json.assert_awaited_once_with(f"id:{tenant.id}", tenant.model_dump(mode="json"), 30)
        assert cached == tenant

    @pytest.mark.asyncio
    async def test_miss(self):
        cache = RedisTenantCache()
        with patch.object(cache._cache, "get_json", new=AsyncMock(return_value=None)):
            assert await cache.get("domain:x.com") is None
