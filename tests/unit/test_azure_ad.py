"""Unit tests for Azure AD directory object queries."""

import pytest

from nimure.azure_ad import AD_CATEGORIES, AzureADClient
from nimure.cache import AzureDataCache, CacheScope
from nimure.config_manager import RateLimitSettings
from nimure.models import Resource
from nimure.rate_limiter import RateLimiter


@pytest.fixture
def cache(clock):
    return AzureDataCache(clock=clock)


@pytest.fixture
def client(executor, cache, clock):
    return AzureADClient(executor, cache, RateLimiter(RateLimitSettings(enabled=False), clock=clock))


class TestCheckPermissions:
    """Test the directory permission probe."""

    @pytest.mark.asyncio
    async def test_success(self, client, fake_cli):
        """Reading the tenant ID is enough."""
        fake_cli.on("account", "show", "--query", "tenantId", stdout="tenant-456\n")

        result = await client.check_permissions()

        assert result.ok
        assert fake_cli.calls[0] == ["account", "show", "--query", "tenantId", "--output", "tsv"]

    @pytest.mark.asyncio
    async def test_failure(self, client, fake_cli):
        """A failed probe is reported as a permission failure."""
        fake_cli.fail("account", "show", stderr="ERROR: Insufficient privileges\n")

        result = await client.check_permissions()

        assert result.error == "Failed to verify Azure account: ERROR: Insufficient privileges"


class TestCategoryFetchers:
    """Test the four category listings."""

    @pytest.mark.asyncio
    async def test_users_normalized_and_cached(self, client, fake_cli, cache):
        """Users are normalized, sorted and cached."""
        fake_cli.on(
            "ad",
            "user",
            "list",
            stdout=[{"id": "2", "displayName": "Zoe"}, {"id": "1", "displayName": "Adam"}],
        )

        first = await client.get_users()
        second = await client.get_users()

        assert [u.name for u in first.data] == ["Adam", "Zoe"]
        assert second.data is first.data
        assert len(fake_cli.calls_to("ad", "user", "list")) == 1
        assert cache.get(CacheScope.USERS) is first.data

    @pytest.mark.asyncio
    async def test_groups(self, client, fake_cli):
        """Groups are listed."""
        fake_cli.on("ad", "group", "list", stdout=[{"id": "g", "displayName": "Admins"}])

        result = await client.get_groups()

        assert result.data[0].type == "Microsoft.AzureAD/groups"

    @pytest.mark.asyncio
    async def test_app_registrations(self, client, fake_cli):
        """App registrations are listed."""
        fake_cli.on("ad", "app", "list", stdout=[{"id": "a", "appId": "app-1"}])

        result = await client.get_app_registrations()

        assert result.data[0].name == "app-1"

    @pytest.mark.asyncio
    async def test_role_assignments(self, client, fake_cli):
        """Role assignments are listed."""
        fake_cli.on("role", "assignment", "list", stdout=[{"id": "r", "roleDefinitionName": "Owner"}])

        result = await client.get_role_assignments()

        assert result.data[0].name == "Owner"

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, client, fake_cli, cache):
        """A failed listing is an error value and nothing is cached."""
        fake_cli.fail("ad", "group", "list", stderr="Forbidden")

        result = await client.get_groups()

        assert result.error == "Failed to get groups: Forbidden"
        assert cache.get(CacheScope.GROUPS) is None

    def test_fetchers_cover_every_category(self, client):
        """fetchers() maps each category to its fetch method."""
        assert list(client.fetchers()) == list(AD_CATEGORIES)


class TestDetails:
    """Test single object lookups."""

    @pytest.mark.asyncio
    async def test_group_members(self, client, fake_cli):
        """Group members are returned raw."""
        fake_cli.on("ad", "group", "member", "list", stdout=[{"id": "u1"}])
        group = Resource(
            id="azure-ad://groups/g1",
            name="Admins",
            type="Microsoft.AzureAD/groups",
            location="Azure AD",
            resource_group="Azure AD",
            properties={"object_id": "g1"},
        )

        result = await client.get_group_members(group)

        assert result.data == [{"id": "u1"}]
        assert fake_cli.calls[0][5] == "g1"

    @pytest.mark.asyncio
    async def test_user_details_failure(self, client, fake_cli):
        """Lookup failures are error values."""
        fake_cli.fail("ad", "user", "show", stderr="Not found")
        user = Resource(
            id="azure-ad://users/u1",
            name="Alice",
            type="Microsoft.AzureAD/users",
            location="Azure AD",
            resource_group="Azure AD",
            properties={"object_id": "u1"},
        )

        result = await client.get_user_details(user)

        assert result.error == "Failed to get user details: Not found"
