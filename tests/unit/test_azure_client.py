"""Unit tests for the Azure resource client.

Tests cover:
- Resource listing and normalization
- Subscription info caching and rate limiting
- Error mapping to FetchResult
"""

import pytest

from nimure.azure_client import AzureResourceClient
from nimure.cache import AzureDataCache, CacheScope
from nimure.config_manager import AzureSettings, RateLimitSettings
from nimure.errors import NOT_LOGGED_IN_MESSAGE
from nimure.rate_limiter import RateLimiter


@pytest.fixture
def cache(clock):
    return AzureDataCache(clock=clock)


@pytest.fixture
def limiter(clock):
    return RateLimiter(RateLimitSettings(enabled=False), clock=clock)


@pytest.fixture
def client(executor, cache, limiter):
    return AzureResourceClient(executor, cache, limiter)


class TestResourceListArgs:
    """Test az resource list arguments."""

    def test_default(self, client):
        """Without filters the CLI's current subscription is listed."""
        assert client.resource_list_args() == ["resource", "list", "--output", "json"]

    def test_filters(self, executor, cache, limiter):
        """Subscription and resource group filters are appended."""
        client = AzureResourceClient(
            executor,
            cache,
            limiter,
            AzureSettings(subscription_id="sub-1", resource_groups=["rg-a", "rg-b"]),
        )

        assert client.resource_list_args() == [
            "resource",
            "list",
            "--output",
            "json",
            "--subscription",
            "sub-1",
            "--resource-group",
            "rg-a",
            "--resource-group",
            "rg-b",
        ]


class TestGetResources:
    """Test AzureResourceClient.get_resources()."""

    @pytest.mark.asyncio
    async def test_success(self, client, fake_cli, sample_resources):
        """Resources are listed and normalized."""
        fake_cli.on("resource", "list", stdout=sample_resources)

        result = await client.get_resources()

        assert result.ok
        assert len(result.data) == 5
        assert result.data[0].name == "datalake"

    @pytest.mark.asyncio
    async def test_empty_listing(self, client, fake_cli):
        """Empty output is an empty list."""
        fake_cli.on("resource", "list", stdout="")

        result = await client.get_resources()

        assert result.ok
        assert result.data == []

    @pytest.mark.asyncio
    async def test_not_cached(self, client, fake_cli):
        """Every call lists resources again."""
        fake_cli.on("resource", "list", stdout=[])

        await client.get_resources()
        await client.get_resources()

        assert len(fake_cli.calls_to("resource", "list")) == 2

    @pytest.mark.asyncio
    async def test_not_logged_in(self, client, fake_cli):
        """Auth failures carry the login hint."""
        fake_cli.fail("resource", "list", stderr="ERROR: Please run 'az login' to setup account.")

        result = await client.get_resources()

        assert not result.ok
        assert result.error == NOT_LOGGED_IN_MESSAGE

    @pytest.mark.asyncio
    async def test_malformed_json(self, client, fake_cli):
        """Malformed output is reported, not raised."""
        fake_cli.on("resource", "list", stdout="[{")

        result = await client.get_resources()

        assert not result.ok
        assert result.error.startswith("Failed to get resources: Malformed listing JSON")


class TestGetSubscriptionInfo:
    """Test AzureResourceClient.get_subscription_info()."""

    @pytest.mark.asyncio
    async def test_cached(self, client, fake_cli, cache, subscription_info):
        """Subscription info is fetched once and cached."""
        fake_cli.on("account", "show", stdout=subscription_info)

        first = await client.get_subscription_info()
        second = await client.get_subscription_info()

        assert first.data == subscription_info
        assert second.data == subscription_info
        assert len(fake_cli.calls_to("account", "show")) == 1
        assert cache.get(CacheScope.SUBSCRIPTION_INFO) == subscription_info

    @pytest.mark.asyncio
    async def test_refetched_after_ttl(self, client, fake_cli, clock, subscription_info):
        """Expired subscription info is fetched again."""
        fake_cli.on("account", "show", stdout=subscription_info)

        await client.get_subscription_info()
        clock.advance(300)
        await client.get_subscription_info()

        assert len(fake_cli.calls_to("account", "show")) == 2

    @pytest.mark.asyncio
    async def test_rate_limited(self, executor, cache, fake_cli, clock, subscription_info):
        """Subscription info goes through the rate limiter."""
        limiter = RateLimiter(RateLimitSettings(), clock=clock)
        client = AzureResourceClient(executor, cache, limiter)
        fake_cli.on("account", "show", stdout=subscription_info)

        await client.get_subscription_info()

        assert limiter.state.request_count == 1

    @pytest.mark.asyncio
    async def test_not_an_object(self, client, fake_cli):
        """A non-object payload is a parse failure."""
        fake_cli.on("account", "show", stdout="[]")

        result = await client.get_subscription_info()

        assert result.error == "Failed to parse subscription info"

    @pytest.mark.asyncio
    async def test_failure(self, client, fake_cli, cache):
        """Failures are returned and not cached."""
        fake_cli.fail("account", "show", stderr="ERROR: network")

        result = await client.get_subscription_info()

        assert result.error == "Failed to get subscription info: ERROR: network"
        assert cache.get(CacheScope.SUBSCRIPTION_INFO) is None


class TestChecks:
    """Test CLI availability and login checks."""

    @pytest.mark.asyncio
    async def test_check_cli(self, client, fake_cli):
        """check_cli runs az --version."""
        fake_cli.on("--version", stdout="azure-cli 2.60.0")

        assert await client.check_cli() is True

    @pytest.mark.asyncio
    async def test_check_auth_failure(self, client, fake_cli):
        """check_auth is False when account show fails."""
        fake_cli.fail("account", "show")

        assert await client.check_auth() is False
