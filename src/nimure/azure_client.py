"""Azure resource and subscription queries through the Azure CLI.

Philosophy:
- Azure CLI as the only transport (no SDK credentials)
- Rate limited: every gated call goes through the shared RateLimiter
- Cached: subscription info is kept for the cache TTL
- Errors as values: public fetchers return FetchResult, never raise

Public API (the "studs"):
    AzureCLIClient: Shared plumbing (rate limiting, error mapping)
    AzureResourceClient: Subscription info, resource listing, resource details
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from nimure.azure_cli_executor import AzureCLIExecutor
from nimure.cache import AzureDataCache, CacheScope
from nimure.config_manager import AzureSettings
from nimure.errors import NimureError, ParseError, classify_cli_error
from nimure.models import FetchResult, Resource
from nimure.rate_limiter import RateLimiter
from nimure.resource_normalizer import normalize_resources, parse_listing

logger = logging.getLogger(__name__)


class AzureCLIClient:
    """Base class wiring an executor, a cache and a rate limiter together."""

    def __init__(
        self,
        executor: AzureCLIExecutor,
        cache: AzureDataCache,
        rate_limiter: RateLimiter,
    ):
        self.executor = executor
        self.cache = cache
        self.rate_limiter = rate_limiter

    async def _run_listing(self, args: list[str], context: str, rate_limited: bool = True) -> list:
        """Run a listing command and decode the JSON array it prints.

        Raises:
            ExecutionError: Command failed (AuthError when not logged in)
            ParseError: Output is not a JSON array
        """
        if rate_limited:
            await self.rate_limiter.acquire()

        result = await self.executor.execute(args)
        if not result.ok:
            raise classify_cli_error(result.stderr, result.exit_code, context)

        try:
            return parse_listing(result.stdout)
        except ParseError as e:
            raise ParseError(f"{context}: {e}") from e

    async def _run_object(self, args: list[str], context: str, rate_limited: bool = True) -> Any:
        """Run a command that prints one JSON object.

        Raises:
            ExecutionError: Command failed
            ParseError: Output is not valid JSON
        """
        if rate_limited:
            await self.rate_limiter.acquire()
        return await self.executor.run_json(args, context=context)

    async def _cached_listing(
        self,
        scope: CacheScope,
        args: list[str],
        context: str,
        normalize: Callable[[list], list[Resource]],
    ) -> FetchResult[list[Resource]]:
        """Serve a listing from cache, or fetch, normalize and cache it."""
        cached = self.cache.get(scope)
        if cached is not None:
            return FetchResult.success(cached)

        try:
            raw = await self._run_listing(args, context)
        except NimureError as e:
            return FetchResult.failure(str(e))

        processed = normalize(raw)
        self.cache.set(scope, processed)
        return FetchResult.success(processed)

    @staticmethod
    async def _as_result(coro: Awaitable[Any]) -> FetchResult[Any]:
        try:
            return FetchResult.success(await coro)
        except NimureError as e:
            return FetchResult.failure(str(e))


class AzureResourceClient(AzureCLIClient):
    """Query subscription information and resources.

    Example:
        >>> client = AzureResourceClient(executor, cache, limiter, config.azure)
        >>> result = await client.get_resources()
        >>> if result.ok:
        ...     print(f"{len(result.data)} resources")
    """

    def __init__(
        self,
        executor: AzureCLIExecutor,
        cache: AzureDataCache,
        rate_limiter: RateLimiter,
        settings: AzureSettings | None = None,
    ):
        super().__init__(executor, cache, rate_limiter)
        self.settings = settings or AzureSettings()

    async def check_cli(self) -> bool:
        """True when the Azure CLI can be executed."""
        result = await self.executor.execute(["--version"])
        return result.ok

    async def check_auth(self) -> bool:
        """True when the Azure CLI has a logged in account."""
        result = await self.executor.execute(["account", "show"])
        return result.ok

    async def get_subscription_info(self) -> FetchResult[dict[str, Any]]:
        """Get the current subscription (`az account show`), cached for the TTL."""
        cached = self.cache.get(CacheScope.SUBSCRIPTION_INFO)
        if cached is not None:
            return FetchResult.success(cached)

        try:
            info = await self._run_object(
                ["account", "show", "--output", "json"], "Failed to get subscription info"
            )
        except NimureError as e:
            return FetchResult.failure(str(e))

        if not isinstance(info, dict):
            return FetchResult.failure("Failed to parse subscription info")

        self.cache.set(CacheScope.SUBSCRIPTION_INFO, info)
        return FetchResult.success(info)

    def resource_list_args(self) -> list[str]:
        """Arguments for `az resource list` with configured filters."""
        args = ["resource", "list", "--output", "json"]

        if self.settings.subscription_id:
            args += ["--subscription", self.settings.subscription_id]

        for resource_group in self.settings.resource_groups:
            args += ["--resource-group", resource_group]

        return args

    async def get_resources(self) -> FetchResult[list[Resource]]:
        """List and normalize every resource in scope.

        Resource listings are not cached; each refresh fetches them anew.
        """
        try:
            raw = await self._run_listing(
                self.resource_list_args(), "Failed to get resources", rate_limited=False
            )
        except NimureError as e:
            return FetchResult.failure(str(e))

        resources = normalize_resources(raw)
        logger.debug(f"Fetched {len(resources)} resources")
        return FetchResult.success(resources)

    async def get_resource_details(self, resource: Resource) -> FetchResult[dict[str, Any]]:
        """Full JSON of one resource (`az resource show --ids`)."""
        return await self._as_result(
            self._run_object(
                ["resource", "show", "--ids", resource.id, "--output", "json"],
                "Failed to get resource details",
                rate_limited=False,
            )
        )


__all__ = ["AzureCLIClient", "AzureResourceClient"]
