"""Cost Management queries for a subscription and for single resources.

Philosophy:
- One rate-limited `az rest` POST per uncached query
- Cached per date range; expired ranges swept before each request
- Currency never fails a query: unresolved currencies fall back to USD

Public API (the "studs"):
    CostService: Subscription costs, resource costs, billing currency
"""

import json
import logging
from typing import Any

from nimure.azure_cli_executor import AzureCLIExecutor
from nimure.azure_client import AzureResourceClient
from nimure.cache import AzureDataCache, CacheScope, cost_cache_key
from nimure.config_manager import AzureSettings, CostSettings
from nimure.costs.aggregator import (
    aggregate,
    currency_from_account_info,
    has_response_currency,
    resolve_response_currency,
    sum_resource_group_costs,
)
from nimure.costs.models import DEFAULT_CURRENCY, CostSummary, ResourceCostDetail
from nimure.costs.query import az_rest_args, build_cost_query, resolve_date_range
from nimure.errors import NimureError, ParseError, classify_cli_error
from nimure.models import FetchResult, Resource
from nimure.rate_limiter import RateLimiter
from nimure.resource_normalizer import UNKNOWN

logger = logging.getLogger(__name__)

NO_RESOURCE_GROUP_NOTE = (
    "Resource-specific cost data requires Azure Cost Management API access. "
    "Showing resource group costs where available."
)


class CostService:
    """Fetch and aggregate Cost Management data.

    Example:
        >>> service = CostService(executor, cache, limiter, resource_client)
        >>> result = await service.get_subscription_costs("2024-01-01", "2024-01-31")
        >>> if result.ok:
        ...     print(f"{result.data.total_cost:.2f} {result.data.currency}")
    """

    def __init__(
        self,
        executor: AzureCLIExecutor,
        cache: AzureDataCache,
        rate_limiter: RateLimiter,
        resource_client: AzureResourceClient,
        azure_settings: AzureSettings | None = None,
        cost_settings: CostSettings | None = None,
    ):
        self.executor = executor
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.resource_client = resource_client
        self.azure_settings = azure_settings or AzureSettings()
        self.cost_settings = cost_settings or CostSettings()

    def date_range(self, start_date: str | None, end_date: str | None) -> tuple[str, str]:
        """Fill in a missing start or end from the configured default period."""
        return resolve_date_range(start_date, end_date, days=self.cost_settings.default_period_days)

    async def _subscription_id(self) -> str:
        """Configured subscription, else the CLI's current one.

        Raises:
            NimureError: Subscription info is unavailable
        """
        if self.azure_settings.subscription_id:
            return self.azure_settings.subscription_id

        info = await self.resource_client.get_subscription_info()
        if not info.ok:
            raise NimureError(info.error)

        subscription_id = info.data.get("id")
        if not subscription_id:
            raise NimureError("Subscription info does not contain an id")
        return subscription_id

    async def _query(self, subscription_id: str, body: dict[str, Any], context: str) -> str:
        """POST a query through `az rest` and return its raw stdout.

        Raises:
            ExecutionError: The command failed
        """
        await self.rate_limiter.acquire()
        result = await self.executor.execute(az_rest_args(subscription_id, body))
        if not result.ok:
            raise classify_cli_error(result.stderr, result.exit_code, context)
        return result.stdout.strip()

    async def get_billing_currency(self) -> str:
        """Billing currency of the signed-in account, "USD" when unknown.

        Reuses cached subscription info when present. The result is cached
        under its own scope.
        """
        cached = self.cache.get(CacheScope.BILLING_CURRENCY)
        if cached is not None:
            return cached

        info = self.cache.get(CacheScope.SUBSCRIPTION_INFO)
        if info is None:
            try:
                await self.rate_limiter.acquire()
                info = await self.executor.run_json(
                    ["account", "show", "--output", "json"], context="Failed to get account info"
                )
            except NimureError as e:
                logger.debug(f"Billing currency unavailable, using {DEFAULT_CURRENCY}: {e}")
                return DEFAULT_CURRENCY

            if not isinstance(info, dict):
                return DEFAULT_CURRENCY
            self.cache.set(CacheScope.SUBSCRIPTION_INFO, info)

        currency = currency_from_account_info(info)
        self.cache.set(CacheScope.BILLING_CURRENCY, currency)
        return currency

    async def get_subscription_costs(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FetchResult[CostSummary]:
        """Cost summary of the subscription for a date range.

        Args:
            start_date: First day (YYYY-MM-DD), default period start when None
            end_date: Last day (YYYY-MM-DD), today when None

        Returns:
            FetchResult with a CostSummary, or the error message
        """
        try:
            start, end = self.date_range(start_date, end_date)
        except ValueError as e:
            return FetchResult.failure(str(e))

        removed = self.cache.cleanup_cost_data()
        if removed:
            logger.debug(f"Removed {removed} expired cost entries")

        key = cost_cache_key(start, end)
        cached = self.cache.get(CacheScope.COST_DATA, key)
        if cached is not None:
            return FetchResult.success(cached)

        try:
            subscription_id = await self._subscription_id()
            output = await self._query(
                subscription_id, build_cost_query(start, end), "Failed to get cost data"
            )
        except NimureError as e:
            return FetchResult.failure(str(e))

        if not output:
            summary = CostSummary.empty(start, end, DEFAULT_CURRENCY)
            self.cache.set(CacheScope.COST_DATA, summary, key)
            return FetchResult.success(summary)

        try:
            response = json.loads(output)
            if not isinstance(response, dict):
                raise ParseError(f"Expected a JSON object, got {type(response).__name__}")
            if has_response_currency(response):
                summary = aggregate(response, start, end)
            else:
                summary = aggregate(response, start, end, await self.get_billing_currency())
        except (json.JSONDecodeError, ParseError) as e:
            logger.debug(f"Cost response could not be parsed: {e}")
            return FetchResult.failure("Failed to parse cost data")

        self.cache.set(CacheScope.COST_DATA, summary, key)
        logger.debug(
            f"Cost data for {start} to {end}: {summary.total_cost:.2f} {summary.currency}"
        )
        return FetchResult.success(summary)

    async def get_resource_costs(
        self,
        resource: Resource,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FetchResult[ResourceCostDetail]:
        """Cost information for one resource, approximated by its resource group.

        Failures are reported as a note on a zero-cost detail, never as an
        error, so a detail view always has something to show.
        """

        def detail(note: str, **values: Any) -> FetchResult[ResourceCostDetail]:
            return FetchResult.success(
                ResourceCostDetail(
                    resource_name=resource.name,
                    resource_type=resource.type,
                    note=note,
                    **values,
                )
            )

        try:
            start, end = self.date_range(start_date, end_date)
        except ValueError as e:
            return detail(str(e))

        resource_group = resource.resource_group
        if not resource_group or resource_group == UNKNOWN or resource.is_directory_object:
            return detail(NO_RESOURCE_GROUP_NOTE)

        try:
            subscription_id = await self._subscription_id()
        except NimureError:
            return detail("Could not retrieve subscription information for cost analysis.")

        body = build_cost_query(start, end, group_by_service=False, resource_groups=[resource_group])
        try:
            output = await self._query(subscription_id, body, "Failed to retrieve cost data")
        except NimureError as e:
            return detail(str(e))

        if not output:
            return detail("No cost data available for the specified period.")

        try:
            response = json.loads(output)
        except json.JSONDecodeError:
            return detail("Failed to parse cost data response.")

        total_cost, rows = sum_resource_group_costs(response)
        currency = (
            resolve_response_currency(response) if isinstance(response, dict) else None
        ) or DEFAULT_CURRENCY

        return detail(
            f"Showing costs for resource group '{resource_group}' (period: {start} to {end})",
            total_cost=total_cost,
            currency=currency,
            usage_items=tuple(rows),
            resource_group=resource_group,
        )


__all__ = ["NO_RESOURCE_GROUP_NOTE", "CostService"]
