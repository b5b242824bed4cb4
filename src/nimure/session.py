"""Session - composition root for one nimure process.

Builds exactly one cache and one rate limiter, shares them between every
client, and exposes the operations a presentation layer needs.

Public API (the "studs"):
    NimureSession: refresh, subscription costs, resource costs, cache clearing
"""

import logging
import time
from collections.abc import Callable

from nimure.azure_ad import AzureADClient
from nimure.azure_cli_executor import AzureCLIExecutor
from nimure.azure_client import AzureResourceClient
from nimure.cache import AzureDataCache
from nimure.config_manager import NimureConfig
from nimure.costs.aggregator import get_cost_trend
from nimure.costs.models import CostSummary, CostTrend, ResourceCostDetail
from nimure.costs.service import CostService
from nimure.models import FetchResult, Resource
from nimure.rate_limiter import RateLimiter
from nimure.refresh import RefreshCoordinator, RefreshReport
from nimure.resource_normalizer import resource_from_id

logger = logging.getLogger(__name__)


class NimureSession:
    """Wire configuration, cache, rate limiter and clients together.

    Example:
        >>> session = NimureSession(ConfigManager.load_config())
        >>> report = await session.refresh()
        >>> costs = await session.get_subscription_costs()
    """

    def __init__(
        self,
        config: NimureConfig | None = None,
        executor: AzureCLIExecutor | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize session.

        Args:
            config: Configuration (defaults when None)
            executor: Azure CLI executor, built from config.azure when None
            clock: Time source shared by the cache and the rate limiter
        """
        self.config = config or NimureConfig()
        self.executor = executor or AzureCLIExecutor(timeout_ms=self.config.azure.timeout_ms)
        self.cache = AzureDataCache(
            ttl_seconds=self.config.cache.ttl_seconds,
            auto_cleanup=self.config.cache.auto_cleanup,
            clock=clock,
        )
        self.rate_limiter = RateLimiter(self.config.rate_limiting, clock=clock)

        self.resource_client = AzureResourceClient(
            self.executor, self.cache, self.rate_limiter, self.config.azure
        )
        self.ad_client = AzureADClient(self.executor, self.cache, self.rate_limiter)
        self.cost_service = CostService(
            self.executor,
            self.cache,
            self.rate_limiter,
            self.resource_client,
            self.config.azure,
            self.config.costs,
        )
        self.coordinator = RefreshCoordinator(
            self.resource_client, self.ad_client, ad_enabled=self.config.azure_ad.enabled
        )

    async def refresh(
        self, on_complete: Callable[[RefreshReport], None] | None = None
    ) -> RefreshReport | None:
        """Refresh resources and directory objects (None if already refreshing)."""
        return await self.coordinator.refresh(on_complete)

    @property
    def resources(self) -> list[Resource]:
        return self.coordinator.resources

    def find_resource(self, resource_id: str) -> Resource:
        """Resource with this ID from the last refresh, else one built from the ID."""
        for resource in self.coordinator.all_objects():
            if resource.id == resource_id:
                return resource
        return resource_from_id(resource_id)

    async def get_subscription_costs(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> FetchResult[CostSummary]:
        if not self.config.costs.enabled:
            return FetchResult.failure("Cost analysis is disabled in configuration")
        return await self.cost_service.get_subscription_costs(start_date, end_date)

    async def get_resource_costs(
        self,
        resource: Resource,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> FetchResult[ResourceCostDetail]:
        if not self.config.costs.enabled:
            return FetchResult.failure("Cost analysis is disabled in configuration")
        return await self.cost_service.get_resource_costs(resource, start_date, end_date)

    async def get_cost_trend(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> FetchResult[CostTrend]:
        """Trend of the subscription's daily costs over a date range."""
        costs = await self.get_subscription_costs(start_date, end_date)
        if not costs.ok:
            return FetchResult.failure(costs.error)
        return FetchResult.success(get_cost_trend(costs.data.daily_costs))

    def clear_cache(self) -> None:
        """Drop every cached value; the next fetch of anything goes to Azure."""
        self.cache.clear()


__all__ = ["NimureSession"]
