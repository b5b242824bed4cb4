"""Refresh coordination - parallel fetch of resources and directory objects.

One refresh cycle fans out the resource listing and, when directory objects
are enabled, a permission probe followed by the four directory categories.
All branches are awaited together; the completion callback fires exactly
once, after every branch has finished.

Philosophy:
- Partial failures degrade, never abort
- One refresh in flight at a time (requests while loading are dropped)
- Previous snapshot kept for any branch that fails

Public API (the "studs"):
    RefreshCoordinator: Runs refresh cycles and holds the latest snapshot
    RefreshReport: Aggregate outcome of one cycle
    RefreshState: Idle, loading, complete, partially complete
    summary_message: One-line description of a report
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from nimure.azure_ad import AD_CATEGORIES, AzureADClient
from nimure.azure_client import AzureResourceClient
from nimure.models import FetchResult, Resource

logger = logging.getLogger(__name__)


class RefreshState(StrEnum):
    """Lifecycle of a refresh cycle."""

    IDLE = "idle"
    LOADING = "loading"
    COMPLETE = "complete"
    PARTIAL_COMPLETE = "partial_complete"


@dataclass
class RefreshReport:
    """Outcome of one refresh cycle.

    Attributes:
        resource_count: Resources in the snapshot after the cycle
        ad_count: Directory objects fetched successfully in this cycle
        error: Resource listing failure (previous resources were kept)
        warnings: One entry per failed directory branch
        state: COMPLETE, or PARTIAL_COMPLETE when anything failed
    """

    resource_count: int = 0
    ad_count: int = 0
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    state: RefreshState = RefreshState.COMPLETE


def summary_message(report: RefreshReport) -> str:
    """Human readable summary, e.g. "Refreshed 5 Azure resources and 12 AD objects"."""
    if report.error:
        return f"Failed to refresh Azure resources: {report.error}"
    message = f"Refreshed {report.resource_count} Azure resources and {report.ad_count} AD objects"
    if report.warnings:
        message += f" ({len(report.warnings)} warnings)"
    return message


class RefreshCoordinator:
    """Fan out one refresh cycle and join the results.

    Example:
        >>> coordinator = RefreshCoordinator(resource_client, ad_client)
        >>> report = await coordinator.refresh(on_complete=print_report)
        >>> len(coordinator.resources) == report.resource_count
        True
    """

    def __init__(
        self,
        resource_client: AzureResourceClient,
        ad_client: AzureADClient | None = None,
        ad_enabled: bool = True,
    ):
        self.resource_client = resource_client
        self.ad_client = ad_client
        self.ad_enabled = ad_enabled and ad_client is not None
        self.state = RefreshState.IDLE
        self.resources: list[Resource] = []
        self.ad_objects: dict[str, list[Resource]] = {category: [] for category in AD_CATEGORIES}

    @property
    def is_loading(self) -> bool:
        return self.state == RefreshState.LOADING

    async def refresh(
        self, on_complete: Callable[[RefreshReport], None] | None = None
    ) -> RefreshReport | None:
        """Run one refresh cycle.

        Args:
            on_complete: Called once with the report after all branches finish

        Returns:
            The report, or None when a refresh was already in flight (the
            callback is not called in that case)
        """
        if self.is_loading:
            logger.debug("Refresh already in progress, ignoring request")
            return None

        self.state = RefreshState.LOADING
        report = RefreshReport()

        branches = [self._refresh_resources(report)]
        if self.ad_enabled:
            branches.append(self._refresh_directory(report))

        try:
            outcomes = await asyncio.gather(*branches, return_exceptions=True)
        except BaseException:
            self.state = RefreshState.IDLE
            raise

        for index, outcome in enumerate(outcomes):
            if not isinstance(outcome, BaseException):
                continue
            if index == 0:
                report.error = f"Failed to get resources: {outcome}"
                report.resource_count = len(self.resources)
                logger.error(report.error)
            else:
                warning = f"Failed to refresh Azure AD objects: {outcome}"
                report.warnings.append(warning)
                logger.warning(warning)

        failed = bool(report.error or report.warnings)
        report.state = RefreshState.PARTIAL_COMPLETE if failed else RefreshState.COMPLETE
        self.state = report.state

        logger.info(summary_message(report))

        if on_complete is not None:
            on_complete(report)
        return report

    async def _refresh_resources(self, report: RefreshReport) -> None:
        result = await self.resource_client.get_resources()
        if result.ok:
            self.resources = result.data or []
        else:
            report.error = result.error
            logger.error(f"Failed to get Azure resources: {result.error}")
        report.resource_count = len(self.resources)

    async def _refresh_directory(self, report: RefreshReport) -> None:
        assert self.ad_client is not None

        probe = await self.ad_client.check_permissions()
        if not probe.ok:
            report.warnings.append(f"Azure AD access limited: {probe.error}")
            logger.warning(f"Azure AD access limited: {probe.error}")
            return

        fetchers = self.ad_client.fetchers()
        results: list[FetchResult[list[Resource]] | BaseException] = await asyncio.gather(
            *(fetchers[category]() for category in AD_CATEGORIES), return_exceptions=True
        )

        for category, result in zip(AD_CATEGORIES, results, strict=True):
            if isinstance(result, BaseException):
                warning = f"Failed to get {category.replace('_', ' ')}: {result}"
                report.warnings.append(warning)
                logger.warning(warning)
            elif result.ok:
                self.ad_objects[category] = result.data or []
                report.ad_count += len(self.ad_objects[category])
            else:
                warning = result.error or f"Failed to get {category.replace('_', ' ')}"
                report.warnings.append(warning)
                logger.warning(warning)

    def all_objects(self) -> list[Resource]:
        """Resources followed by directory objects in category order."""
        objects = list(self.resources)
        for category in AD_CATEGORIES:
            objects.extend(self.ad_objects[category])
        return objects


__all__ = ["RefreshCoordinator", "RefreshReport", "RefreshState", "summary_message"]
