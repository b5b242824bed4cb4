"""Cost data structures.

Philosophy:
- Immutable after construction
- Plain floats: Cost Management returns JSON numbers
- Zero dependencies on other nimure modules

Public API:
    ServiceCost: Cost of one service over the period
    DailyCost: Cost of one day
    CostPeriod: Start and end date of a summary
    CostSummary: Aggregated cost data for a subscription
    ResourceCostDetail: Cost information for a single resource
    CostTrend: Trend classification of a daily cost series
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class ServiceCost:
    """Cost of one service."""

    name: str
    cost: float
    usage_count: int
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class DailyCost:
    """Cost of one day (date is YYYY-MM-DD)."""

    date: str
    cost: float


@dataclass(frozen=True)
class CostPeriod:
    """Date range covered by a summary (YYYY-MM-DD)."""

    start_date: str
    end_date: str


@dataclass(frozen=True)
class CostSummary:
    """Aggregated cost data.

    Attributes:
        total_cost: Sum of every row's cost
        currency: ISO-4217 code
        services: Per-service totals, most expensive first
        daily_costs: Per-day totals, oldest first
        period: Covered date range
    """

    total_cost: float
    currency: str
    services: tuple[ServiceCost, ...]
    daily_costs: tuple[DailyCost, ...]
    period: CostPeriod

    @classmethod
    def empty(cls, start_date: str, end_date: str, currency: str = DEFAULT_CURRENCY) -> "CostSummary":
        """Summary of a period without any cost rows."""
        return cls(
            total_cost=0.0,
            currency=currency,
            services=(),
            daily_costs=(),
            period=CostPeriod(start_date, end_date),
        )

    @property
    def daily_average(self) -> float:
        """Average cost per day with data (0 when there is none)."""
        if not self.daily_costs:
            return 0.0
        return self.total_cost / len(self.daily_costs)


@dataclass(frozen=True)
class ResourceCostDetail:
    """Cost information for one resource.

    Per-resource costs are approximated by the resource group's costs; `note`
    explains what the numbers represent or why they are missing.
    """

    resource_name: str
    resource_type: str
    total_cost: float = 0.0
    currency: str = DEFAULT_CURRENCY
    usage_items: tuple[Any, ...] = field(default_factory=tuple)
    resource_group: str | None = None
    note: str | None = None


class TrendDirection(StrEnum):
    """Direction of a cost trend."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient data"


@dataclass(frozen=True)
class CostTrend:
    """Trend of recent daily costs against the preceding window.

    Attributes:
        direction: up, down, stable or insufficient data
        change_percent: Percent change of the recent mean over the older mean,
            None when it cannot be computed
        recent_average: Mean of the recent window
        older_average: Mean of the preceding window (None if there is none)
    """

    direction: TrendDirection
    change_percent: float | None = None
    recent_average: float | None = None
    older_average: float | None = None

    @property
    def indicator(self) -> str:
        return {
            TrendDirection.UP: "📈",
            TrendDirection.DOWN: "📉",
        }.get(self.direction, "📊")

    @property
    def label(self) -> str:
        """Human readable description, e.g. "Trending up (28.6%)"."""
        if self.direction == TrendDirection.INSUFFICIENT_DATA:
            return "Insufficient data"
        if self.direction == TrendDirection.STABLE:
            return "Stable"
        if self.change_percent is None:
            return f"Trending {self.direction}"
        return f"Trending {self.direction} ({abs(self.change_percent):.1f}%)"


__all__ = [
    "DEFAULT_CURRENCY",
    "CostPeriod",
    "CostSummary",
    "CostTrend",
    "DailyCost",
    "ResourceCostDetail",
    "ServiceCost",
    "TrendDirection",
]
