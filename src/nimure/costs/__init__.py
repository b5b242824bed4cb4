"""Costs Module - Azure Cost Management analysis.

Public API (the "studs"):
    From models:
        CostSummary, ServiceCost, DailyCost, CostPeriod: Aggregated cost data
        ResourceCostDetail: Cost information for one resource
        CostTrend, TrendDirection: Trend classification

    From aggregator:
        aggregate: Cost Management rows to CostSummary
        get_cost_trend: Recent vs preceding window trend

    From charts:
        render_daily_chart, render_service_chart: ASCII charts

    From service:
        CostService: Cached, rate-limited cost queries
"""

from nimure.costs.aggregator import aggregate, get_cost_trend
from nimure.costs.charts import (
    currency_symbol,
    format_cost_summary,
    format_resource_costs,
    render_daily_chart,
    render_service_chart,
    trend_line,
)
from nimure.costs.models import (
    CostPeriod,
    CostSummary,
    CostTrend,
    DailyCost,
    ResourceCostDetail,
    ServiceCost,
    TrendDirection,
)
from nimure.costs.service import CostService

__all__ = [
    "CostPeriod",
    "CostService",
    "CostSummary",
    "CostTrend",
    "DailyCost",
    "ResourceCostDetail",
    "ServiceCost",
    "TrendDirection",
    "aggregate",
    "currency_symbol",
    "format_cost_summary",
    "format_resource_costs",
    "get_cost_trend",
    "render_daily_chart",
    "render_service_chart",
    "trend_line",
]
