"""ASCII cost charts and text summaries.

Every function here is pure: given the same numbers it returns the same
lines, with no I/O.

Public API:
    render_daily_chart: One proportional bar per day
    render_service_chart: Percentage bar per service
    format_cost_summary: Headline numbers and top services
    format_resource_costs: Cost information for one resource
    trend_line: One-line trend indicator
    currency_symbol: Display symbol for a currency code
    truncate: Shorten text with an ellipsis
"""

import math
from collections.abc import Sequence

from nimure.costs.aggregator import normalize_usage_date
from nimure.costs.models import CostSummary, CostTrend, DailyCost, ResourceCostDetail, ServiceCost

BAR_CHAR = "█"
RULE_CHAR = "─"
DOUBLE_RULE_CHAR = "═"

DAILY_BAR_WIDTH = 50
DAILY_MAX_ROWS = 20
SERVICE_BAR_WIDTH = 25
SERVICE_NAME_WIDTH = 25
SERVICE_MAX_ROWS = 10

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "CHF": "CHF ",
    "SEK": "kr ",
    "NOK": "kr ",
    "DKK": "kr ",
    "PLN": "zł ",
    "CZK": "Kč ",
    "HUF": "Ft ",
    "BRL": "R$ ",
    "INR": "₹",
    "CNY": "¥",
    "KRW": "₩",
    "SGD": "S$",
    "HKD": "HK$",
    "NZD": "NZ$",
    "ZAR": "R ",
    "TRY": "₺",
    "RUB": "₽",
}


def currency_symbol(code: str | None) -> str:
    """Display symbol for a currency code; unknown codes render as "XXX "."""
    if not code:
        return "$"
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def truncate(text: str, length: int) -> str:
    """Shorten text to length characters, ending in "..." when cut."""
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def bar_length(value: float, maximum: float, scale: int) -> int:
    """floor(value / maximum * scale), clamped to [0, scale]."""
    if maximum <= 0:
        return 0
    return max(0, min(scale, math.floor(value / maximum * scale)))


def render_daily_chart(
    daily_costs: Sequence[DailyCost],
    width: int = DAILY_BAR_WIDTH,
    max_rows: int = DAILY_MAX_ROWS,
) -> list[str]:
    """Render daily costs as horizontal bars scaled to the most expensive day.

    Example:
        >>> render_daily_chart([DailyCost("2024-01-01", 20.0), DailyCost("2024-01-02", 5.0)], width=4)
        ['Daily Costs (Max: 20.00)', '──────────────', '01-01 │████ 20.00', '01-02 │█    5.00', '──────────────']
    """
    if not daily_costs:
        return ["No cost data available"]

    max_cost = max(day.cost for day in daily_costs)
    if max_cost <= 0:
        return ["No costs recorded for this period"]

    rule = RULE_CHAR * (width + 10)
    lines = [f"Daily Costs (Max: {max_cost:.2f})", rule]

    for day in daily_costs[:max_rows]:
        length = bar_length(day.cost, max_cost, width)
        bar = (BAR_CHAR * length).ljust(width)
        lines.append(f"{day.date[5:]} │{bar} {day.cost:.2f}")

    hidden = len(daily_costs) - max_rows
    if hidden > 0:
        lines.append(f"... {hidden} more days")

    lines.append(rule)
    return lines


def render_service_chart(
    services: Sequence[ServiceCost],
    max_services: int = SERVICE_MAX_ROWS,
    width: int = SERVICE_BAR_WIDTH,
) -> list[str]:
    """Render each service's share of the total as a percentage bar."""
    if not services:
        return ["No service cost data available"]

    total = sum(service.cost for service in services)
    if total <= 0:
        return ["No service costs recorded"]

    rule = RULE_CHAR * (SERVICE_NAME_WIDTH + width + 20)
    lines = [f"Service Breakdown (Total: {total:.2f} {services[0].currency})", rule]

    for service in services[:max_services]:
        percentage = service.cost / total * 100
        bar = (BAR_CHAR * bar_length(percentage, 100, width)).ljust(width)
        name = truncate(service.name, SERVICE_NAME_WIDTH)
        lines.append(
            f"{name:<{SERVICE_NAME_WIDTH}} │{bar} {percentage:5.1f}% ({service.cost:.2f})"
        )

    hidden = len(services) - max_services
    if hidden > 0:
        lines.append(f"... and {hidden} more services")

    lines.append(rule)
    return lines


def trend_line(trend: CostTrend) -> str:
    """e.g. "📈 Trending up (28.6%)"."""
    return f"{trend.indicator} {trend.label}"


def format_cost_summary(summary: CostSummary | None, top: int = 3) -> list[str]:
    """Headline lines for a cost summary."""
    if summary is None:
        return ["No cost data available"]

    symbol = currency_symbol(summary.currency)
    lines = [
        "Azure Cost Summary",
        DOUBLE_RULE_CHAR * 50,
        "",
        f"Total Cost: {symbol}{summary.total_cost:.2f} {summary.currency}",
        f"Period: {summary.period.start_date} to {summary.period.end_date}",
        f"Services: {len(summary.services)}",
    ]

    if summary.daily_costs:
        lines.append(f"Daily Average: {symbol}{summary.daily_average:.2f} {summary.currency}")

    if summary.services:
        lines += ["", "Top Services:"]
        for rank, service in enumerate(summary.services[:top], start=1):
            share = service.cost / summary.total_cost * 100 if summary.total_cost else 0.0
            lines.append(f"   {rank}. {service.name}: {symbol}{service.cost:.2f} ({share:.1f}%)")

    return lines


def format_resource_costs(detail: ResourceCostDetail | None, max_items: int = 5) -> list[str]:
    """Lines describing the cost of one resource."""
    if detail is None:
        return ["No cost data available for this resource"]

    symbol = currency_symbol(detail.currency)
    lines = [
        f"Cost Analysis: {detail.resource_name}",
        DOUBLE_RULE_CHAR * 50,
        "",
        f"Resource Type: {detail.resource_type}",
        f"Total Cost: {symbol}{detail.total_cost:.2f} {detail.currency}",
        f"Usage Records: {len(detail.usage_items)}",
        "",
    ]

    if detail.note:
        lines += [detail.note, ""]

    if detail.total_cost == 0:
        if not detail.note:
            lines.append("No costs recorded for this resource in the selected period.")
        return lines

    if detail.usage_items:
        lines.append("Recent Usage:")
        for item in detail.usage_items[:max_items]:
            # rows are [cost, usage date, ...]
            row = list(item) if isinstance(item, list | tuple) else []
            day = normalize_usage_date(row[1], "N/A") if len(row) > 1 else "N/A"
            try:
                amount = float(row[0]) if row else 0.0
            except (TypeError, ValueError):
                amount = 0.0
            lines.append(f"   {day}: {symbol}{amount:.2f}")

    return lines


__all__ = [
    "CURRENCY_SYMBOLS",
    "bar_length",
    "currency_symbol",
    "format_cost_summary",
    "format_resource_costs",
    "render_daily_chart",
    "render_service_chart",
    "trend_line",
    "truncate",
]
