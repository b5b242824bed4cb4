"""Cost Management response aggregation and trend analysis.

Philosophy:
- Soft defaults: missing columns or currency never fail aggregation
- Hard failure only for a payload that is not a JSON object
- Pure functions: no I/O, no clock

A Cost Management query response is column/row oriented:

    {"properties": {
        "columns": [{"name": "PreTaxCost"}, {"name": "UsageDate"}, ...],
        "rows": [[12.5, 20240101, "Virtual Machines", "USD"], ...],
        "nextLink": null}}

Public API:
    aggregate: Rows to CostSummary (per service, per day, grand total)
    locate_columns: Column indices by alias
    resolve_response_currency: Currency carried by the response itself
    currency_from_email: Email-TLD currency heuristic
    get_cost_trend: Recent vs preceding window trend classification
    sum_resource_group_costs: Total of a resource-group filtered query
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, ClassVar

from nimure.costs.models import (
    DEFAULT_CURRENCY,
    CostPeriod,
    CostSummary,
    CostTrend,
    DailyCost,
    ServiceCost,
    TrendDirection,
)
from nimure.errors import ParseError

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE = "Unknown"

# Trend thresholds
TREND_WINDOW_DAYS = 7
TREND_THRESHOLD_PERCENT = 10.0

_NEXT_LINK_CURRENCY = re.compile(r"currency=([A-Z]+)")
_COMPACT_DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


@dataclass(frozen=True)
class ColumnIndices:
    """Positions of the known columns in a row (None when absent)."""

    cost: int | None = None
    date: int | None = None
    service: int | None = None
    currency: int | None = None


class ColumnAliases:
    """Column names accepted for each logical field."""

    COST: ClassVar[tuple[str, ...]] = ("PreTaxCost", "Cost")
    DATE: ClassVar[tuple[str, ...]] = ("UsageDate", "Date")
    SERVICE: ClassVar[tuple[str, ...]] = ("ServiceName", "Service")
    CURRENCY: ClassVar[tuple[str, ...]] = ("Currency", "BillingCurrency")


# Known approximation: an email domain says nothing reliable about the
# billing currency. Kept for compatibility with existing behaviour.
EMAIL_TLD_CURRENCIES: dict[str, str] = {
    "uk": "GBP",
    "gb": "GBP",
    "de": "EUR",
    "fr": "EUR",
    "it": "EUR",
    "es": "EUR",
    "nl": "EUR",
    "at": "EUR",
    "jp": "JPY",
    "ca": "CAD",
    "au": "AUD",
    "in": "INR",
}


def locate_columns(columns: list[Any]) -> ColumnIndices:
    """Find the cost, date, service and currency columns by name.

    The first column matching an alias wins.
    """
    found: dict[str, int] = {}
    aliases = {
        "cost": ColumnAliases.COST,
        "date": ColumnAliases.DATE,
        "service": ColumnAliases.SERVICE,
        "currency": ColumnAliases.CURRENCY,
    }

    for index, column in enumerate(columns or []):
        name = column.get("name") if isinstance(column, dict) else column
        for field_name, names in aliases.items():
            if name in names and field_name not in found:
                found[field_name] = index

    return ColumnIndices(**found)


def _cell(row: list[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalize_usage_date(value: Any, default: str) -> str:
    """Turn a UsageDate cell into YYYY-MM-DD.

    Cost Management emits integers like 20240101; other sources emit ISO
    strings, possibly with a time part.
    """
    if value is None or value == "":
        return default

    text = str(value)
    compact = _COMPACT_DATE.match(text)
    if compact:
        return "-".join(compact.groups())
    return text[:10]


def _valid_currency(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def resolve_response_currency(response: dict[str, Any]) -> str | None:
    """Currency from the response metadata or the pagination link.

    Returns:
        Currency code, or None when the response does not carry one
    """
    properties = response.get("properties") or {}

    currency = _valid_currency(properties.get("currency"))
    if currency:
        return currency

    next_link = properties.get("nextLink")
    if isinstance(next_link, str):
        match = _NEXT_LINK_CURRENCY.search(next_link)
        if match:
            return match.group(1)

    return None


def currency_from_email(email: str | None) -> str:
    """Guess a billing currency from the top-level domain of an email address.

    Example:
        >>> currency_from_email("someone@contoso.co.uk")
        'GBP'
        >>> currency_from_email("someone@contoso.com")
        'USD'
    """
    if not email or "@" not in email:
        return DEFAULT_CURRENCY

    domain = email.rsplit("@", 1)[1].lower()
    tld = domain.rsplit(".", 1)[-1]
    return EMAIL_TLD_CURRENCIES.get(tld, DEFAULT_CURRENCY)


def currency_from_account_info(account_info: dict[str, Any] | None) -> str:
    """Apply the email heuristic to `az account show` output."""
    user = (account_info or {}).get("user") or {}
    return currency_from_email(user.get("name"))


def aggregate(
    response: dict[str, Any],
    start_date: str,
    end_date: str,
    fallback_currency: str = DEFAULT_CURRENCY,
) -> CostSummary:
    """Aggregate a Cost Management response into a CostSummary.

    Args:
        response: Decoded query response
        start_date: Query start (YYYY-MM-DD), also the date of rows without one
        end_date: Query end (YYYY-MM-DD)
        fallback_currency: Used when neither rows nor metadata carry a currency

    Returns:
        CostSummary with services sorted by cost descending and daily costs
        sorted by date ascending

    Raises:
        ParseError: response is not a JSON object
    """
    if not isinstance(response, dict):
        raise ParseError("Cost Management response is not a JSON object")

    properties = response.get("properties")
    if not isinstance(properties, dict) or not isinstance(properties.get("rows"), list):
        return CostSummary.empty(start_date, end_date, fallback_currency)

    indices = locate_columns(properties.get("columns") or [])

    total_cost = 0.0
    by_service: dict[str, list[float]] = {}  # name -> [cost, count]
    by_date: dict[str, float] = {}
    row_currency: str | None = None

    for row in properties["rows"]:
        if not isinstance(row, list):
            continue

        cost = _to_float(_cell(row, indices.cost))
        date = normalize_usage_date(_cell(row, indices.date), start_date)
        service = _cell(row, indices.service)
        service_name = str(service) if service not in (None, "") else UNKNOWN_SERVICE

        if row_currency is None:
            row_currency = _valid_currency(_cell(row, indices.currency))

        bucket = by_service.setdefault(service_name, [0.0, 0])
        bucket[0] += cost
        bucket[1] += 1

        by_date[date] = by_date.get(date, 0.0) + cost

        total_cost += cost

    currency = row_currency or resolve_response_currency(response) or fallback_currency

    services = sorted(
        (ServiceCost(name, cost, int(count), currency) for name, (cost, count) in by_service.items()),
        key=lambda s: s.cost,
        reverse=True,
    )
    daily_costs = sorted((DailyCost(d, c) for d, c in by_date.items()), key=lambda d: d.date)

    period = CostPeriod(
        start_date=daily_costs[0].date if daily_costs else start_date,
        end_date=daily_costs[-1].date if daily_costs else end_date,
    )

    logger.debug(
        f"Aggregated {len(properties['rows'])} cost rows into {len(services)} services "
        f"and {len(daily_costs)} days"
    )

    return CostSummary(
        total_cost=total_cost,
        currency=currency,
        services=tuple(services),
        daily_costs=tuple(daily_costs),
        period=period,
    )


def has_response_currency(response: dict[str, Any]) -> bool:
    """True when rows or metadata of the response name a currency."""
    if not isinstance(response, dict):
        return False

    if resolve_response_currency(response):
        return True

    properties = response.get("properties") or {}
    index = locate_columns(properties.get("columns") or []).currency
    if index is None:
        return False

    return any(
        _valid_currency(_cell(row, index))
        for row in properties.get("rows") or []
        if isinstance(row, list)
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def get_cost_trend(daily_costs: list[DailyCost] | tuple[DailyCost, ...]) -> CostTrend:
    """Classify the trend of a daily cost series sorted by date.

    The recent window is the last min(7, N) days; the older window is up to
    the same number of days immediately before it. A change above +10% is
    "up", below -10% is "down", anything else "stable".

    Example:
        >>> costs = [DailyCost(f"2024-01-0{i}", 10.0) for i in range(1, 8)]
        >>> costs += [DailyCost("2024-01-08", 20.0), DailyCost("2024-01-09", 20.0)]
        >>> get_cost_trend(costs).direction
        <TrendDirection.UP: 'up'>
    """
    count = len(daily_costs)
    if count < 2:
        return CostTrend(TrendDirection.INSUFFICIENT_DATA)

    recent_days = min(TREND_WINDOW_DAYS, count)
    values = [day.cost for day in daily_costs]

    recent_average = _mean(values[count - recent_days :])
    older = values[max(0, count - 2 * recent_days) : count - recent_days]

    if not older:
        return CostTrend(TrendDirection.STABLE, recent_average=recent_average)

    older_average = _mean(older)

    if older_average == 0:
        direction = TrendDirection.UP if recent_average > 0 else TrendDirection.STABLE
        return CostTrend(
            direction,
            change_percent=None,
            recent_average=recent_average,
            older_average=older_average,
        )

    change = (recent_average - older_average) / older_average * 100

    if change > TREND_THRESHOLD_PERCENT:
        direction = TrendDirection.UP
    elif change < -TREND_THRESHOLD_PERCENT:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.STABLE

    return CostTrend(
        direction,
        change_percent=change,
        recent_average=recent_average,
        older_average=older_average,
    )


def sum_resource_group_costs(response: dict[str, Any]) -> tuple[float, list[Any]]:
    """Sum the cost column of a resource-group filtered query.

    The cost column is located by alias; without a match the first column is
    used.

    Returns:
        (total cost, raw rows)
    """
    properties = response.get("properties") if isinstance(response, dict) else None
    if not isinstance(properties, dict) or not isinstance(properties.get("rows"), list):
        return 0.0, []

    index = locate_columns(properties.get("columns") or []).cost
    if index is None:
        index = 0

    rows = [row for row in properties["rows"] if isinstance(row, list)]
    return sum(_to_float(_cell(row, index)) for row in rows), rows


__all__ = [
    "EMAIL_TLD_CURRENCIES",
    "TREND_THRESHOLD_PERCENT",
    "TREND_WINDOW_DAYS",
    "UNKNOWN_SERVICE",
    "ColumnAliases",
    "ColumnIndices",
    "aggregate",
    "currency_from_account_info",
    "currency_from_email",
    "get_cost_trend",
    "has_response_currency",
    "locate_columns",
    "normalize_usage_date",
    "resolve_response_currency",
    "sum_resource_group_costs",
]
