"""Cost Management query construction.

Builds the JSON body POSTed to the Cost Management query endpoint through
`az rest`, and the default date range used when none is given.
"""

import json
from datetime import date, timedelta
from typing import Any

COST_MANAGEMENT_API_VERSION = "2021-10-01"
COST_MANAGEMENT_URL = (
    "https://management.azure.com/subscriptions/{subscription_id}"
    "/providers/Microsoft.CostManagement/query?api-version={api_version}"
)


def cost_query_url(subscription_id: str) -> str:
    """Cost Management query URL for a subscription."""
    return COST_MANAGEMENT_URL.format(
        subscription_id=subscription_id, api_version=COST_MANAGEMENT_API_VERSION
    )


def build_cost_query(
    start_date: str,
    end_date: str,
    group_by_service: bool = True,
    resource_groups: list[str] | None = None,
) -> dict[str, Any]:
    """Build an ActualCost daily query body.

    Args:
        start_date: First day (YYYY-MM-DD), from midnight UTC
        end_date: Last day (YYYY-MM-DD), until 23:59:59 UTC
        group_by_service: Group rows by ServiceName
        resource_groups: Restrict to these resource groups

    Returns:
        Query body ready for json.dumps
    """
    dataset: dict[str, Any] = {
        "granularity": "Daily",
        "aggregation": {"totalCost": {"name": "PreTaxCost", "function": "Sum"}},
    }

    if group_by_service:
        dataset["grouping"] = [{"type": "Dimension", "name": "ServiceName"}]

    if resource_groups:
        dataset["filter"] = {
            "dimensions": {
                "name": "ResourceGroupName",
                "operator": "In",
                "values": list(resource_groups),
            }
        }

    return {
        "type": "ActualCost",
        "timeframe": "Custom",
        "timePeriod": {
            "from": f"{start_date}T00:00:00+00:00",
            "to": f"{end_date}T23:59:59+00:00",
        },
        "dataset": dataset,
    }


def az_rest_args(subscription_id: str, body: dict[str, Any]) -> list[str]:
    """Arguments for `az rest` POSTing a query body."""
    return [
        "rest",
        "--method",
        "POST",
        "--url",
        cost_query_url(subscription_id),
        "--body",
        json.dumps(body),
        "--headers",
        "Content-Type=application/json",
    ]


def default_date_range(days: int = 30, today: date | None = None) -> tuple[str, str]:
    """Trailing window of `days` days ending today, as YYYY-MM-DD strings."""
    end = today or date.today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def resolve_date_range(
    start_date: str | None,
    end_date: str | None,
    days: int = 30,
    today: date | None = None,
) -> tuple[str, str]:
    """Fill in missing range ends from the default trailing window.

    Raises:
        ValueError: A given date is not YYYY-MM-DD, or start is after end
    """
    default_start, default_end = default_date_range(days, today)
    start = start_date or default_start
    end = end_date or default_end

    if date.fromisoformat(start) > date.fromisoformat(end):
        raise ValueError(f"Start date {start} is after end date {end}")

    return start, end


__all__ = [
    "COST_MANAGEMENT_API_VERSION",
    "az_rest_args",
    "build_cost_query",
    "cost_query_url",
    "default_date_range",
    "resolve_date_range",
]
