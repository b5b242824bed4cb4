"""Cost commands for nimure CLI.

This module provides the costs, resource-costs and trend commands.
"""

import asyncio
import sys

import click
from rich.console import Console

from nimure.commands.cli_helpers import build_session
from nimure.costs.charts import (
    format_cost_summary,
    format_resource_costs,
    render_daily_chart,
    render_service_chart,
    trend_line,
)

console = Console()


def _echo_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


def register_cost_commands(main: click.Group) -> None:
    """Register cost commands with main CLI group.

    Args:
        main: The main CLI group to register commands with
    """

    @main.command(name="costs")
    @click.option("--from", "from_date", help="Start date (YYYY-MM-DD)", type=str)
    @click.option("--to", "to_date", help="End date (YYYY-MM-DD)", type=str)
    @click.option("--chart/--no-chart", default=True, help="Show daily and service charts")
    @click.pass_context
    def costs(ctx: click.Context, from_date: str | None, to_date: str | None, chart: bool):
        """Show the subscription cost summary.

        Defaults to the trailing 30 days ending today.

        \b
        Examples:
            nimure costs
            nimure costs --from 2024-01-01 --to 2024-01-31
            nimure costs --no-chart
        """
        session = build_session(ctx)
        result = asyncio.run(session.get_subscription_costs(from_date, to_date))

        if not result.ok:
            click.echo(f"Error: {result.error}", err=True)
            sys.exit(1)

        summary = result.data
        _echo_lines(format_cost_summary(summary))

        settings = session.config.costs
        if chart and settings.show_daily_chart:
            click.echo("")
            _echo_lines(render_daily_chart(summary.daily_costs))

        if chart and settings.show_service_breakdown:
            click.echo("")
            _echo_lines(render_service_chart(summary.services))

    @main.command(name="resource-costs")
    @click.argument("resource_id")
    @click.option("--from", "from_date", help="Start date (YYYY-MM-DD)", type=str)
    @click.option("--to", "to_date", help="End date (YYYY-MM-DD)", type=str)
    @click.pass_context
    def resource_costs(
        ctx: click.Context, resource_id: str, from_date: str | None, to_date: str | None
    ):
        """Show cost information for one resource.

        Costs are approximated by the resource's resource group.

        \b
        Examples:
            nimure resource-costs /subscriptions/.../resourceGroups/rg/providers/Microsoft.Web/sites/app
        """
        session = build_session(ctx)
        resource = session.find_resource(resource_id)
        result = asyncio.run(session.get_resource_costs(resource, from_date, to_date))

        if not result.ok:
            click.echo(f"Error: {result.error}", err=True)
            sys.exit(1)

        _echo_lines(format_resource_costs(result.data))

    @main.command(name="trend")
    @click.option("--from", "from_date", help="Start date (YYYY-MM-DD)", type=str)
    @click.option("--to", "to_date", help="End date (YYYY-MM-DD)", type=str)
    @click.pass_context
    def trend(ctx: click.Context, from_date: str | None, to_date: str | None):
        """Show whether daily costs are trending up or down.

        Compares the mean of the last 7 days with the 7 days before them.

        \b
        Examples:
            nimure trend
            nimure trend --from 2024-01-01 --to 2024-01-31
        """
        session = build_session(ctx)
        result = asyncio.run(session.get_cost_trend(from_date, to_date))

        if not result.ok:
            click.echo(f"Error: {result.error}", err=True)
            sys.exit(1)

        cost_trend = result.data
        click.echo(trend_line(cost_trend))
        if cost_trend.recent_average is not None:
            console.print(f"Recent daily average: {cost_trend.recent_average:.2f}")
        if cost_trend.older_average is not None:
            console.print(f"Previous daily average: {cost_trend.older_average:.2f}")


__all__ = ["register_cost_commands"]
