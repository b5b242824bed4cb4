"""Resource listing command for nimure CLI."""

import asyncio
import sys

import click
from rich.console import Console
from rich.table import Table

from nimure.azure_ad import AD_CATEGORIES
from nimure.commands.cli_helpers import build_session
from nimure.models import Resource
from nimure.refresh import summary_message
from nimure.resource_normalizer import short_type

console = Console()


def _resource_table(title: str, resources: list[Resource]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Resource Group")
    table.add_column("Location")

    for resource in resources:
        table.add_row(
            resource.name,
            short_type(resource.type),
            resource.resource_group,
            resource.location,
        )
    return table


def register_resources_command(main: click.Group) -> None:
    """Register resources command with main CLI group.

    Args:
        main: The main CLI group to register commands with
    """

    @main.command(name="resources")
    @click.option("--no-ad", is_flag=True, help="Skip Azure AD objects")
    @click.pass_context
    def resources(ctx: click.Context, no_ad: bool):
        """Refresh and list Azure resources and Azure AD objects.

        \b
        Examples:
            nimure resources
            nimure resources --no-ad
        """
        session = build_session(ctx)
        if no_ad:
            session.coordinator.ad_enabled = False

        report = asyncio.run(session.refresh())
        if report is None:
            click.echo("Error: A refresh is already in progress", err=True)
            sys.exit(1)

        if session.resources:
            console.print(_resource_table("Azure Resources", session.resources))

        for category in AD_CATEGORIES:
            objects = session.coordinator.ad_objects[category]
            if objects:
                title = category.replace("_", " ").title()
                console.print(_resource_table(title, objects))

        for warning in report.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")

        if report.error:
            click.echo(f"Error: {report.error}", err=True)
            sys.exit(1)

        console.print(summary_message(report))


__all__ = ["register_resources_command"]
