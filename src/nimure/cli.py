"""nimure CLI - Azure resource explorer and cost analysis.

Commands:
    nimure resources            Refresh and list resources and directory objects
    nimure costs                Subscription cost summary and charts
    nimure resource-costs ID    Cost information for one resource
    nimure trend                Daily cost trend
    nimure config show|init     Inspect or create the configuration file
"""

import logging
import sys

import click
from rich.console import Console

from nimure import __version__
from nimure.commands import register_cost_commands, register_resources_command
from nimure.commands.cli_helpers import load_config
from nimure.config_manager import ConfigManager, NimureConfig
from nimure.errors import ConfigError

logger = logging.getLogger(__name__)
console = Console()


@click.group(context_settings={"help_option_names": ["--help", "-h"]})
@click.option("--config", "config_path", help="Config file path", type=click.Path())
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, debug: bool) -> None:
    """nimure - Azure resource explorer and cost analysis.

    Lists Azure resources and Azure AD objects through the Azure CLI and
    summarizes Cost Management data. Requires `az login`.

    \b
    Examples:
        nimure resources
        nimure costs --from 2024-01-01 --to 2024-01-31
        nimure trend
        nimure config init

    \b
    CONFIGURATION:
        Config file: ~/.nimure/config.toml
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@main.group(name="config")
def config_group() -> None:
    """Inspect or create the configuration file."""
    pass


@config_group.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration."""
    config_path = ctx.obj.get("config_path")
    config = load_config(config_path)

    path = ConfigManager.get_config_path(config_path)
    console.print(f"[bold cyan]Config file:[/bold cyan] {path}")
    if not path.exists():
        console.print("[yellow]File not found, showing defaults[/yellow]")

    for section, values in config.to_dict().items():
        if isinstance(values, dict):
            console.print(f"\n[bold]\\[{section}][/bold]")
            for key, value in values.items():
                console.print(f"  {key} = {value!r}")
        else:
            console.print(f"\n[bold]{section}[/bold] = {values!r}")


@config_group.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a configuration file with default values."""
    config_path = ctx.obj.get("config_path")

    try:
        path = ConfigManager.get_config_path(config_path)
        if path.exists() and not force:
            click.echo(f"Config already exists: {path} (use --force to overwrite)", err=True)
            sys.exit(1)
        saved = ConfigManager.save_config(NimureConfig(), config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote default configuration to {saved}")


register_resources_command(main)
register_cost_commands(main)


if __name__ == "__main__":
    main()
