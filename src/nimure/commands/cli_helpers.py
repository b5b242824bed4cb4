"""Shared helpers for nimure CLI commands."""

import logging
import sys

import click

from nimure.config_manager import ConfigManager, NimureConfig
from nimure.errors import ConfigError
from nimure.session import NimureSession


def load_config(config_path: str | None) -> NimureConfig:
    """Load configuration and apply environment overrides, exiting on error."""
    try:
        return ConfigManager.load_config(config_path).apply_environment()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def build_session(ctx: click.Context) -> NimureSession:
    """Create the session for a command from the group's options.

    An executor stored under ctx.obj["executor"] replaces the Azure CLI
    subprocess executor.
    """
    obj = ctx.obj or {}
    config = load_config(obj.get("config_path"))

    if config.debug or obj.get("debug"):
        logging.getLogger().setLevel(logging.DEBUG)

    return NimureSession(config, executor=obj.get("executor"))


__all__ = ["build_session", "load_config"]
