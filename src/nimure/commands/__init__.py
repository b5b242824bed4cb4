"""CLI command registration for nimure."""

from nimure.commands.costs import register_cost_commands
from nimure.commands.resources import register_resources_command

__all__ = ["register_cost_commands", "register_resources_command"]
