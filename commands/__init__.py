"""Command catalogue.

One builder per command family; each takes the shared CommandContext
and returns Command records. The shell assembles them into per-mode
tables.
"""

from commands.async_tools import build_async_commands
from commands.base import Command, CommandArgument, CommandContext, CommandExample, CommandManual
from commands.filesystem import build_filesystem_commands
from commands.ftp import build_ftp_commands
from commands.nc import build_nc_commands
from commands.network import build_network_commands
from commands.session import build_session_commands
from commands.tiers import COMMAND_TIERS, apply_command_restrictions, get_accessible_command_names


def build_command_table(ctx: CommandContext) -> dict[str, Command]:
    """Every command of the normal shell, keyed by name."""
    commands = [
        *build_filesystem_commands(ctx),
        *build_network_commands(ctx),
        *build_async_commands(ctx),
        *build_session_commands(ctx),
    ]
    return {command.name: command for command in commands}


def build_ftp_table(ctx: CommandContext) -> dict[str, Command]:
    return {command.name: command for command in build_ftp_commands(ctx)}


def build_nc_table(ctx: CommandContext) -> dict[str, Command]:
    return {command.name: command for command in build_nc_commands(ctx)}


__all__ = [
    "COMMAND_TIERS",
    "Command",
    "CommandArgument",
    "CommandContext",
    "CommandExample",
    "CommandManual",
    "apply_command_restrictions",
    "build_command_table",
    "build_ftp_table",
    "build_nc_table",
    "get_accessible_command_names",
]
