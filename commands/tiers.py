"""Privilege tiering of commands.

Every command has a minimum tier. A command without an entry is
unrestricted (guest). Filtering and the call-time check rely on the
same table, so help() never lists a command the caller cannot run.
"""

from typing import Iterable

from commands.base import Command
from models.exceptions import PermissionDeniedError
from models.privilege import PrivilegeTier, has_privilege

COMMAND_TIERS: dict[str, PrivilegeTier] = {
    "ifconfig": PrivilegeTier.USER,
    "ping": PrivilegeTier.USER,
    "nmap": PrivilegeTier.USER,
    "nslookup": PrivilegeTier.USER,
    "ssh": PrivilegeTier.USER,
    "ftp": PrivilegeTier.USER,
    "nc": PrivilegeTier.USER,
    "curl": PrivilegeTier.USER,
    "strings": PrivilegeTier.USER,
    "output": PrivilegeTier.USER,
    "resolve": PrivilegeTier.USER,
    "exit": PrivilegeTier.USER,
    "node": PrivilegeTier.USER,
    "decrypt": PrivilegeTier.ROOT,
}


def required_tier(name: str) -> PrivilegeTier:
    return COMMAND_TIERS.get(name, PrivilegeTier.GUEST)


def can_run(name: str, tier: PrivilegeTier) -> bool:
    return has_privilege(tier, required_tier(name))


def get_accessible_command_names(names: Iterable[str], tier: PrivilegeTier) -> list[str]:
    """Names from ``names`` a caller of ``tier`` may run, in input order."""
    return [name for name in names if can_run(name, tier)]


def restricted(command: Command) -> Command:
    """Replace a command's implementation with a tier-denial error.

    The replacement keeps name, description and manual so the name still
    resolves and man() still works; only calling it fails.
    """
    tier = required_tier(command.name)

    def deny(*args):
        raise PermissionDeniedError(
            f"permission denied: '{command.name}' requires {tier.value} privileges"
        )

    return command.model_copy(update={"fn": deny})


def apply_command_restrictions(
    commands: dict[str, Command], tier: PrivilegeTier
) -> dict[str, Command]:
    """Return a table where commands above ``tier`` raise on call.

    Args:
        commands: Full command table.
        tier: Tier of the acting identity.

    Returns:
        New table; runnable commands are passed through unchanged.
    """
    return {
        name: command if can_run(name, tier) else restricted(command)
        for name, command in commands.items()
    }
