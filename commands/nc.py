"""Command menu of an interactive nc session.

Commands run on the target machine as the account owning the service.
"""

from typing import Any

from commands.base import Command, CommandContext
from commands.filesystem import format_listing, split_flags
from models.exceptions import CommandValidationError, NotFoundError, PermissionDeniedError, ShellError
from models.paths import resolve_path
from models.permissions import node_allows_read
from models.results import NcQuit
from models.session import NcSession

NC_HELP = "\n".join(
    [
        "Available commands:",
        "  help    - Show this help message",
        "  whoami  - Show current user",
        "  pwd     - Print working directory",
        "  cd      - Change directory",
        "  ls      - List files in current directory",
        "  cat     - Read file contents",
        "  exit    - Close connection",
    ]
)


def _session(ctx: CommandContext) -> NcSession:
    if ctx.sessions.nc_session is None:
        raise ShellError("nc: not connected")
    return ctx.sessions.nc_session


def build_nc_commands(ctx: CommandContext) -> list[Command]:
    def node_at(session: NcSession, path: str):
        return ctx.store.get_node(session.target_machine, resolve_path(path, session.cwd))

    def cd(path: Any = None) -> str:
        session = _session(ctx)
        path = path if isinstance(path, str) and path else "/"
        node = node_at(session, path)
        if node is None:
            raise NotFoundError(f"cd: {path}: No such file or directory")
        if not node.is_directory:
            raise CommandValidationError(f"cd: {path}: Not a directory")
        if not node_allows_read(node, session.tier):
            raise PermissionDeniedError(f"cd: {path}: Permission denied")
        ctx.sessions.set_nc_cwd(resolve_path(path, session.cwd))
        return ""

    def ls(*args) -> str:
        session = _session(ctx)
        path, flags = split_flags(args)
        path = path or session.cwd
        node = node_at(session, path)
        if node is None:
            raise NotFoundError(f"ls: {path}: No such file or directory")
        if node.is_file:
            return node.name
        if not node_allows_read(node, session.tier):
            raise PermissionDeniedError(f"ls: {path}: Permission denied")
        return format_listing(node, show_hidden="-a" in flags)

    def cat(path: Any = None) -> str:
        session = _session(ctx)
        if not path or not isinstance(path, str):
            raise CommandValidationError("cat: missing filename")
        node = node_at(session, path)
        if node is None:
            raise NotFoundError(f"cat: {path}: No such file")
        if node.is_directory:
            raise CommandValidationError(f"cat: {path}: Is a directory")
        if not node_allows_read(node, session.tier):
            raise PermissionDeniedError(f"cat: {path}: Permission denied")
        return node.content or ""

    return [
        Command(name="pwd", description="Print working directory", fn=lambda: _session(ctx).cwd),
        Command(name="cd", description="Change directory", fn=cd),
        Command(name="ls", description="List files in current directory", fn=ls),
        Command(name="cat", description="Read file contents", fn=cat),
        Command(name="whoami", description="Show current user", fn=lambda: _session(ctx).username),
        Command(name="help", description="Show available backdoor commands", fn=lambda: NC_HELP),
        Command(name="exit", description="Close backdoor connection", fn=lambda: NcQuit()),
    ]
