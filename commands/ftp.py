"""FTP-mode command table.

Remote commands act on the FTP server as the logged-in remote account;
``l``-prefixed commands act on the origin machine as the identity that
opened the connection. Paths are resolved against the matching cwd.
"""

from typing import Any, Optional

from commands.base import Command, CommandContext, manual
from commands.filesystem import format_listing, split_flags
from models.exceptions import CommandValidationError, NotFoundError, PermissionDeniedError, ShellError
from models.paths import basename, join_path, resolve_path
from models.permissions import node_allows_read
from models.privilege import PrivilegeTier
from models.results import FtpQuit
from models.session import FtpSession

EMPTY_DIRECTORY = "(empty directory)"


def _session(ctx: CommandContext) -> FtpSession:
    if ctx.sessions.ftp_session is None:
        raise ShellError("ftp: not connected")
    return ctx.sessions.ftp_session


def _change_directory(ctx, command, machine, cwd, tier, path) -> str:
    shown = path if isinstance(path, str) else cwd
    target = resolve_path(shown, cwd)
    node = ctx.store.get_node(machine, target)
    if node is None:
        raise NotFoundError(f"{command}: {shown}: No such file or directory")
    if not node.is_directory:
        raise CommandValidationError(f"{command}: {shown}: Not a directory")
    if not node_allows_read(node, tier):
        raise PermissionDeniedError(f"{command}: {shown}: Permission denied")
    return target


def _list(ctx, command, machine, cwd, tier, args) -> str:
    path, flags = split_flags(args)
    shown = path or cwd
    target = resolve_path(shown, cwd)
    node = ctx.store.get_node(machine, target)
    if node is None:
        raise NotFoundError(f"{command}: {shown}: No such file or directory")
    if not node_allows_read(node, tier):
        raise PermissionDeniedError(f"{command}: {shown}: Permission denied")
    if node.is_file:
        return node.name
    return format_listing(node, show_hidden="-a" in flags, empty=EMPTY_DIRECTORY)


def _transfer(
    ctx: CommandContext,
    command: str,
    source: tuple[str, str, PrivilegeTier],
    destination: tuple[str, str, PrivilegeTier],
    path: str,
    destination_path: Optional[str],
    side: str,
) -> tuple[str, str, int]:
    """Copy a file between machines.

    ``source`` and ``destination`` are (machine, cwd, tier) triples.

    Returns:
        (file name, absolute destination path, byte count).
    """
    source_machine, source_cwd, source_tier = source
    target_machine, target_cwd, target_tier = destination

    source_path = resolve_path(path, source_cwd)
    node = ctx.store.get_node(source_machine, source_path)
    if node is None:
        raise NotFoundError(f"{command}: {path}: No such file or directory")
    if not node.is_file:
        raise CommandValidationError(f"{command}: {path}: Is a directory")
    content = ctx.store.read_file(source_machine, source_path, source_tier)
    if content is None:
        raise PermissionDeniedError(f"{command}: {path}: Permission denied")

    name = basename(source_path) or path
    shown = destination_path if isinstance(destination_path, str) else join_path(target_cwd, name)
    target_path = resolve_path(shown, target_cwd)
    existing = ctx.store.get_node(target_machine, target_path)
    if existing is not None:
        if not existing.is_file:
            raise CommandValidationError(f"{command}: {side} path {shown}: Is a directory")
        result = ctx.store.write_file(target_machine, target_path, content, target_tier)
    else:
        result = ctx.store.create_file(target_machine, target_path, content, target_tier)
    if not result.allowed:
        raise PermissionDeniedError(f"{command}: {side} path {shown}: {result.error}")
    return name, target_path, len(content)


def build_ftp_commands(ctx: CommandContext) -> list[Command]:
    def remote(session: FtpSession) -> tuple[str, str, PrivilegeTier]:
        return session.remote_machine, session.remote_cwd, session.remote_tier

    def origin(session: FtpSession) -> tuple[str, str, PrivilegeTier]:
        return session.origin_machine, session.origin_cwd, session.origin_tier

    def cd(path: Any = None) -> str:
        target = _change_directory(ctx, "cd", *remote(_session(ctx)), path)
        ctx.sessions.set_ftp_remote_cwd(target)
        return f"Remote directory changed to {target}"

    def lcd(path: Any = None) -> str:
        target = _change_directory(ctx, "lcd", *origin(_session(ctx)), path)
        ctx.sessions.set_ftp_origin_cwd(target)
        return f"Local directory changed to {target}"

    def ls(*args) -> str:
        return _list(ctx, "ls", *remote(_session(ctx)), args)

    def lls(*args) -> str:
        return _list(ctx, "lls", *origin(_session(ctx)), args)

    def get(remote_file: Any = None, local_path: Any = None) -> str:
        if not remote_file or not isinstance(remote_file, str):
            raise CommandValidationError(
                'get: missing remote file argument\nUsage: get("remoteFile", ["localPath"])'
            )
        session = _session(ctx)
        name, target, size = _transfer(
            ctx, "get", remote(session), origin(session), remote_file, local_path, "local"
        )
        return f"Downloaded {name} ({size} bytes) to {target}"

    def put(local_file: Any = None, remote_path: Any = None) -> str:
        if not local_file or not isinstance(local_file, str):
            raise CommandValidationError(
                'put: missing local file argument\nUsage: put("localFile", ["remotePath"])'
            )
        session = _session(ctx)
        name, target, size = _transfer(
            ctx, "put", origin(session), remote(session), local_file, remote_path, "remote"
        )
        return f"Uploaded {name} ({size} bytes) to {target}"

    return [
        Command(
            name="cd",
            description="Change remote directory",
            manual=manual(
                "cd([path])",
                "Change the working directory on the remote FTP server.",
                arguments=(("path", "Directory to change to", False),),
                examples=(('cd("/srv/ftp")', "Change to /srv/ftp on remote"),),
            ),
            fn=cd,
        ),
        Command(
            name="ls",
            description="List remote directory contents",
            manual=manual(
                'ls([path], ["-a"])',
                "List a directory on the remote FTP server. Defaults to the current "
                'remote directory; "-a" includes hidden entries.',
                arguments=(("path", "Directory to list", False),),
                examples=(("ls()", "List current remote directory"),),
            ),
            fn=ls,
        ),
        Command(
            name="pwd",
            description="Print remote working directory",
            fn=lambda: _session(ctx).remote_cwd,
        ),
        Command(
            name="lpwd",
            description="Print local working directory",
            fn=lambda: _session(ctx).origin_cwd,
        ),
        Command(
            name="lcd",
            description="Change local directory",
            manual=manual(
                "lcd([path])",
                "Change the working directory on the machine the connection was opened from.",
                arguments=(("path", "Directory to change to", False),),
                examples=(('lcd("/tmp")', "Change to /tmp on the local machine"),),
            ),
            fn=lcd,
        ),
        Command(
            name="lls",
            description="List local directory contents",
            manual=manual(
                'lls([path], ["-a"])',
                "List a directory on the machine the connection was opened from.",
                arguments=(("path", "Directory to list", False),),
                examples=(("lls()", "List current local directory"),),
            ),
            fn=lls,
        ),
        Command(
            name="get",
            description="Download file from remote server",
            manual=manual(
                "get(remoteFile, [localPath])",
                "Download a file from the remote server. Without localPath the file is "
                "saved in the current local directory under the same name.",
                arguments=(
                    ("remoteFile", "Path to the file on the remote server", True),
                    ("localPath", "Destination path on the local machine", False),
                ),
                examples=(('get("secret.txt")', "Download secret.txt"),),
            ),
            fn=get,
        ),
        Command(
            name="put",
            description="Upload file to remote server",
            manual=manual(
                "put(localFile, [remotePath])",
                "Upload a local file to the remote server. Without remotePath the file is "
                "saved in the current remote directory under the same name.",
                arguments=(
                    ("localFile", "Path to the file on the local machine", True),
                    ("remotePath", "Destination path on the remote server", False),
                ),
                examples=(('put("/tmp/data.txt")', "Upload data.txt"),),
            ),
            fn=put,
        ),
        Command(name="quit", description="Close FTP connection", fn=lambda: FtpQuit()),
        Command(name="bye", description="Close FTP connection", fn=lambda: FtpQuit()),
    ]
