"""Filesystem commands of the normal shell: ls, cd, cat, pwd, whoami, echo, strings, node."""

import logging
from typing import Any, Optional

from commands.base import Command, CommandContext, manual
from models.exceptions import CommandValidationError, NotFoundError, PermissionDeniedError
from models.nodes import FileNode
from models.permissions import node_allows_read
from models.privilege import home_path_for
from utils.stringify import stringify

logger = logging.getLogger(__name__)

SHOW_HIDDEN_FLAG = "-a"
MIN_STRING_LENGTH = 4


def split_flags(args: tuple) -> tuple[Optional[str], set[str]]:
    """Separate a path argument from ``-x`` style flags."""
    path = None
    flags = set()
    for arg in args:
        if isinstance(arg, str) and arg.startswith("-"):
            flags.add(arg)
        elif path is None and isinstance(arg, str):
            path = arg
    return path, flags


def format_listing(node: FileNode, show_hidden: bool = False, empty: str = "") -> str:
    """Render a directory's children, directories suffixed with ``/``."""
    entries = [
        f"{child.name}/" if child.is_directory else child.name
        for name, child in sorted(node.children.items())
        if show_hidden or not name.startswith(".")
    ]
    if not entries:
        return empty
    return "  ".join(entries)


def readable_file(ctx: CommandContext, command: str, path: Any) -> tuple[str, FileNode]:
    """Resolve ``path`` to a file the current tier may read.

    Returns:
        Absolute path and node.

    Raises:
        CommandValidationError: If ``path`` is missing.
        NotFoundError: If nothing exists at the path.
        PermissionDeniedError: If the node is a directory or unreadable.
    """
    if not path or not isinstance(path, str):
        raise CommandValidationError(f"{command}: missing file operand")
    target = ctx.resolve(path)
    node = ctx.store.get_node(ctx.machine, target)
    if node is None:
        raise NotFoundError(f"{command}: {path}: No such file or directory")
    if node.is_directory:
        raise CommandValidationError(f"{command}: {path}: Is a directory")
    if not node_allows_read(node, ctx.tier):
        raise PermissionDeniedError(f"{command}: {path}: Permission denied")
    return target, node


def extract_strings(content: str, min_length: int = MIN_STRING_LENGTH) -> list[str]:
    """Printable runs (ASCII 32-126, tab, newline) of at least ``min_length``."""
    results = []
    current = []

    def flush():
        if len(current) >= min_length:
            text = "".join(current).strip()
            if text:
                results.append(text)

    for char in content:
        code = ord(char)
        if 32 <= code <= 126 or char in "\n\t":
            current.append(char)
        else:
            flush()
            current = []
    flush()
    return results


def build_filesystem_commands(ctx: CommandContext) -> list[Command]:
    def ls(*args):
        path, flags = split_flags(args)
        target = ctx.resolve(path) if path else ctx.cwd
        node = ctx.store.get_node(ctx.machine, target)
        if node is None:
            raise NotFoundError(f"ls: cannot access '{target}': No such file or directory")
        if node.is_file:
            return node.name
        if not node_allows_read(node, ctx.tier):
            raise PermissionDeniedError(f"ls: cannot open directory '{target}': Permission denied")
        return format_listing(node, show_hidden=SHOW_HIDDEN_FLAG in flags)

    def cd(path=None):
        if path:
            target = ctx.resolve(path)
        else:
            target = home_path_for(ctx.session.username, ctx.tier)
        node = ctx.store.get_node(ctx.machine, target)
        if node is None:
            raise NotFoundError(f"cd: {path}: No such file or directory")
        if not node.is_directory:
            raise CommandValidationError(f"cd: {path}: Not a directory")
        if not node_allows_read(node, ctx.tier):
            raise PermissionDeniedError(f"cd: {path}: Permission denied")
        ctx.sessions.set_cwd(target)
        return None

    def cat(path=None):
        _, node = readable_file(ctx, "cat", path)
        return node.content or ""

    def strings(path=None, min_length=MIN_STRING_LENGTH):
        if not path:
            raise CommandValidationError("strings: missing file operand")
        if not isinstance(min_length, int) or not 1 <= min_length <= 100:
            raise CommandValidationError("strings: minimum length must be between 1 and 100")
        _, node = readable_file(ctx, "strings", path)
        if not node.content:
            return ""
        return "\n".join(extract_strings(node.content, min_length))

    def node(path=None):
        target, file_node = readable_file(ctx, "node", path)
        if not file_node.content:
            return None
        if ctx.script_runner is None:
            raise CommandValidationError("node: script runner unavailable")
        logger.debug(f"Running script {target} on {ctx.machine}")
        return ctx.script_runner(file_node.content)

    def echo(*args):
        if not args:
            return "undefined"
        return stringify(args[0])

    return [
        Command(
            name="ls",
            description="List directory contents",
            manual=manual(
                'ls([path], ["-a"])',
                "List the entries of a directory, or the name of a file. Directories are "
                "shown with a trailing slash. Hidden entries (names starting with a dot) "
                'are only listed with the "-a" flag.',
                arguments=(
                    ("path", "Directory to list (defaults to the current directory)", False),
                    ("-a", "Include hidden entries", False),
                ),
                examples=(
                    ("ls()", "List the current directory"),
                    ('ls(".", "-a")', "Include hidden files"),
                    ('ls("/etc")', "List /etc"),
                ),
            ),
            fn=ls,
        ),
        Command(
            name="cd",
            description="Change current directory",
            manual=manual(
                "cd([path])",
                "Change the working directory. Without a path, returns to the home directory.",
                arguments=(("path", "Directory to enter", False),),
                examples=(('cd("/var/log")', "Enter /var/log"), ('cd("..")', "Go up one level")),
            ),
            fn=cd,
        ),
        Command(
            name="cat",
            description="Display file contents",
            manual=manual(
                "cat(file)",
                "Print the contents of a file.",
                arguments=(("file", "Path of the file to read", True),),
                examples=(('cat("README.txt")', "Show README.txt"),),
            ),
            fn=cat,
        ),
        Command(name="pwd", description="Print current working directory", fn=lambda: ctx.cwd),
        Command(
            name="whoami",
            description="Print current user name",
            manual=manual(
                "whoami()",
                "Print the user name of the current session. Useful after su() or ssh().",
                examples=(("whoami()", "Display the current user name"),),
            ),
            fn=lambda: ctx.session.username,
        ),
        Command(name="echo", description="Output the given value as a string", fn=echo),
        Command(
            name="strings",
            description="Extract printable strings from a file",
            manual=manual(
                "strings(file, [minLength])",
                "Print the sequences of printable characters in a file. Useful for "
                "extracting readable text from binary files. By default, prints strings "
                "of 4 or more characters.",
                arguments=(
                    ("file", "Path to the file to scan", True),
                    ("minLength", "Minimum string length to extract (default: 4)", False),
                ),
                examples=(
                    ('strings("/opt/tools/scanner")', "Extract strings from a binary"),
                    ('strings("program.exe", 8)', "Extract strings of 8+ characters"),
                ),
            ),
            fn=strings,
        ),
        Command(
            name="node",
            description="Execute a script file",
            manual=manual(
                "node(file)",
                "Run a script of terminal expressions, one per line, in a fresh variable "
                "scope. Lines starting with // or # are comments. Returns the value of the "
                "last line.",
                arguments=(("file", "Path of the script to run", True),),
                examples=(('node("decoder.js")', "Run decoder.js"),),
            ),
            fn=node,
        ),
    ]
