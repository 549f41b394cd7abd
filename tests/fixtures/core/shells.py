"""Fixtures for the Shell and the command context.

Helpers here drive the shell the way a terminal would: submit a line,
let simulated time run, answer credential prompts.
"""

import pytest

from commands import CommandContext
from models.machines import build_network
from models.scheduler import Scheduler
from models.session import SessionStateMachine
from models.shell import LineKind, OutputLine, Shell, default_session
from models.storage import InMemoryStorage, StorageBackend
from tests.fixtures.core.filesystems import create_world_store

LOCAL_ROOT_PASSWORD = "sup3rus3r"
GATEWAY_GUEST_PASSWORD = "guest2024"
GATEWAY_ADMIN_PASSWORD = "n3tgu4rd!"
FTP_USER_PASSWORD = "tr4nsf3r"


def create_shell(
    storage: StorageBackend | None = None,
    username: str = "jshacker",
    machine: str = "localhost",
    max_password_attempts: int = 1,
    initialize: bool = True,
) -> Shell:
    """Create a Shell over the built-in world.

    Args:
        storage: Persistence backend (defaults to a fresh InMemoryStorage).
        username: Initial user.
        machine: Initial machine.
        max_password_attempts: Tries per credential prompt.
        initialize: Whether to run initialize() before returning.

    Returns:
        Shell ready for input (unless initialize=False).
    """
    shell = Shell.create(
        storage=storage if storage is not None else InMemoryStorage(),
        username=username,
        machine=machine,
        max_password_attempts=max_password_attempts,
    )
    if initialize:
        shell.initialize()
    return shell


def create_context(username: str = "jshacker", machine: str = "localhost") -> CommandContext:
    """Create a CommandContext over the built-in world without a shell."""
    return CommandContext(
        store=create_world_store(),
        sessions=SessionStateMachine(default_session(username, machine)),
        network=build_network(),
        scheduler=Scheduler(),
    )


def texts(lines: list[OutputLine]) -> list[str]:
    """Text of every non-echo line."""
    return [line.text for line in lines if line.kind != LineKind.INPUT]


def errors(lines: list[OutputLine]) -> list[str]:
    return [line.text for line in lines if line.kind == LineKind.ERROR]


def run(shell: Shell, line: str) -> list[str]:
    """Submit a line, run the clock until idle and return all output text."""
    lines = shell.submit(line)
    lines += shell.run_until_idle()
    return texts(lines)


def su(shell: Shell, username: str, password: str) -> list[str]:
    run(shell, f'su("{username}")')
    return texts(shell.submit(password))


def ssh(shell: Shell, username: str, host: str, password: str) -> list[str]:
    run(shell, f'ssh("{username}", "{host}")')
    return texts(shell.submit(password))


def ftp_login(shell: Shell, host: str, username: str, password: str) -> list[str]:
    run(shell, f'ftp("{host}")')
    shell.submit(username)
    return texts(shell.submit(password))


@pytest.fixture
def shell():
    """Provide an initialized shell as jshacker@localhost with in-memory storage."""
    return create_shell()


@pytest.fixture
def root_shell():
    """Provide an initialized shell already switched to root on localhost."""
    shell = create_shell()
    su(shell, "root", LOCAL_ROOT_PASSWORD)
    return shell


@pytest.fixture
def context():
    """Provide a CommandContext as jshacker@localhost."""
    return create_context()
