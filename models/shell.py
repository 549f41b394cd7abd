"""Terminal shell: the single entry point for submitted input.

The shell owns every collaborator (filesystem store, session state
machine, network, scheduler, interpreter) and routes each submitted
line to either the credential flow in progress or the command table of
the current mode. Output is buffered as OutputLine records and drained
by the caller after each submit/advance/interrupt.
"""

import logging
import math
import uuid
from concurrent.futures import Future
from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from commands import (
    Command,
    CommandContext,
    apply_command_restrictions,
    build_command_table,
    build_ftp_table,
    build_nc_table,
    get_accessible_command_names,
)
from commands.session import passwd_entries
from config import settings
from models.async_output import AsyncOutput
from models.exceptions import CommandValidationError, ShellError
from models.filesystem import FileSystemStore
from models.interpreter import Interpreter
from models.machines import build_baselines, build_network, hostname_for, machine_users
from models.network import Network
from models.privilege import PrivilegeTier, home_path_for
from models.results import (
    ClearScreen,
    ExitRequest,
    FtpPrompt,
    FtpQuit,
    NcPrompt,
    NcQuit,
    PasswordPrompt,
    ResetRequest,
    SshPrompt,
)
from models.scheduler import Scheduler
from models.session import ExclusiveMode, Session, SessionStateMachine
from models.storage import StorageBackend
from utils.crypto import hash_password
from utils.stringify import stringify

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


class ShellNotInitializedError(Exception):
    """Raised when input arrives before initialize() has run."""


class InputMode(str, Enum):
    """What the next submitted line is interpreted as."""

    COMMAND = "command"
    USERNAME = "username"
    PASSWORD = "password"


class LineKind(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    ERROR = "error"
    CLEAR = "clear"


class OutputLine(BaseModel):
    """One line of terminal output.

    Args:
        kind: INPUT echoes what was submitted, OUTPUT/ERROR are command
            output, CLEAR asks the terminal to wipe the screen.
        text: Line text (no newlines).
    """

    kind: LineKind
    text: str = ""


class CredentialPurpose(str, Enum):
    SU = "su"
    SSH = "ssh"
    FTP_USER = "ftp_user"
    FTP_PASSWORD = "ftp_password"


class PendingCredential(BaseModel):
    """A credential prompt awaiting input.

    Args:
        purpose: Which login the input belongs to.
        prompt: Label shown to the user.
        target_user: Account being logged into, once known.
        target_ip: Remote machine for ssh/ftp logins.
        attempts: Failed attempts so far.
    """

    purpose: CredentialPurpose
    prompt: str
    target_user: Optional[str] = None
    target_ip: Optional[str] = None
    attempts: int = 0


def default_session(username: str, machine: str) -> Session:
    """Initial identity: the account's tier on the machine and its home."""
    user = next((u for u in machine_users(machine) if u.username == username), None)
    tier = user.tier if user else PrivilegeTier.for_username(username)
    return Session(
        username=username, tier=tier, machine=machine, cwd=home_path_for(username, tier)
    )


class Shell(BaseModel):
    """Interactive shell over the simulated machines.

    Use Shell.create() to build one with the built-in world and then call
    initialize() once before submitting input; initialization replays
    persisted filesystem patches and restores the persisted session.

    Attributes:
        shell_id: Unique identifier of this shell instance.
        store: Filesystem trees of every machine.
        network: Per-machine network views.
        scheduler: Simulated clock driving async commands.
        is_initialized: Whether initialize() has completed.
        input_mode: How the next submitted line is interpreted.
        max_password_attempts: Tries allowed per credential prompt.
    """

    shell_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    store: FileSystemStore
    network: Network
    scheduler: Scheduler = Field(default_factory=Scheduler)
    is_initialized: bool = False
    input_mode: InputMode = InputMode.COMMAND
    max_password_attempts: int = Field(default=1, ge=1)

    class Config:
        arbitrary_types_allowed = True

    def __init__(
        self,
        sessions: SessionStateMachine,
        storage: Optional[StorageBackend] = None,
        **data,
    ):
        """Initialize with private attributes."""
        super().__init__(**data)
        self._sessions = sessions
        self._storage = storage
        self._output: list[OutputLine] = []
        self._running: Optional[AsyncOutput] = None
        self._pending: Optional[PendingCredential] = None
        self._interpreter = Interpreter(awaiter=self._settle)

        self._context = CommandContext(self.store, sessions, self.network, self.scheduler)
        self._context.visible_commands = self.available_commands
        self._context.script_runner = self._run_script
        self._tables = {
            ExclusiveMode.NONE: build_command_table(self._context),
            ExclusiveMode.FTP: build_ftp_table(self._context),
            ExclusiveMode.NC: build_nc_table(self._context),
        }

    @classmethod
    def create(
        cls,
        storage: Optional[StorageBackend] = None,
        username: Optional[str] = None,
        machine: Optional[str] = None,
        max_password_attempts: Optional[int] = None,
    ) -> "Shell":
        """Build a shell over the built-in machines.

        Args:
            storage: Persistence collaborator (None keeps state in memory only).
            username: Initial user (defaults to settings.DEFAULT_USER).
            machine: Initial machine (defaults to settings.DEFAULT_MACHINE).
            max_password_attempts: Tries per credential prompt
                (defaults to settings.MAX_PASSWORD_ATTEMPTS).

        Returns:
            An uninitialized Shell.
        """
        session = default_session(
            username or settings.DEFAULT_USER, machine or settings.DEFAULT_MACHINE
        )
        return cls(
            sessions=SessionStateMachine(session, storage=storage),
            storage=storage,
            store=FileSystemStore(storage=storage, baselines=build_baselines()),
            network=build_network(),
            max_password_attempts=max_password_attempts or settings.MAX_PASSWORD_ATTEMPTS,
        )

    # ===== Lifecycle =====

    def initialize(self) -> dict:
        """Load persisted state. Must run before any input is accepted.

        A restored session that refers to an unknown machine is discarded
        in favour of the default session.

        Returns:
            Summary with the replayed patch count and whether the session
            was restored.
        """
        applied = self.store.load()
        restored = self._sessions.restore()
        if restored and not self._references_known_machines():
            logger.warning("Persisted session refers to unknown machines; using defaults")
            self._sessions.reset()
            restored = False

        self.is_initialized = True
        logger.info(
            f"Shell {self.shell_id} initialized as {self._sessions.prompt} "
            f"({applied} patches, session restored: {restored})"
        )
        return {"patches_applied": applied, "session_restored": restored}

    def _references_known_machines(self) -> bool:
        known = set(self.store.machine_ids)
        sessions = self._sessions
        machines = [sessions.session.machine, *(s.machine for s in sessions.stack)]
        if sessions.ftp_session is not None:
            machines += [sessions.ftp_session.remote_machine, sessions.ftp_session.origin_machine]
        if sessions.nc_session is not None:
            machines.append(sessions.nc_session.target_machine)
        return all(machine in known for machine in machines)

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise ShellNotInitializedError("Shell has not been initialized")

    # ===== Properties =====

    @property
    def sessions(self) -> SessionStateMachine:
        return self._sessions

    @property
    def session(self) -> Session:
        return self._sessions.session

    @property
    def mode(self) -> ExclusiveMode:
        return self._sessions.mode

    @property
    def prompt(self) -> str:
        if self._pending is not None:
            return self._pending.prompt
        return self._sessions.prompt

    @property
    def busy(self) -> bool:
        return self._running is not None and not self._running.completed

    @property
    def interpreter(self) -> Interpreter:
        return self._interpreter

    def _mode_tier(self) -> PrivilegeTier:
        sessions = self._sessions
        if sessions.ftp_session is not None:
            return sessions.ftp_session.remote_tier
        if sessions.nc_session is not None:
            return sessions.nc_session.tier
        return sessions.session.tier

    def command_table(self) -> dict[str, Command]:
        """Commands callable in the current mode; denied ones raise on call."""
        return apply_command_restrictions(self._tables[self.mode], self._mode_tier())

    def available_commands(self) -> dict[str, Command]:
        """Commands the current identity may run in the current mode."""
        table = self._tables[self.mode]
        names = get_accessible_command_names(table, self._mode_tier())
        return {name: table[name] for name in names}

    # ===== Output buffer =====

    def _emit(self, text: str, kind: LineKind = LineKind.OUTPUT) -> None:
        for line in text.split("\n"):
            self._output.append(OutputLine(kind=kind, text=line))

    def _error(self, text: str) -> None:
        self._emit(text, LineKind.ERROR)

    def drain(self) -> list[OutputLine]:
        """Return and clear buffered output."""
        lines, self._output = self._output, []
        return lines

    # ===== Input =====

    def submit(self, text: str) -> list[OutputLine]:
        """Handle one submitted line.

        A pending async command is cancelled first. While a credential
        prompt is open the line is treated as the credential, otherwise
        it is evaluated against the current command table.

        Args:
            text: Raw input.

        Returns:
            Output produced synchronously by the line.

        Raises:
            ShellNotInitializedError: If initialize() has not run.
        """
        self._require_initialized()
        self._cancel_running()

        if self._pending is not None:
            self._handle_credential(text)
            return self.drain()

        self._emit(f"{self._sessions.prompt} {text}", LineKind.INPUT)
        if not text.strip():
            return self.drain()

        try:
            evaluation = self._interpreter.execute(text, self.command_table())
            if evaluation.assigned:
                self._display(evaluation.value)
            else:
                self._dispatch(evaluation.value)
        except ShellError as e:
            self._error(f"Error: {e.message}")
        except Exception as e:
            logger.error(f"Unexpected error running {text!r}: {e}", exc_info=True)
            self._error(f"Error: {e}")
        return self.drain()

    def advance(self, milliseconds: int) -> list[OutputLine]:
        """Advance simulated time and return output emitted meanwhile."""
        self._require_initialized()
        self.scheduler.advance(milliseconds)
        return self.drain()

    def run_until_idle(self) -> list[OutputLine]:
        """Fire every pending callback and return the output."""
        self._require_initialized()
        self.scheduler.run_until_idle()
        return self.drain()

    def interrupt(self) -> list[OutputLine]:
        """Cancel the running async command or the open credential prompt (^C)."""
        self._require_initialized()
        if self.busy or self._pending is not None:
            self._emit("^C")
        self._cancel_running()
        self._close_prompt()
        return self.drain()

    def _cancel_running(self) -> None:
        if self._running is not None:
            self._running.cancel()
            self._running = None

    # ===== Result dispatch =====

    def _display(self, value: Any) -> None:
        if value is None:
            return
        text = stringify(value)
        if text:
            self._emit(text)

    def _dispatch(self, value: Any) -> None:
        if isinstance(value, AsyncOutput):
            self._start(value)
        elif isinstance(value, PasswordPrompt):
            self._open_prompt(
                PendingCredential(
                    purpose=CredentialPurpose.SU, prompt="Password:", target_user=value.target_user
                )
            )
        elif isinstance(value, ExitRequest):
            self._sessions.exit_remote()
            self._emit("Connection closed.")
        elif isinstance(value, FtpQuit):
            self._sessions.exit_ftp()
            self._emit("221 Goodbye.")
        elif isinstance(value, NcQuit):
            self._sessions.exit_nc()
            self._emit("Connection closed.")
        elif isinstance(value, ClearScreen):
            self._output = [OutputLine(kind=LineKind.CLEAR)]
        elif isinstance(value, ResetRequest):
            self.reset_all()
            self._emit("Game reset.")
        elif isinstance(value, Command):
            self._emit(str(value))
        else:
            self._display(value)

    def _start(self, handle: AsyncOutput) -> None:
        self._running = handle
        handle.start(self._emit, lambda follow_up=None: self._complete(handle, follow_up))

    def _complete(self, handle: AsyncOutput, follow_up) -> None:
        if self._running is handle:
            self._running = None
        if follow_up is None:
            return
        try:
            self._follow_up(follow_up)
        except ShellError as e:
            self._error(f"Error: {e.message}")

    def _follow_up(self, follow_up) -> None:
        if isinstance(follow_up, SshPrompt):
            self._open_prompt(
                PendingCredential(
                    purpose=CredentialPurpose.SSH,
                    prompt=f"{follow_up.target_user}@{follow_up.target_ip}'s password:",
                    target_user=follow_up.target_user,
                    target_ip=follow_up.target_ip,
                )
            )
        elif isinstance(follow_up, FtpPrompt):
            self._open_prompt(
                PendingCredential(
                    purpose=CredentialPurpose.FTP_USER,
                    prompt=f"Name ({follow_up.target_ip}:{ANONYMOUS_USER}):",
                    target_ip=follow_up.target_ip,
                )
            )
        elif isinstance(follow_up, NcPrompt):
            self._sessions.enter_nc(
                target_machine=follow_up.target_ip,
                target_port=follow_up.target_port,
                service_name=follow_up.service,
                username=follow_up.username,
                tier=follow_up.tier,
                home=follow_up.home_path,
            )

    # ===== Credential flow =====

    def _open_prompt(self, pending: PendingCredential) -> None:
        self._pending = pending
        is_username = pending.purpose == CredentialPurpose.FTP_USER
        self.input_mode = InputMode.USERNAME if is_username else InputMode.PASSWORD
        self._emit(pending.prompt)

    def _close_prompt(self) -> None:
        self._pending = None
        self.input_mode = InputMode.COMMAND

    def _handle_credential(self, text: str) -> None:
        pending = self._pending
        if self.input_mode == InputMode.PASSWORD:
            self._emit(f"{pending.prompt} {'*' * len(text)}", LineKind.INPUT)
        else:
            self._emit(f"{pending.prompt} {text}", LineKind.INPUT)

        try:
            if pending.purpose == CredentialPurpose.SU:
                self._verify_su(pending, text)
            elif pending.purpose == CredentialPurpose.SSH:
                self._verify_ssh(pending, text)
            elif pending.purpose == CredentialPurpose.FTP_USER:
                self._accept_ftp_user(pending, text)
            else:
                self._verify_ftp_password(pending, text)
        except ShellError as e:
            self._close_prompt()
            self._error(f"Error: {e.message}")

    def _failed_attempt(self, pending: PendingCredential, message: str) -> None:
        """Count a failure; re-prompt while attempts remain."""
        pending.attempts += 1
        if pending.attempts < self.max_password_attempts:
            self._error(message)
            self._emit(pending.prompt)
            return
        logger.info(f"{pending.purpose.value} login failed for {pending.target_user}")
        self._close_prompt()
        self._error(message)

    def _verify_su(self, pending: PendingCredential, password: str) -> None:
        machine = self.session.machine
        expected = passwd_entries(self._context, machine).get(pending.target_user)
        if expected is None or hash_password(password) != expected:
            self._failed_attempt(pending, "su: Authentication failure")
            return

        username = pending.target_user
        account = next((u for u in machine_users(machine) if u.username == username), None)
        tier = account.tier if account else PrivilegeTier.for_username(username)
        self._close_prompt()
        self._sessions.switch_user(username, tier, home_path_for(username, tier))
        self._emit(f"Switched to user: {username}")

    def _verify_ssh(self, pending: PendingCredential, password: str) -> None:
        machine = self._context.network_view().get_machine(pending.target_ip)
        account = machine.get_user(pending.target_user) if machine else None
        if account is None or not account.check_password(password):
            self._failed_attempt(pending, "Permission denied, please try again.")
            return

        self._close_prompt()
        self._sessions.push_remote_login(
            account.username, account.tier, machine.ip, account.home_path
        )
        self._emit(f"Connected to {machine.ip}")
        self._emit(f"Welcome to {hostname_for(machine.ip)}!")

    def _accept_ftp_user(self, pending: PendingCredential, username: str) -> None:
        username = username.strip() or ANONYMOUS_USER
        machine = self._context.network_view().get_machine(pending.target_ip)
        if machine is None or machine.get_user(username) is None:
            self._close_prompt()
            self._error("530 Login incorrect.")
            return
        self._emit("331 Please specify the password.")
        self._open_prompt(
            PendingCredential(
                purpose=CredentialPurpose.FTP_PASSWORD,
                prompt="Password:",
                target_user=username,
                target_ip=pending.target_ip,
            )
        )

    def _verify_ftp_password(self, pending: PendingCredential, password: str) -> None:
        machine = self._context.network_view().get_machine(pending.target_ip)
        account = machine.get_user(pending.target_user) if machine else None
        if account is None or not account.check_password(password):
            self._failed_attempt(pending, "530 Login incorrect.")
            return

        self._close_prompt()
        self._sessions.enter_ftp(
            machine.ip, account.username, account.tier, home_path_for(account.username, account.tier)
        )
        self._emit("230 Login successful.")

    # ===== Interpreter hooks =====

    def _settle(self, value: Any) -> Any:
        """Resolve ``await value`` by running the simulated clock.

        Raises:
            CommandValidationError: If the promise can never settle.
            ShellError: If the promise was rejected.
        """
        if not isinstance(value, Future):
            return value
        while not value.done():
            next_due = self.scheduler.next_due_time()
            if next_due is None:
                raise CommandValidationError("await: promise never settled")
            delta = max(next_due - self.scheduler.current_time, timedelta(0))
            self.scheduler.advance(math.ceil(delta / timedelta(milliseconds=1)))
        return value.result()

    def _run_script(self, source: str) -> Any:
        """Run a script in a fresh variable scope (node command)."""
        return Interpreter(awaiter=self._settle).run_script(source, self.command_table())

    # ===== Reset =====

    def reset_all(self) -> None:
        """Wipe persisted state and return to the initial world."""
        self._cancel_running()
        self._close_prompt()
        self.scheduler.clear()
        if self._storage is not None:
            self._storage.clear()
        self.store.reset()
        self._sessions.reset()
        self._interpreter.reset()
        logger.info(f"Shell {self.shell_id} reset to factory defaults")

    def get_state(self) -> dict:
        """Summary of the terminal state for API responses."""
        return {
            "shell_id": self.shell_id,
            "prompt": self.prompt,
            "mode": self.mode.value,
            "input_mode": self.input_mode.value,
            "busy": self.busy,
            "session": self.session.model_dump(mode="json"),
            "depth": self._sessions.depth,
            "current_time": self.scheduler.current_time.isoformat(),
        }
