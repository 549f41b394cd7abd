"""Command records and the context commands run against."""

import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel, Field

from models.network import MachineNetworkConfig, Network
from models.paths import resolve_path
from models.privilege import PrivilegeTier

if TYPE_CHECKING:
    from models.filesystem import FileSystemStore
    from models.scheduler import Scheduler
    from models.session import Session, SessionStateMachine


class CommandArgument(BaseModel):
    name: str
    description: str
    required: bool = False


class CommandExample(BaseModel):
    command: str
    description: str


class CommandManual(BaseModel):
    """Manual page shown by man().

    Args:
        synopsis: Call signature, e.g. ``cat(file)``.
        description: Long description.
        arguments: Documented arguments.
        examples: Usage examples.
    """

    synopsis: str
    description: str
    arguments: list[CommandArgument] = Field(default_factory=list)
    examples: list[CommandExample] = Field(default_factory=list)


def accepted_arg_count(fn: Callable[..., Any]) -> Optional[int]:
    """Number of positional arguments ``fn`` takes, or None if unbounded."""
    try:
        parameters = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for parameter in parameters:
        if parameter.kind == parameter.VAR_POSITIONAL:
            return None
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


class Command(BaseModel):
    """A named function callable from the terminal.

    Args:
        name: Name the command is looked up by.
        description: One-line summary shown by help().
        manual: Optional manual page.
        fn: Implementation; receives the positional call arguments.
    """

    name: str = Field(description="Lookup name")
    description: str = Field(description="One-line summary")
    manual: Optional[CommandManual] = Field(default=None, description="Manual page")
    fn: Callable[..., Any] = Field(description="Implementation")

    class Config:
        arbitrary_types_allowed = True

    def __call__(self, *args: Any) -> Any:
        # Surplus positional arguments are dropped rather than rejected.
        return self.fn(*args[: accepted_arg_count(self.fn)])

    def __str__(self) -> str:
        return f"[Function: {self.name}]"

    @property
    def synopsis(self) -> str:
        return self.manual.synopsis if self.manual else f"{self.name}()"


def manual(
    synopsis: str,
    description: str,
    arguments: tuple[tuple[str, str, bool], ...] = (),
    examples: tuple[tuple[str, str], ...] = (),
) -> CommandManual:
    """Shorthand for building a CommandManual from tuples."""
    return CommandManual(
        synopsis=synopsis,
        description=description,
        arguments=[
            CommandArgument(name=name, description=text, required=required)
            for name, text, required in arguments
        ],
        examples=[CommandExample(command=command, description=text) for command, text in examples],
    )


class CommandContext:
    """Live view of the shell state shared by every command.

    Commands never cache state: each call reads the current session,
    machine and tier through this object.

    Args:
        store: Filesystem store of every machine.
        sessions: Session state machine.
        network: Per-machine network views.
        scheduler: Simulated-clock scheduler for async commands.
    """

    def __init__(
        self,
        store: "FileSystemStore",
        sessions: "SessionStateMachine",
        network: Network,
        scheduler: "Scheduler",
    ):
        self.store = store
        self.sessions = sessions
        self.network = network
        self.scheduler = scheduler
        # Bound by the shell once the tables exist.
        self.visible_commands: Callable[[], dict[str, Command]] = dict
        self.script_runner: Optional[Callable[[str], Any]] = None

    @property
    def session(self) -> "Session":
        return self.sessions.session

    @property
    def machine(self) -> str:
        return self.sessions.session.machine

    @property
    def cwd(self) -> str:
        return self.sessions.session.cwd

    @property
    def tier(self) -> PrivilegeTier:
        return self.sessions.session.tier

    def resolve(self, path: str) -> str:
        return resolve_path(path, self.cwd)

    def network_view(self) -> MachineNetworkConfig:
        return self.network.view(self.machine)
