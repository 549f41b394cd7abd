"""Terminal endpoints.

These endpoints feed input to the shell, drive its simulated clock and
report the prompt. Handlers are sync and serialised by the shell lock.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ShellDep, ShellLockDep
from api.models import PromptResponse, TerminalResponse
from models.shell import OutputLine, Shell

router = APIRouter(
    prefix="/terminal",
    tags=["terminal"],
)


class SubmitRequest(BaseModel):
    """Request model for submitting a line.

    Attributes:
        input: Command line, or the credential when a prompt is open.
    """

    input: str = Field(..., max_length=10_000, description="Submitted line")


class AdvanceRequest(BaseModel):
    """Request model for advancing simulated time.

    Attributes:
        milliseconds: Simulated milliseconds to advance.
    """

    milliseconds: int = Field(..., ge=0, description="Simulated milliseconds to advance")


class CommandListResponse(BaseModel):
    mode: str
    commands: list[str]


def _respond(shell: Shell, lines: list[OutputLine]) -> TerminalResponse:
    return TerminalResponse(
        lines=lines,
        prompt=shell.prompt,
        mode=shell.mode.value,
        input_mode=shell.input_mode.value,
        busy=shell.busy,
        current_time=shell.scheduler.current_time,
    )


@router.post("/submit", response_model=TerminalResponse)
def submit(request: SubmitRequest, shell: ShellDep, lock: ShellLockDep):
    """Submit a command line or credential.

    Returns the output produced synchronously. Lines from async commands
    arrive through /terminal/advance.
    """
    with lock:
        return _respond(shell, shell.submit(request.input))


@router.post("/advance", response_model=TerminalResponse)
def advance(request: AdvanceRequest, shell: ShellDep, lock: ShellLockDep):
    """Advance simulated time and return the lines emitted meanwhile."""
    with lock:
        return _respond(shell, shell.advance(request.milliseconds))


@router.post("/interrupt", response_model=TerminalResponse)
def interrupt(shell: ShellDep, lock: ShellLockDep):
    """Cancel the running async command or open prompt (^C)."""
    with lock:
        return _respond(shell, shell.interrupt())


@router.get("/prompt", response_model=PromptResponse)
def get_prompt(shell: ShellDep, lock: ShellLockDep):
    with lock:
        return PromptResponse(
            prompt=shell.prompt,
            mode=shell.mode.value,
            input_mode=shell.input_mode.value,
            busy=shell.busy,
        )


@router.get("/commands", response_model=CommandListResponse)
def list_commands(shell: ShellDep, lock: ShellLockDep):
    """Commands the current identity may run in the current mode."""
    with lock:
        return CommandListResponse(
            mode=shell.mode.value,
            commands=sorted(shell.available_commands()),
        )
