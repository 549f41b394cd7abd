"""Session inspection endpoints."""

from fastapi import APIRouter

from api.dependencies import ShellDep, ShellLockDep
from models.session import PersistedSessionState

router = APIRouter(
    prefix="/session",
    tags=["session"],
)


@router.get("/state", response_model=PersistedSessionState)
def get_session_state(shell: ShellDep, lock: ShellLockDep):
    """Current session, saved session stack and exclusive-mode slots."""
    with lock:
        return shell.sessions.snapshot()


@router.get("/summary")
def get_summary(shell: ShellDep, lock: ShellLockDep):
    """Prompt, mode, nesting depth and simulated time."""
    with lock:
        return shell.get_state()
