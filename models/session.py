"""Session state machine.

Tracks the active identity and location, the LIFO stack of identities
saved by nested SSH logins, and the two mutually exclusive modes (FTP and
raw-socket nc). Every committed transition is persisted through the
storage collaborator.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field, model_validator

from models.exceptions import ExclusiveModeError, NoRemoteSessionError
from models.paths import normalize_path
from models.privilege import PrivilegeTier

if TYPE_CHECKING:
    from models.storage import StorageBackend

logger = logging.getLogger(__name__)


class ExclusiveMode(str, Enum):
    """Exclusive interaction mode of the terminal."""

    NONE = "none"
    FTP = "ftp"
    NC = "nc"


class Session(BaseModel):
    """The single active identity and location.

    Args:
        username: Logged-in user.
        tier: Privilege tier of the user.
        machine: Machine the user is on.
        cwd: Absolute working directory on that machine.
    """

    username: str = Field(description="Logged-in user")
    tier: PrivilegeTier = Field(description="Privilege tier of the user")
    machine: str = Field(description="Machine the user is on")
    cwd: str = Field(description="Absolute working directory")

    class Config:
        frozen = True


class SessionSnapshot(Session):
    """Frozen copy of a Session saved before a remote login commits."""

    @classmethod
    def of(cls, session: Session) -> "SessionSnapshot":
        return cls(**session.model_dump())

    def to_session(self) -> Session:
        return Session(**self.model_dump())


class FtpSession(BaseModel):
    """An established FTP connection.

    The origin identity is held inline; FTP never touches the session stack.
    """

    remote_machine: str
    remote_user: str
    remote_tier: PrivilegeTier
    remote_cwd: str
    origin_machine: str
    origin_user: str
    origin_tier: PrivilegeTier
    origin_cwd: str

    class Config:
        frozen = True


class NcSession(BaseModel):
    """An established raw-socket connection to an interactive service.

    The identity is the fixed owner of the service port.
    """

    target_machine: str
    target_port: int
    service_name: str
    username: str
    tier: PrivilegeTier
    cwd: str

    class Config:
        frozen = True


class PersistedSessionState(BaseModel):
    """Serialized layout of the session state machine."""

    session: Session
    session_stack: list[SessionSnapshot] = Field(default_factory=list)
    ftp_session: Optional[FtpSession] = None
    nc_session: Optional[NcSession] = None

    @model_validator(mode="after")
    def validate_exclusive_modes(self) -> "PersistedSessionState":
        """Ensure FTP and nc modes are not both active."""
        if self.ftp_session is not None and self.nc_session is not None:
            raise ValueError("FTP and nc sessions cannot both be active")
        return self


class SessionStateMachine:
    """Owns Session, the session stack and the exclusive-mode slot.

    Transitions validate first and only then commit, so a raised error
    never leaves the state partially updated.

    Args:
        default_session: Identity used at start-up and after reset().
        storage: Optional persistence collaborator.
    """

    def __init__(
        self, default_session: Session, storage: Optional["StorageBackend"] = None
    ):
        self.default_session = default_session
        self._storage = storage
        self.session: Session = default_session
        self.stack: list[SessionSnapshot] = []
        self.ftp_session: Optional[FtpSession] = None
        self.nc_session: Optional[NcSession] = None

    # ===== Properties =====

    @property
    def mode(self) -> ExclusiveMode:
        if self.ftp_session is not None:
            return ExclusiveMode.FTP
        if self.nc_session is not None:
            return ExclusiveMode.NC
        return ExclusiveMode.NONE

    @property
    def depth(self) -> int:
        """Current SSH nesting depth."""
        return len(self.stack)

    @property
    def prompt(self) -> str:
        mode = self.mode
        if mode == ExclusiveMode.FTP:
            return "ftp>"
        if mode == ExclusiveMode.NC:
            return "$"
        return f"{self.session.username}@{self.session.machine}>"

    # ===== Persistence =====

    def snapshot(self) -> PersistedSessionState:
        """Return the current state in persisted form."""
        return PersistedSessionState(
            session=self.session,
            session_stack=list(self.stack),
            ftp_session=self.ftp_session,
            nc_session=self.nc_session,
        )

    def _persist(self) -> None:
        if self._storage is not None:
            self._storage.save_session_state(self.snapshot())

    def restore(self) -> bool:
        """Load persisted state, keeping defaults when nothing valid is stored.

        Returns:
            True if persisted state was applied.
        """
        if self._storage is None:
            return False
        state = self._storage.load_session_state()
        if state is None:
            return False
        self.session = state.session
        self.stack = list(state.session_stack)
        self.ftp_session = state.ftp_session
        self.nc_session = state.nc_session
        logger.info(
            f"Restored session {self.session.username}@{self.session.machine} "
            f"(depth {self.depth}, mode {self.mode.value})"
        )
        return True

    def reset(self) -> None:
        """Return to the default identity with no stack and no exclusive mode."""
        self.session = self.default_session
        self.stack = []
        self.ftp_session = None
        self.nc_session = None
        self._persist()
        logger.info("Session reset to default identity")

    # ===== Local session =====

    def set_cwd(self, cwd: str) -> None:
        self.session = self.session.model_copy(update={"cwd": normalize_path(cwd)})
        self._persist()

    def switch_user(self, username: str, tier: PrivilegeTier, home: str) -> None:
        """Change identity on the current machine (su). The stack is untouched."""
        self.session = Session(
            username=username, tier=tier, machine=self.session.machine, cwd=home
        )
        self._persist()
        logger.info(f"Switched user to {username} ({tier.value}) on {self.session.machine}")

    def push_remote_login(
        self, username: str, tier: PrivilegeTier, machine: str, home: str
    ) -> None:
        """Save the current session and become the remote identity (ssh).

        Raises:
            ExclusiveModeError: If FTP or nc mode is active.
        """
        if self.mode != ExclusiveMode.NONE:
            raise ExclusiveModeError(f"ssh: cannot connect while in {self.mode.value} mode")
        self.stack.append(SessionSnapshot.of(self.session))
        self.session = Session(username=username, tier=tier, machine=machine, cwd=home)
        self._persist()
        logger.info(f"Remote login {username}@{machine} (depth {self.depth})")

    def exit_remote(self) -> Session:
        """Restore the most recently saved session.

        Returns:
            The restored session.

        Raises:
            NoRemoteSessionError: If the stack is empty.
        """
        if not self.stack:
            raise NoRemoteSessionError()
        left = self.session
        self.session = self.stack.pop().to_session()
        self._persist()
        logger.info(f"Closed remote session on {left.machine} (depth {self.depth})")
        return self.session

    # ===== FTP =====

    def _require_no_exclusive_mode(self, entering: str) -> None:
        if self.mode != ExclusiveMode.NONE:
            raise ExclusiveModeError(
                f"{entering}: already in {self.mode.value} mode"
            )

    def enter_ftp(self, remote_machine: str, remote_user: str, remote_tier: PrivilegeTier, remote_home: str) -> None:
        """Establish an FTP session originating from the current session.

        Raises:
            ExclusiveModeError: If an exclusive mode is already active.
        """
        self._require_no_exclusive_mode("ftp")
        self.ftp_session = FtpSession(
            remote_machine=remote_machine,
            remote_user=remote_user,
            remote_tier=remote_tier,
            remote_cwd=remote_home,
            origin_machine=self.session.machine,
            origin_user=self.session.username,
            origin_tier=self.session.tier,
            origin_cwd=self.session.cwd,
        )
        self._persist()
        logger.info(f"FTP session opened to {remote_user}@{remote_machine}")

    def exit_ftp(self) -> None:
        self.ftp_session = None
        self._persist()
        logger.info("FTP session closed")

    def set_ftp_remote_cwd(self, cwd: str) -> None:
        if self.ftp_session is None:
            return
        self.ftp_session = self.ftp_session.model_copy(update={"remote_cwd": normalize_path(cwd)})
        self._persist()

    def set_ftp_origin_cwd(self, cwd: str) -> None:
        if self.ftp_session is None:
            return
        self.ftp_session = self.ftp_session.model_copy(update={"origin_cwd": normalize_path(cwd)})
        self._persist()

    # ===== nc =====

    def enter_nc(
        self,
        target_machine: str,
        target_port: int,
        service_name: str,
        username: str,
        tier: PrivilegeTier,
        home: str,
    ) -> None:
        """Establish a raw-socket session with the port owner's identity.

        Raises:
            ExclusiveModeError: If an exclusive mode is already active.
        """
        self._require_no_exclusive_mode("nc")
        self.nc_session = NcSession(
            target_machine=target_machine,
            target_port=target_port,
            service_name=service_name,
            username=username,
            tier=tier,
            cwd=home,
        )
        self._persist()
        logger.info(f"nc session opened to {target_machine}:{target_port} as {username}")

    def exit_nc(self) -> None:
        self.nc_session = None
        self._persist()
        logger.info("nc session closed")

    def set_nc_cwd(self, cwd: str) -> None:
        if self.nc_session is None:
            return
        self.nc_session = self.nc_session.model_copy(update={"cwd": normalize_path(cwd)})
        self._persist()
