"""VNS data models package.

This package contains the core models of the network simulator: the
per-machine filesystem with its patch log, the privilege and permission
model, the session state machine, the simulated clock with its
scheduler, and the async command-output protocol.
"""

from models.privilege import PrivilegeTier
from models.nodes import FileNode, FilePermissions, NodeKind, PermissionResult
from models.filesystem import FileSystemPatch, FileSystemStore
from models.session import (
    ExclusiveMode,
    FtpSession,
    NcSession,
    PersistedSessionState,
    Session,
    SessionSnapshot,
    SessionStateMachine,
)
from models.time import SimulatorTime
from models.scheduler import Scheduler, ScheduledCallback
from models.async_output import AsyncOutput, CancellationToken

__all__ = [
    "PrivilegeTier",
    "FileNode",
    "FilePermissions",
    "NodeKind",
    "PermissionResult",
    "FileSystemPatch",
    "FileSystemStore",
    "ExclusiveMode",
    "FtpSession",
    "NcSession",
    "PersistedSessionState",
    "Session",
    "SessionSnapshot",
    "SessionStateMachine",
    "SimulatorTime",
    "Scheduler",
    "ScheduledCallback",
    "AsyncOutput",
    "CancellationToken",
]
