"""Filesystem inspection endpoints.

Read-only views over the shared store. Reads are checked against the
tier of the current session, so the API never reveals more than the
player could see from the terminal.
"""

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from api.dependencies import ShellDep, ShellLockDep
from api.exceptions import MachineNotFoundError
from models.nodes import NodeKind
from models.paths import normalize_path
from models.privilege import PrivilegeTier

router = APIRouter(
    prefix="/filesystem",
    tags=["filesystem"],
)


class NodeResponse(BaseModel):
    """Metadata of one node.

    Attributes:
        machine_id: Machine holding the node.
        path: Normalized absolute path.
        exists: Whether the path resolves.
        kind: File or directory.
        owner: Owning tier.
        readable: Whether the current session may read it.
        content: File body, only for readable files.
        children: Child names, only for readable directories.
    """

    machine_id: str
    path: str
    exists: bool
    kind: Optional[NodeKind] = None
    owner: Optional[PrivilegeTier] = None
    readable: bool = False
    content: Optional[str] = None
    children: Optional[list[str]] = None


class PatchListResponse(BaseModel):
    machines: list[str]
    patch_count: int
    patches: list[dict] = Field(default_factory=list)


@router.get("/patches", response_model=PatchListResponse)
def get_patches(shell: ShellDep, lock: ShellLockDep):
    """Every recorded patch, in the order it was applied."""
    with lock:
        return shell.store.get_snapshot()


@router.get("/{machine_id}/node", response_model=NodeResponse)
def get_node(
    machine_id: str,
    shell: ShellDep,
    lock: ShellLockDep,
    path: str = Query("/", description="Absolute path on the machine"),
):
    """Look up one node on a machine.

    Raises:
        MachineNotFoundError: If the machine does not exist (404).
    """
    with lock:
        store = shell.store
        if machine_id not in store.machine_ids:
            raise MachineNotFoundError(machine_id, store.machine_ids)

        target = normalize_path(path)
        node = store.get_node(machine_id, target)
        if node is None:
            return NodeResponse(machine_id=machine_id, path=target, exists=False)

        readable = store.can_read(machine_id, target, "/", shell.session.tier).allowed
        return NodeResponse(
            machine_id=machine_id,
            path=target,
            exists=True,
            kind=node.kind,
            owner=node.owner,
            readable=readable,
            content=node.content if readable and node.is_file else None,
            children=sorted(node.children) if readable and node.is_directory else None,
        )
