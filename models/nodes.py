"""Filesystem node models."""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from models.privilege import PrivilegeTier


class NodeKind(str, Enum):
    """Kind of a filesystem node."""

    FILE = "file"
    DIRECTORY = "directory"


class FilePermissions(BaseModel):
    """Access-control lists of a node.

    Each list is an independent set of privilege tiers. Directories use
    ``read`` to gate listing/entering and ``write`` to gate creating children.

    Args:
        read: Tiers allowed to read the node.
        write: Tiers allowed to write the node.
        execute: Tiers allowed to execute the node.
    """

    read: frozenset[PrivilegeTier] = Field(default_factory=frozenset)
    write: frozenset[PrivilegeTier] = Field(default_factory=frozenset)
    execute: frozenset[PrivilegeTier] = Field(default_factory=frozenset)

    class Config:
        frozen = True

    @classmethod
    def of(
        cls,
        read: Iterable[PrivilegeTier],
        write: Iterable[PrivilegeTier],
        execute: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
    ) -> "FilePermissions":
        """Build permissions from any iterables of tiers."""
        return cls(read=frozenset(read), write=frozenset(write), execute=frozenset(execute))


class FileNode(BaseModel):
    """A file or directory inside one machine's filesystem tree.

    Nodes are immutable. A mutation produces a replacement tree that
    shares every untouched subtree with the previous one, so any node
    reference captured earlier stays valid.

    Args:
        name: Entry name ("/" for a machine root).
        kind: FILE or DIRECTORY.
        owner: Tier owning the node.
        permissions: Read/write/execute ACLs.
        content: File body (files only).
        children: Child nodes by name (directories only).

    Raises:
        ValueError: If content/children do not match the node kind.
    """

    name: str = Field(description="Entry name")
    kind: NodeKind = Field(description="File or directory")
    owner: PrivilegeTier = Field(description="Tier owning the node")
    permissions: FilePermissions = Field(description="Access-control lists")
    content: Optional[str] = Field(default=None, description="File body (files only)")
    children: Optional[dict[str, "FileNode"]] = Field(
        default=None, description="Child nodes by name (directories only)"
    )

    class Config:
        frozen = True

    @model_validator(mode="after")
    def validate_kind_shape(self) -> "FileNode":
        """Ensure content is set iff file and children iff directory."""
        if self.kind == NodeKind.FILE:
            if self.content is None:
                raise ValueError(f"File node '{self.name}' must define content")
            if self.children is not None:
                raise ValueError(f"File node '{self.name}' cannot have children")
        else:
            if self.children is None:
                raise ValueError(f"Directory node '{self.name}' must define children")
            if self.content is not None:
                raise ValueError(f"Directory node '{self.name}' cannot have content")
        return self

    @property
    def is_file(self) -> bool:
        return self.kind == NodeKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY

    def child(self, name: str) -> Optional["FileNode"]:
        """Return a direct child by name, or None for files and missing names."""
        if self.children is None:
            return None
        return self.children.get(name)

    def with_content(self, content: str) -> "FileNode":
        """Return a copy of this file with new content."""
        return self.model_copy(update={"content": content})

    def with_child(self, child: "FileNode") -> "FileNode":
        """Return a copy of this directory with a child added or replaced."""
        children = dict(self.children or {})
        children[child.name] = child
        return self.model_copy(update={"children": children})


class PermissionResult(BaseModel):
    """Outcome of a permission check or a filesystem mutation.

    Args:
        allowed: Whether the operation is permitted / succeeded.
        error: Reason when not allowed.
    """

    allowed: bool
    error: Optional[str] = None

    @classmethod
    def allow(cls) -> "PermissionResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: str) -> "PermissionResult":
        return cls(allowed=False, error=error)


def make_file(
    name: str,
    content: str,
    owner: PrivilegeTier = PrivilegeTier.ROOT,
    read: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
    write: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
    execute: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
) -> FileNode:
    """Build a file node.

    Args:
        name: File name.
        content: File body.
        owner: Owning tier.
        read: Tiers allowed to read.
        write: Tiers allowed to write.
        execute: Tiers allowed to execute.

    Returns:
        A new immutable FileNode of kind FILE.
    """
    return FileNode(
        name=name,
        kind=NodeKind.FILE,
        owner=owner,
        permissions=FilePermissions.of(read, write, execute),
        content=content,
    )


def make_directory(
    name: str,
    children: Iterable[FileNode] = (),
    owner: PrivilegeTier = PrivilegeTier.ROOT,
    read: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
    write: Iterable[PrivilegeTier] = (PrivilegeTier.ROOT,),
    execute: Optional[Iterable[PrivilegeTier]] = None,
) -> FileNode:
    """Build a directory node.

    The execute ACL defaults to the read ACL, mirroring how traversal
    rights usually follow listing rights.

    Returns:
        A new immutable FileNode of kind DIRECTORY.
    """
    read = tuple(read)
    return FileNode(
        name=name,
        kind=NodeKind.DIRECTORY,
        owner=owner,
        permissions=FilePermissions.of(read, write, read if execute is None else execute),
        children={child.name: child for child in children},
    )
