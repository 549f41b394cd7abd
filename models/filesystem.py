"""Filesystem store model.

Holds one immutable tree per machine plus the patch log of content
mutations and file creations. Patches are replayed over the baseline
trees at load time and persisted after every successful mutation.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from pydantic import BaseModel, Field

from models.nodes import FileNode, FilePermissions, NodeKind, PermissionResult
from models.paths import basename, normalize_path, parent_path, resolve_path, split_path
from models.permissions import check_read, check_write
from models.privilege import PrivilegeTier

if TYPE_CHECKING:
    from models.storage import StorageBackend

logger = logging.getLogger(__name__)


class FileSystemPatch(BaseModel):
    """A durable delta against a machine's baseline tree.

    Represents either "overwrite content of existing file at path" or
    "create new file at path owned by X". Patches are upserted by
    ``(machine_id, path)``.

    Args:
        machine_id: Machine whose tree was mutated.
        path: Absolute path of the file.
        content: File content after the mutation.
        owner: Tier owning the file.
    """

    machine_id: str = Field(description="Machine whose tree was mutated")
    path: str = Field(description="Absolute path of the file")
    content: str = Field(description="File content after the mutation")
    owner: PrivilegeTier = Field(description="Tier owning the file")

    @property
    def key(self) -> tuple[str, str]:
        return (self.machine_id, self.path)


def new_file_permissions(owner: PrivilegeTier) -> FilePermissions:
    """ACLs given to a file created at runtime by ``owner``."""
    return FilePermissions.of(
        read=(PrivilegeTier.ROOT, owner),
        write=(PrivilegeTier.ROOT, owner),
        execute=(PrivilegeTier.ROOT,),
    )


def _replace_at(
    node: FileNode, segments: list[str], updater: Callable[[FileNode], FileNode]
) -> FileNode:
    """Rebuild the path to a node, sharing every untouched subtree."""
    if not segments:
        return updater(node)
    head, rest = segments[0], segments[1:]
    child = node.child(head)
    if child is None:
        raise KeyError(head)
    return node.with_child(_replace_at(child, rest, updater))


class FileSystemStore(BaseModel):
    """Per-machine filesystem trees with a patch log.

    Trees are replaced (never edited in place) on every write or create.
    All path arguments are absolute; use resolve_node() to look up a
    path relative to a working directory.

    Args:
        baselines: Pristine tree of every machine, keyed by machine id.
        trees: Current tree of every machine (baseline + patches).
        patches: Patch log in insertion order, one entry per (machine, path).
    """

    baselines: dict[str, FileNode] = Field(description="Pristine tree per machine")
    trees: dict[str, FileNode] = Field(
        default_factory=dict, description="Current tree per machine"
    )
    patches: list[FileSystemPatch] = Field(
        default_factory=list, description="Patch log, one entry per (machine, path)"
    )

    class Config:
        arbitrary_types_allowed = True

    def __init__(self, storage: Optional["StorageBackend"] = None, **data):
        """Initialize with private attributes."""
        super().__init__(**data)
        if not self.trees:
            self.trees = dict(self.baselines)
        self._storage = storage

    # ===== Queries =====

    @property
    def machine_ids(self) -> list[str]:
        return sorted(self.trees)

    def get_root(self, machine_id: str) -> Optional[FileNode]:
        """Return the current root node of a machine, or None if unknown."""
        return self.trees.get(machine_id)

    def get_node(self, machine_id: str, path: str) -> Optional[FileNode]:
        """Walk a machine's tree to an absolute path.

        Args:
            machine_id: Machine to look in.
            path: Absolute path (normalized before walking).

        Returns:
            The node, or None if the machine or any segment is missing
            or a file is indexed into.
        """
        node = self.trees.get(machine_id)
        for segment in split_path(normalize_path(path)):
            if node is None:
                return None
            node = node.child(segment)
        return node

    def resolve_node(self, machine_id: str, path: str, cwd: str) -> Optional[FileNode]:
        """Look up a path relative to a working directory."""
        return self.get_node(machine_id, resolve_path(path, cwd))

    def can_read(
        self, machine_id: str, path: str, cwd: str, tier: PrivilegeTier
    ) -> PermissionResult:
        """Check read access to a path resolved against ``cwd``."""
        target = resolve_path(path, cwd)
        return check_read(self.get_node(machine_id, target), target, tier)

    def can_write(
        self, machine_id: str, path: str, cwd: str, tier: PrivilegeTier
    ) -> PermissionResult:
        """Check write access to a path resolved against ``cwd``."""
        target = resolve_path(path, cwd)
        return check_write(self.get_node(machine_id, target), target, tier)

    def list_directory(
        self, machine_id: str, path: str, tier: PrivilegeTier
    ) -> Optional[list[str]]:
        """List a readable directory.

        Returns:
            Sorted child names, or None if the path is missing, unreadable
            or not a directory.
        """
        if not self.can_read(machine_id, path, "/", tier).allowed:
            return None
        node = self.get_node(machine_id, path)
        if node is None or not node.is_directory:
            return None
        return sorted(node.children)

    def read_file(self, machine_id: str, path: str, tier: PrivilegeTier) -> Optional[str]:
        """Read a readable file.

        Returns:
            File content, or None if the path is missing, unreadable or
            not a file.
        """
        if not self.can_read(machine_id, path, "/", tier).allowed:
            return None
        node = self.get_node(machine_id, path)
        if node is None or not node.is_file:
            return None
        return node.content

    # ===== Mutations =====

    def write_file(
        self, machine_id: str, path: str, content: str, tier: PrivilegeTier
    ) -> PermissionResult:
        """Overwrite the content of an existing file.

        Args:
            machine_id: Machine holding the file.
            path: Absolute path of the file.
            content: New content.
            tier: Tier of the acting identity.

        Returns:
            PermissionResult; on success the tree is replaced and a patch
            is upserted. On failure nothing changes.
        """
        path = normalize_path(path)
        permission = self.can_write(machine_id, path, "/", tier)
        if not permission.allowed:
            return permission

        node = self.get_node(machine_id, path)
        if node is None or not node.is_file:
            return PermissionResult.deny(f"Not a file: {path}")

        self.trees[machine_id] = _replace_at(
            self.trees[machine_id], split_path(path), lambda n: n.with_content(content)
        )
        self._record_patch(
            FileSystemPatch(machine_id=machine_id, path=path, content=content, owner=node.owner)
        )
        return PermissionResult.allow()

    def create_file(
        self, machine_id: str, path: str, content: str, tier: PrivilegeTier
    ) -> PermissionResult:
        """Create a new file owned by the acting tier.

        The parent directory must exist, be a directory and be writable
        by ``tier``; the name must not already exist.

        Args:
            machine_id: Machine to create the file on.
            path: Absolute path of the new file.
            content: Initial content.
            tier: Tier of the acting identity (becomes the owner).

        Returns:
            PermissionResult; on success the tree is replaced and a patch
            is upserted.
        """
        path = normalize_path(path)
        name = basename(path)
        directory = parent_path(path)
        if not name:
            return PermissionResult.deny(f"File exists: {path}")

        permission = self.can_write(machine_id, directory, "/", tier)
        if not permission.allowed:
            return permission

        parent = self.get_node(machine_id, directory)
        if parent is None or not parent.is_directory:
            return PermissionResult.deny(f"Not a directory: {directory}")
        if parent.child(name) is not None:
            return PermissionResult.deny(f"File exists: {path}")

        self._insert_file(machine_id, path, content, tier)
        self._record_patch(
            FileSystemPatch(machine_id=machine_id, path=path, content=content, owner=tier)
        )
        return PermissionResult.allow()

    def _insert_file(self, machine_id: str, path: str, content: str, owner: PrivilegeTier) -> None:
        new_file = FileNode(
            name=basename(path),
            kind=NodeKind.FILE,
            owner=owner,
            permissions=new_file_permissions(owner),
            content=content,
        )
        self.trees[machine_id] = _replace_at(
            self.trees[machine_id],
            split_path(parent_path(path)),
            lambda directory: directory.with_child(new_file),
        )

    # ===== Patch log =====

    def get_patch(self, machine_id: str, path: str) -> Optional[FileSystemPatch]:
        key = (machine_id, normalize_path(path))
        for patch in self.patches:
            if patch.key == key:
                return patch
        return None

    def _upsert_patch(self, patch: FileSystemPatch) -> None:
        for index, existing in enumerate(self.patches):
            if existing.key == patch.key:
                self.patches[index] = patch
                return
        self.patches.append(patch)

    def _record_patch(self, patch: FileSystemPatch) -> None:
        self._upsert_patch(patch)
        logger.debug(f"Patched {patch.machine_id}:{patch.path} ({len(patch.content)} bytes)")
        if self._storage is not None:
            self._storage.save_patches(list(self.patches))

    def apply_patch(self, patch: FileSystemPatch) -> bool:
        """Replay one patch over the current trees without ACL checks.

        Patches were authorized when they were recorded, so replay only
        needs the target (or its parent directory) to exist.

        Returns:
            True if the patch was applied, False if it was skipped.
        """
        root = self.trees.get(patch.machine_id)
        if root is None:
            logger.warning(f"Skipping patch for unknown machine {patch.machine_id}")
            return False

        node = self.get_node(patch.machine_id, patch.path)
        if node is not None:
            if not node.is_file:
                logger.warning(f"Skipping patch over directory {patch.machine_id}:{patch.path}")
                return False
            self.trees[patch.machine_id] = _replace_at(
                root, split_path(patch.path), lambda n: n.with_content(patch.content)
            )
        else:
            parent = self.get_node(patch.machine_id, parent_path(patch.path))
            if parent is None or not parent.is_directory:
                logger.warning(
                    f"Skipping patch without parent directory {patch.machine_id}:{patch.path}"
                )
                return False
            self._insert_file(patch.machine_id, patch.path, patch.content, patch.owner)

        self._upsert_patch(patch)
        return True

    def load(self) -> int:
        """Replay persisted patches over the baselines.

        Patches are applied in path order so parents precede children.
        Missing or malformed persisted data leaves the baselines intact.

        Returns:
            Number of patches applied.
        """
        self.trees = dict(self.baselines)
        self.patches = []
        if self._storage is None:
            return 0

        stored = self._storage.load_patches()
        if not stored:
            return 0

        applied = 0
        for patch in sorted(stored, key=lambda p: (p.machine_id, p.path)):
            if self.apply_patch(patch):
                applied += 1

        logger.info(f"Replayed {applied} of {len(stored)} filesystem patches")
        return applied

    def reset(self) -> None:
        """Drop every patch and restore the baseline trees."""
        self.trees = dict(self.baselines)
        self.patches = []
        if self._storage is not None:
            self._storage.save_patches([])
        logger.info("Filesystem reset to baseline")

    def get_snapshot(self) -> dict:
        """Export a summary of the store for API responses."""
        return {
            "machines": self.machine_ids,
            "patch_count": len(self.patches),
            "patches": [patch.model_dump(mode="json") for patch in self.patches],
        }
