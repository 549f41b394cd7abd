"""Permission engine.

Access is decided purely by ACL membership: an actor may read (or write)
a node iff its tier is in the node's ``read`` (or ``write``) set. Root is
not special-cased here or in any command; baseline trees grant root
explicitly wherever root should have access.
"""

from typing import Optional

from models.nodes import FileNode, PermissionResult
from models.privilege import PrivilegeTier


def node_allows_read(node: FileNode, tier: PrivilegeTier) -> bool:
    """Return True if ``tier`` is in the node's read ACL."""
    return tier in node.permissions.read


def node_allows_write(node: FileNode, tier: PrivilegeTier) -> bool:
    """Return True if ``tier`` is in the node's write ACL."""
    return tier in node.permissions.write


def check_read(node: Optional[FileNode], path: str, tier: PrivilegeTier) -> PermissionResult:
    """Evaluate read access to a node.

    Args:
        node: Node at ``path``, or None if absent.
        path: Path used in error messages.
        tier: Tier of the acting identity.

    Returns:
        PermissionResult, denied with "No such file or directory" for an
        absent node and "Permission denied" for a missing ACL entry.
    """
    if node is None:
        return PermissionResult.deny(f"No such file or directory: {path}")
    if not node_allows_read(node, tier):
        return PermissionResult.deny(f"Permission denied: {path}")
    return PermissionResult.allow()


def check_write(node: Optional[FileNode], path: str, tier: PrivilegeTier) -> PermissionResult:
    """Evaluate write access to a node.

    Args:
        node: Node at ``path``, or None if absent.
        path: Path used in error messages.
        tier: Tier of the acting identity.

    Returns:
        PermissionResult with the same error wording as check_read().
    """
    if node is None:
        return PermissionResult.deny(f"No such file or directory: {path}")
    if not node_allows_write(node, tier):
        return PermissionResult.deny(f"Permission denied: {path}")
    return PermissionResult.allow()
