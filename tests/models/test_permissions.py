"""Unit tests for nodes and the permission engine.

Access is decided by ACL membership only; root gets no implicit bypass.
"""

import pytest
from pydantic import ValidationError

from models.nodes import FileNode, FilePermissions, NodeKind, make_directory, make_file
from models.permissions import check_read, check_write, node_allows_read, node_allows_write
from models.privilege import PrivilegeTier, has_privilege, home_path_for

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST


class TestPrivilegeTier:
    def test_ordering(self):
        assert has_privilege(ROOT, USER)
        assert has_privilege(USER, USER)
        assert has_privilege(USER, GUEST)
        assert not has_privilege(GUEST, USER)
        assert not has_privilege(USER, ROOT)

    def test_for_username(self):
        assert PrivilegeTier.for_username("root") == ROOT
        assert PrivilegeTier.for_username("guest") == GUEST
        assert PrivilegeTier.for_username("jshacker") == USER

    def test_home_paths(self):
        assert home_path_for("admin", ROOT) == "/root"
        assert home_path_for("guest", GUEST) == "/home/guest"


class TestFileNode:
    def test_file_requires_content(self):
        with pytest.raises(ValidationError):
            FileNode(
                name="x",
                kind=NodeKind.FILE,
                owner=ROOT,
                permissions=FilePermissions.of((ROOT,), (ROOT,)),
            )

    def test_directory_cannot_have_content(self):
        with pytest.raises(ValidationError):
            FileNode(
                name="d",
                kind=NodeKind.DIRECTORY,
                owner=ROOT,
                permissions=FilePermissions.of((ROOT,), (ROOT,)),
                children={},
                content="oops",
            )

    def test_nodes_are_frozen(self):
        node = make_file("a.txt", "a")
        with pytest.raises(ValidationError):
            node.content = "b"

    def test_with_content_returns_copy(self):
        node = make_file("a.txt", "a")
        updated = node.with_content("b")
        assert node.content == "a"
        assert updated.content == "b"

    def test_directory_execute_defaults_to_read(self):
        directory = make_directory("d", read=(ROOT, USER))
        assert directory.permissions.execute == frozenset({ROOT, USER})

    def test_child_lookup(self):
        directory = make_directory("d", [make_file("a.txt", "a")])
        assert directory.child("a.txt").content == "a"
        assert directory.child("missing") is None
        assert make_file("f", "x").child("anything") is None


class TestPermissionChecks:
    def test_read_membership(self):
        node = make_file("f", "x", read=(USER,))
        assert node_allows_read(node, USER)
        assert not node_allows_read(node, GUEST)

    def test_root_is_not_special(self):
        node = make_file("f", "x", read=(USER,), write=(USER,))
        assert not node_allows_read(node, ROOT)
        assert not node_allows_write(node, ROOT)

    def test_missing_node(self):
        result = check_read(None, "/nowhere", USER)
        assert not result.allowed
        assert result.error == "No such file or directory: /nowhere"

    def test_denied_message(self):
        node = make_file("f", "x")
        result = check_write(node, "/f", GUEST)
        assert not result.allowed
        assert result.error == "Permission denied: /f"

    def test_allowed(self):
        node = make_file("f", "x", read=(GUEST,))
        assert check_read(node, "/f", GUEST).allowed
