"""Fixtures for filesystem trees and stores.

The small tree below is enough to exercise every permission rule without
depending on the built-in machines:

    /
    ├── etc/passwd          (root only)
    ├── home/alice/         (root, user)
    │   ├── notes.txt       (root, user read/write)
    │   └── .hidden         (root, user)
    ├── public/readme.txt   (everyone read)
    └── tmp/                (everyone write)
"""

import pytest

from models.filesystem import FileSystemStore
from models.machines import build_baselines
from models.nodes import FileNode, make_directory, make_file
from models.privilege import PrivilegeTier
from models.storage import InMemoryStorage, StorageBackend

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST

EVERYONE = (ROOT, USER, GUEST)
STAFF = (ROOT, USER)

TEST_MACHINE = "testbox"


def create_small_tree() -> FileNode:
    """Build the tree described in the module docstring."""
    return make_directory(
        "/",
        [
            make_directory(
                "etc", [make_file("passwd", "root:x:0")], read=EVERYONE
            ),
            make_directory(
                "home",
                [
                    make_directory(
                        "alice",
                        [
                            make_file("notes.txt", "hello", owner=USER, read=STAFF, write=STAFF),
                            make_file(".hidden", "secret", owner=USER, read=STAFF, write=STAFF),
                        ],
                        owner=USER,
                        read=STAFF,
                        write=STAFF,
                    )
                ],
                read=EVERYONE,
            ),
            make_directory(
                "public", [make_file("readme.txt", "public info", read=EVERYONE)], read=EVERYONE
            ),
            make_directory("tmp", read=EVERYONE, write=EVERYONE),
        ],
        read=EVERYONE,
    )


def create_store(
    storage: StorageBackend | None = None,
    baselines: dict[str, FileNode] | None = None,
) -> FileSystemStore:
    """Create a FileSystemStore over the small tree (or the given baselines)."""
    return FileSystemStore(
        storage=storage,
        baselines=baselines or {TEST_MACHINE: create_small_tree()},
    )


def create_world_store(storage: StorageBackend | None = None) -> FileSystemStore:
    """Create a FileSystemStore over every built-in machine."""
    return FileSystemStore(storage=storage, baselines=build_baselines())


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def small_store():
    """Provide a store over the small test tree without persistence."""
    return create_store()


@pytest.fixture
def persisted_store(memory_storage):
    """Provide a store over the small test tree backed by in-memory storage."""
    return create_store(storage=memory_storage)
