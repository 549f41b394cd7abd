"""Unit tests for FileSystemStore.

Covers lookups, ACL-checked reads and writes, runtime file creation,
structural sharing between tree versions, and the patch log with its
replay on load.
"""

from models.filesystem import FileSystemPatch
from models.privilege import PrivilegeTier
from tests.fixtures.core.filesystems import TEST_MACHINE, create_store

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST


class TestLookups:
    def test_get_node_normalizes(self, small_store):
        node = small_store.get_node(TEST_MACHINE, "//home/./alice/../alice/notes.txt")
        assert node is not None
        assert node.content == "hello"

    def test_unknown_machine(self, small_store):
        assert small_store.get_node("nowhere", "/") is None

    def test_indexing_into_file(self, small_store):
        assert small_store.get_node(TEST_MACHINE, "/public/readme.txt/x") is None

    def test_resolve_node_relative(self, small_store):
        node = small_store.resolve_node(TEST_MACHINE, "notes.txt", "/home/alice")
        assert node.name == "notes.txt"

    def test_access_checks_resolve_against_cwd(self, small_store):
        assert small_store.can_read(TEST_MACHINE, "notes.txt", "/home/alice", USER).allowed
        assert small_store.can_write(TEST_MACHINE, "../../tmp", "/home/alice", GUEST).allowed

    def test_access_errors_name_resolved_path(self, small_store):
        denied = small_store.can_read(TEST_MACHINE, "passwd", "/etc", USER)
        assert denied.error == "Permission denied: /etc/passwd"
        missing = small_store.can_read(TEST_MACHINE, "notes.txt", "/", USER)
        assert missing.error == "No such file or directory: /notes.txt"

    def test_list_directory(self, small_store):
        assert small_store.list_directory(TEST_MACHINE, "/home/alice", USER) == [".hidden", "notes.txt"]
        assert small_store.list_directory(TEST_MACHINE, "/home/alice", GUEST) is None
        assert small_store.list_directory(TEST_MACHINE, "/public/readme.txt", USER) is None

    def test_read_file(self, small_store):
        assert small_store.read_file(TEST_MACHINE, "/public/readme.txt", GUEST) == "public info"
        assert small_store.read_file(TEST_MACHINE, "/etc/passwd", USER) is None
        assert small_store.read_file(TEST_MACHINE, "/public", USER) is None


class TestWriteFile:
    def test_write_updates_content_and_records_patch(self, small_store):
        result = small_store.write_file(TEST_MACHINE, "/home/alice/notes.txt", "bye", USER)

        assert result.allowed
        assert small_store.read_file(TEST_MACHINE, "/home/alice/notes.txt", USER) == "bye"
        patch = small_store.get_patch(TEST_MACHINE, "/home/alice/notes.txt")
        assert patch.content == "bye"
        assert patch.owner == USER

    def test_denied_write_changes_nothing(self, small_store):
        before = small_store.get_root(TEST_MACHINE)
        result = small_store.write_file(TEST_MACHINE, "/etc/passwd", "pwned", USER)

        assert not result.allowed
        assert "Permission denied" in result.error
        assert small_store.get_root(TEST_MACHINE) is before
        assert small_store.patches == []

    def test_write_missing_file(self, small_store):
        result = small_store.write_file(TEST_MACHINE, "/tmp/none.txt", "x", USER)
        assert not result.allowed
        assert "No such file or directory" in result.error

    def test_patches_are_upserted(self, small_store):
        small_store.write_file(TEST_MACHINE, "/home/alice/notes.txt", "one", USER)
        small_store.write_file(TEST_MACHINE, "/home/alice/notes.txt", "two", USER)

        assert len(small_store.patches) == 1
        assert small_store.patches[0].content == "two"

    def test_untouched_subtrees_are_shared(self, small_store):
        old_root = small_store.get_root(TEST_MACHINE)
        old_public = old_root.child("public")
        old_notes = old_root.child("home").child("alice").child("notes.txt")

        small_store.write_file(TEST_MACHINE, "/home/alice/notes.txt", "changed", USER)

        new_root = small_store.get_root(TEST_MACHINE)
        assert new_root is not old_root
        assert new_root.child("public") is old_public
        assert old_notes.content == "hello"


class TestCreateFile:
    def test_create_in_writable_directory(self, small_store):
        result = small_store.create_file(TEST_MACHINE, "/tmp/new.txt", "data", GUEST)

        assert result.allowed
        node = small_store.get_node(TEST_MACHINE, "/tmp/new.txt")
        assert node.owner == GUEST
        assert node.permissions.read == frozenset({ROOT, GUEST})
        assert node.permissions.write == frozenset({ROOT, GUEST})

    def test_create_in_read_only_directory(self, small_store):
        result = small_store.create_file(TEST_MACHINE, "/public/new.txt", "data", USER)
        assert not result.allowed
        assert small_store.get_node(TEST_MACHINE, "/public/new.txt") is None

    def test_create_existing_name(self, small_store):
        result = small_store.create_file(TEST_MACHINE, "/home/alice/notes.txt", "x", USER)
        assert not result.allowed
        assert result.error.startswith("File exists")

    def test_create_without_parent(self, small_store):
        result = small_store.create_file(TEST_MACHINE, "/missing/dir/x.txt", "x", ROOT)
        assert not result.allowed


class TestPersistence:
    def test_mutations_are_saved(self, persisted_store, memory_storage):
        persisted_store.create_file(TEST_MACHINE, "/tmp/a.txt", "a", USER)
        persisted_store.write_file(TEST_MACHINE, "/tmp/a.txt", "b", USER)

        saved = memory_storage.load_patches()
        assert [(p.path, p.content) for p in saved] == [("/tmp/a.txt", "b")]

    def test_load_replays_patches(self, persisted_store, memory_storage):
        persisted_store.create_file(TEST_MACHINE, "/tmp/a.txt", "a", USER)
        persisted_store.write_file(TEST_MACHINE, "/home/alice/notes.txt", "edited", USER)

        reloaded = create_store(storage=memory_storage)
        applied = reloaded.load()

        assert applied == 2
        assert reloaded.read_file(TEST_MACHINE, "/tmp/a.txt", USER) == "a"
        assert reloaded.read_file(TEST_MACHINE, "/home/alice/notes.txt", USER) == "edited"
        assert reloaded.get_node(TEST_MACHINE, "/tmp/a.txt").owner == USER

    def test_load_skips_orphan_patches(self, memory_storage):
        memory_storage.save_patches(
            [
                FileSystemPatch(machine_id="nowhere", path="/x", content="x", owner=ROOT),
                FileSystemPatch(machine_id=TEST_MACHINE, path="/no/parent.txt", content="x", owner=ROOT),
                FileSystemPatch(machine_id=TEST_MACHINE, path="/public", content="x", owner=ROOT),
                FileSystemPatch(machine_id=TEST_MACHINE, path="/tmp/ok.txt", content="ok", owner=ROOT),
            ]
        )
        store = create_store(storage=memory_storage)

        assert store.load() == 1
        assert store.read_file(TEST_MACHINE, "/tmp/ok.txt", ROOT) == "ok"
        assert store.get_node(TEST_MACHINE, "/public").is_directory

    def test_load_with_malformed_storage_keeps_baseline(self, memory_storage):
        memory_storage.set_raw(patches={"not": "a list"})
        store = create_store(storage=memory_storage)

        assert store.load() == 0
        assert store.patches == []

    def test_reset_restores_baselines(self, persisted_store, memory_storage):
        persisted_store.create_file(TEST_MACHINE, "/tmp/a.txt", "a", USER)
        persisted_store.reset()

        assert persisted_store.get_node(TEST_MACHINE, "/tmp/a.txt") is None
        assert persisted_store.patches == []
        assert memory_storage.load_patches() == []

    def test_snapshot(self, small_store):
        small_store.create_file(TEST_MACHINE, "/tmp/a.txt", "a", USER)
        snapshot = small_store.get_snapshot()

        assert snapshot["machines"] == [TEST_MACHINE]
        assert snapshot["patch_count"] == 1
        assert snapshot["patches"][0]["owner"] == "user"
