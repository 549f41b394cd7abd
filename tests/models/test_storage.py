"""Unit tests for the storage backends."""

import json

import pytest

from models.filesystem import FileSystemPatch
from models.privilege import PrivilegeTier
from models.session import PersistedSessionState, Session, SessionSnapshot
from models.storage import InMemoryStorage, JsonFileStorage


def make_state() -> PersistedSessionState:
    return PersistedSessionState(
        session=Session(username="guest", tier=PrivilegeTier.GUEST, machine="192.168.1.1", cwd="/home/guest"),
        session_stack=[
            SessionSnapshot(username="jshacker", tier=PrivilegeTier.USER, machine="localhost", cwd="/tmp")
        ],
    )


def make_patch() -> FileSystemPatch:
    return FileSystemPatch(
        machine_id="localhost", path="/tmp/a.txt", content="a", owner=PrivilegeTier.USER
    )


@pytest.fixture(params=["memory", "json"])
def backend(request, tmp_path):
    """Provide each backend in turn."""
    if request.param == "memory":
        return InMemoryStorage()
    return JsonFileStorage(tmp_path / "state")


class TestStorageBackends:
    def test_empty_backend(self, backend):
        assert backend.load_patches() is None
        assert backend.load_session_state() is None

    def test_session_state_survives(self, backend):
        backend.save_session_state(make_state())
        loaded = backend.load_session_state()

        assert loaded.session.username == "guest"
        assert loaded.session_stack[0].machine == "localhost"

    def test_patches_survive(self, backend):
        backend.save_patches([make_patch()])
        assert backend.load_patches() == [make_patch()]

    def test_clear(self, backend):
        backend.save_patches([make_patch()])
        backend.save_session_state(make_state())
        backend.clear()

        assert backend.load_patches() is None
        assert backend.load_session_state() is None


class TestMalformedData:
    def test_in_memory_bad_patches(self):
        storage = InMemoryStorage()
        storage.set_raw(patches=[{"machine_id": "localhost"}])
        assert storage.load_patches() is None

    def test_in_memory_bad_session(self):
        storage = InMemoryStorage()
        storage.set_raw(session_state={"session": "nope"})
        assert storage.load_session_state() is None

    def test_json_file_not_json(self, tmp_path):
        (tmp_path / JsonFileStorage.PATCHES_FILE).write_text("{not json", encoding="utf-8")
        storage = JsonFileStorage(tmp_path)
        assert storage.load_patches() is None

    def test_json_both_exclusive_modes_rejected(self, tmp_path):
        state = make_state().model_dump(mode="json")
        state["ftp_session"] = {
            "remote_machine": "192.168.1.50",
            "remote_user": "ftpuser",
            "remote_tier": "user",
            "remote_cwd": "/home/ftpuser",
            "origin_machine": "localhost",
            "origin_user": "jshacker",
            "origin_tier": "user",
            "origin_cwd": "/home/jshacker",
        }
        state["nc_session"] = {
            "target_machine": "192.168.1.75",
            "target_port": 4444,
            "service_name": "backdoor",
            "username": "www-data",
            "tier": "user",
            "cwd": "/home/www-data",
        }
        (tmp_path / JsonFileStorage.SESSION_FILE).write_text(json.dumps(state), encoding="utf-8")

        assert JsonFileStorage(tmp_path).load_session_state() is None


class TestWriteFailures:
    @pytest.fixture
    def blocked(self, tmp_path):
        """A JsonFileStorage whose directory path is occupied by a regular file."""
        blocker = tmp_path / "state"
        blocker.write_text("not a directory", encoding="utf-8")
        return JsonFileStorage(blocker)

    def test_save_session_state_is_logged(self, blocked, caplog):
        blocked.save_session_state(make_state())
        assert "Could not write" in caplog.text
        assert blocked.load_session_state() is None

    def test_save_patches_is_logged(self, blocked, caplog):
        blocked.save_patches([make_patch()])
        assert "Could not write" in caplog.text
        assert blocked.load_patches() is None

    def test_clear_does_not_raise(self, blocked):
        blocked.clear()
        assert blocked.directory.read_text(encoding="utf-8") == "not a directory"
