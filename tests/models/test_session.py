"""Unit tests for the session state machine.

Covers the LIFO session stack of nested ssh logins, the mutually
exclusive FTP and nc modes, and persistence of every transition.
"""

import pytest

from models.exceptions import ExclusiveModeError, NoRemoteSessionError
from models.privilege import PrivilegeTier
from models.session import ExclusiveMode, Session, SessionStateMachine
from models.storage import InMemoryStorage

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST

DEFAULT = Session(username="jshacker", tier=USER, machine="localhost", cwd="/home/jshacker")


@pytest.fixture
def machine():
    return SessionStateMachine(DEFAULT, storage=InMemoryStorage())


class TestLocalTransitions:
    def test_initial_state(self, machine):
        assert machine.session == DEFAULT
        assert machine.depth == 0
        assert machine.mode == ExclusiveMode.NONE
        assert machine.prompt == "jshacker@localhost>"

    def test_set_cwd_normalizes(self, machine):
        machine.set_cwd("/var//log/")
        assert machine.session.cwd == "/var/log"

    def test_switch_user_keeps_machine_and_stack(self, machine):
        machine.push_remote_login("guest", GUEST, "192.168.1.1", "/home/guest")
        machine.switch_user("admin", ROOT, "/root")

        assert machine.session.username == "admin"
        assert machine.session.machine == "192.168.1.1"
        assert machine.session.cwd == "/root"
        assert machine.depth == 1


class TestSessionStack:
    def test_nested_logins_unwind_in_order(self, machine):
        machine.set_cwd("/tmp")
        machine.push_remote_login("guest", GUEST, "192.168.1.1", "/home/guest")
        machine.push_remote_login("guest", GUEST, "192.168.1.75", "/home/guest")

        assert machine.depth == 2
        assert machine.exit_remote().machine == "192.168.1.1"
        restored = machine.exit_remote()
        assert restored == DEFAULT.model_copy(update={"cwd": "/tmp"})
        assert machine.depth == 0

    def test_exit_without_remote_session(self, machine):
        with pytest.raises(NoRemoteSessionError) as exc_info:
            machine.exit_remote()
        assert exc_info.value.message == "exit: not connected to a remote machine"
        assert machine.session == DEFAULT

    def test_ssh_refused_in_exclusive_mode(self, machine):
        machine.enter_nc("192.168.1.75", 4444, "backdoor", "www-data", USER, "/home/www-data")
        with pytest.raises(ExclusiveModeError):
            machine.push_remote_login("guest", GUEST, "192.168.1.1", "/home/guest")
        assert machine.depth == 0


class TestExclusiveModes:
    def test_ftp_records_origin(self, machine):
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")

        ftp = machine.ftp_session
        assert machine.mode == ExclusiveMode.FTP
        assert machine.prompt == "ftp>"
        assert ftp.origin_machine == "localhost"
        assert ftp.origin_cwd == "/home/jshacker"
        assert machine.session == DEFAULT

    def test_ftp_and_nc_are_exclusive(self, machine):
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")
        with pytest.raises(ExclusiveModeError):
            machine.enter_nc("192.168.1.75", 4444, "backdoor", "www-data", USER, "/home/www-data")
        assert machine.nc_session is None

    def test_ftp_cwds_are_independent(self, machine):
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")
        machine.set_ftp_remote_cwd("/srv/ftp")
        machine.set_ftp_origin_cwd("/tmp")

        assert machine.ftp_session.remote_cwd == "/srv/ftp"
        assert machine.ftp_session.origin_cwd == "/tmp"
        assert machine.session.cwd == "/home/jshacker"

    def test_exit_ftp(self, machine):
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")
        machine.exit_ftp()
        assert machine.mode == ExclusiveMode.NONE

    def test_nc_prompt_and_cwd(self, machine):
        machine.enter_nc("192.168.1.75", 4444, "backdoor", "www-data", USER, "/home/www-data")
        machine.set_nc_cwd("/opt/tools/")

        assert machine.prompt == "$"
        assert machine.nc_session.cwd == "/opt/tools"
        machine.exit_nc()
        assert machine.mode == ExclusiveMode.NONE


class TestPersistence:
    def test_transitions_are_persisted(self):
        storage = InMemoryStorage()
        machine = SessionStateMachine(DEFAULT, storage=storage)
        machine.push_remote_login("guest", GUEST, "192.168.1.1", "/home/guest")
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")

        restored = SessionStateMachine(DEFAULT, storage=storage)
        assert restored.restore()
        assert restored.session.machine == "192.168.1.1"
        assert restored.depth == 1
        assert restored.mode == ExclusiveMode.FTP

    def test_restore_without_data(self, machine):
        assert not machine.restore()
        assert machine.session == DEFAULT

    def test_reset(self, machine):
        machine.push_remote_login("guest", GUEST, "192.168.1.1", "/home/guest")
        machine.enter_ftp("192.168.1.50", "ftpuser", USER, "/home/ftpuser")
        machine.reset()

        assert machine.session == DEFAULT
        assert machine.depth == 0
        assert machine.mode == ExclusiveMode.NONE
