"""Unit tests for the built-in world: machine baselines and their puzzles."""

import pytest

from models.machines import build_network, hostname_for, machine_users
from models.privilege import PrivilegeTier
from tests.fixtures.core.filesystems import create_world_store

ROOT = PrivilegeTier.ROOT
USER = PrivilegeTier.USER
GUEST = PrivilegeTier.GUEST

SHADOW = "10.66.66.1"
VOID = "10.66.66.2"
ABYSS = "10.66.66.3"


@pytest.fixture(scope="module")
def world():
    return create_world_store()


class TestBaselines:
    def test_every_machine_has_a_tree(self, world):
        for machine_id in ("localhost", "192.168.1.1", "203.0.113.42", SHADOW, VOID, ABYSS):
            assert world.get_root(machine_id) is not None

    def test_hidden_hostnames_and_users(self, world):
        assert hostname_for(SHADOW) == "shadow"
        assert [user.username for user in machine_users(ABYSS)] == ["root", "phantom", "guest"]
        assert world.read_file(VOID, "/etc/hostname", GUEST) == "void\n"

    def test_hidden_nodes_are_not_routed(self):
        view = build_network().view("203.0.113.42")
        assert view.get_machine(SHADOW) is None
        assert view.resolve_domain("shadow.hidden") is None


class TestShadow:
    def test_exports_are_public(self, world):
        report = world.read_file(SHADOW, "/srv/ftp/exports/system_report.txt", GUEST)
        assert "Current password: c0ntr0l_pl4n3" in report

    def test_diagnostics_are_private(self, world):
        assert world.list_directory(SHADOW, "/home/operator", GUEST) is None
        assert world.list_directory(SHADOW, "/home/operator/diagnostics", USER) == [
            "README.txt",
            "access.log",
            "check_logs.js",
        ]

    def test_access_log_tags_spell_flag(self, world):
        log = world.read_file(SHADOW, "/home/operator/diagnostics/access.log", USER)
        rows = [line.split("|") for line in log.splitlines()]
        assert "".join(row[3] for row in rows) == "FLAG{shadow_debugger}"
        assert rows[2][2] == "403"


class TestVoid:
    def test_anomalous_rows_spell_flag(self, world):
        fragments = []
        for index in range(1, 6):
            table = world.read_file(VOID, f"/home/dbadmin/recovery/table_{index:02d}.csv", USER)
            fragments.append(table.splitlines()[13].split("|")[3])
        assert "".join(fragments) == "FLAG{void_data_miner}"

    def test_tables_need_user_tier(self, world):
        assert world.read_file(VOID, "/home/dbadmin/recovery/table_01.csv", GUEST) is None


class TestAbyss:
    def test_payload_xors_to_flag(self, world):
        key = world.read_file(ABYSS, "/home/phantom/vault/key.txt", USER)
        payload = world.read_file(ABYSS, "/home/phantom/vault/encoded_payload.txt", USER)

        decoded = "".join(
            chr(int(byte, 16) ^ ord(key[index % len(key)]))
            for index, byte in enumerate(payload.split())
        )
        assert decoded == "FLAG{abyss_decryptor}"

    def test_root_history_is_root_only(self, world):
        assert world.read_file(ABYSS, "/root/.bash_history", USER) is None
        assert "netstat -tlnp" in world.read_file(ABYSS, "/root/.bash_history", ROOT)
