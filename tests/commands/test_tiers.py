"""Unit tests for command tiering and the help/man renderers."""

import pytest

from commands import build_command_table
from commands.session import render_help, render_manual
from commands.tiers import (
    COMMAND_TIERS,
    apply_command_restrictions,
    can_run,
    get_accessible_command_names,
    required_tier,
)
from models.exceptions import PermissionDeniedError
from models.privilege import PrivilegeTier

GUEST = PrivilegeTier.GUEST
USER = PrivilegeTier.USER
ROOT = PrivilegeTier.ROOT


@pytest.fixture
def table(context):
    return build_command_table(context)


class TestTierTable:
    def test_unlisted_commands_are_guest(self):
        assert required_tier("ls") == GUEST
        assert required_tier("help") == GUEST

    def test_decrypt_is_root_only(self):
        assert COMMAND_TIERS["decrypt"] == ROOT
        assert not can_run("decrypt", USER)
        assert can_run("decrypt", ROOT)

    def test_network_commands_need_user(self):
        for name in ("ssh", "ftp", "nc", "nmap", "curl"):
            assert not can_run(name, GUEST)
            assert can_run(name, USER)

    def test_accessible_names_keep_order(self):
        names = ["ls", "ssh", "decrypt", "cat"]
        assert get_accessible_command_names(names, GUEST) == ["ls", "cat"]
        assert get_accessible_command_names(names, USER) == ["ls", "ssh", "cat"]
        assert get_accessible_command_names(names, ROOT) == names


class TestRestrictions:
    def test_restricted_command_keeps_identity(self, table):
        restricted = apply_command_restrictions(table, USER)
        assert restricted["decrypt"].name == "decrypt"
        assert restricted["decrypt"].manual == table["decrypt"].manual

    def test_restricted_command_raises(self, table):
        restricted = apply_command_restrictions(table, GUEST)
        with pytest.raises(PermissionDeniedError) as exc_info:
            restricted["ssh"]("guest", "192.168.1.1")
        assert exc_info.value.message == "permission denied: 'ssh' requires user privileges"

    def test_allowed_commands_pass_through(self, table):
        restricted = apply_command_restrictions(table, GUEST)
        assert restricted["ls"] is table["ls"]

    def test_original_table_untouched(self, table):
        apply_command_restrictions(table, GUEST)
        assert table["whoami"]() == "jshacker"
        assert "decrypt" in table


class TestHelpRendering:
    def test_help_is_sorted(self, table):
        output = render_help({name: table[name] for name in ("pwd", "cat")}).split("\n")
        assert output[:2] == ["Available commands:", ""]
        assert output[2].startswith(" cat(file")
        assert output[3] == " pwd() - Print current working directory"

    def test_manual_sections(self, table):
        output = render_manual(table["ssh"]).split("\n")
        assert output[0] == "SSH(1)"
        assert "    ssh - Secure shell connection to remote host" in output
        assert "ARGUMENTS" in output
        assert "    user (required)" in output
        assert "EXAMPLES" in output

    def test_manual_without_page(self, table):
        output = render_manual(table["pwd"])
        assert "No detailed manual available for this command." in output
