"""Unit tests for the filesystem commands run directly against a CommandContext."""

import pytest

from commands import build_command_table
from commands.filesystem import extract_strings
from models.exceptions import CommandValidationError, NotFoundError, PermissionDeniedError
from models.privilege import PrivilegeTier


@pytest.fixture
def table(context):
    return build_command_table(context)


class TestLs:
    def test_home_listing(self, table):
        assert table["ls"]() == "README.txt  downloads/"

    def test_hidden_flag(self, table):
        assert table["ls"](".", "-a") == ".bash_history  .mission  README.txt  downloads/"

    def test_file_argument_returns_name(self, table):
        assert table["ls"]("README.txt") == "README.txt"

    def test_missing_path(self, table):
        with pytest.raises(NotFoundError, match="cannot access '/nope'"):
            table["ls"]("/nope")

    def test_unreadable_directory(self, table):
        with pytest.raises(PermissionDeniedError, match="cannot open directory '/root'"):
            table["ls"]("/root")


class TestCd:
    def test_relative_and_parent(self, context, table):
        table["cd"]("downloads")
        assert context.cwd == "/home/jshacker/downloads"
        table["cd"]("..")
        assert context.cwd == "/home/jshacker"

    def test_no_argument_goes_home(self, context, table):
        table["cd"]("/tmp")
        table["cd"]()
        assert context.cwd == "/home/jshacker"

    def test_into_file(self, table):
        with pytest.raises(CommandValidationError, match="Not a directory"):
            table["cd"]("README.txt")

    def test_denied_leaves_cwd(self, context, table):
        with pytest.raises(PermissionDeniedError):
            table["cd"]("/root")
        assert context.cwd == "/home/jshacker"


class TestCat:
    def test_reads_file(self, table):
        assert "FLAG{welcome_hacker}" in table["cat"]("README.txt")

    def test_missing_operand(self, table):
        with pytest.raises(CommandValidationError, match="missing file operand"):
            table["cat"]()

    def test_directory(self, table):
        with pytest.raises(CommandValidationError, match="Is a directory"):
            table["cat"]("downloads")

    def test_unreadable(self, table):
        with pytest.raises(PermissionDeniedError, match="Permission denied"):
            table["cat"]("/etc/crontab")


class TestSimpleCommands:
    def test_pwd_and_whoami(self, table):
        assert table["pwd"]() == "/home/jshacker"
        assert table["whoami"]() == "jshacker"

    def test_echo(self, table):
        assert table["echo"]("hi") == "hi"
        assert table["echo"](3) == "3"
        assert table["echo"](None) == "null"
        assert table["echo"]() == "undefined"

    def test_surplus_arguments_are_ignored(self, table):
        assert table["pwd"]("x") == "/home/jshacker"
        assert table["whoami"](1, 2) == "jshacker"
        assert "FLAG{welcome_hacker}" in table["cat"]("README.txt", "extra")


class TestStrings:
    def test_extract_strings(self):
        assert extract_strings("\x00abcd\x01ab\x02hello world\x7f") == ["abcd", "hello world"]

    def test_minimum_length(self):
        assert extract_strings("ab\x00abc", min_length=3) == ["abc"]

    def test_strings_command(self, context, table):
        context.store.create_file(
            "localhost", "/tmp/bin", "\x7fELF\x00secret-key\x00", PrivilegeTier.USER
        )
        assert table["strings"]("/tmp/bin") == "secret-key"

    def test_invalid_minimum(self, table):
        with pytest.raises(CommandValidationError, match="between 1 and 100"):
            table["strings"]("README.txt", 0)


class TestNode:
    def test_runs_through_script_runner(self, context, table):
        context.store.create_file("localhost", "/tmp/s.js", "echo(1)", PrivilegeTier.USER)
        context.script_runner = lambda source: f"ran {source}"
        assert table["node"]("/tmp/s.js") == "ran echo(1)"

    def test_empty_script(self, context, table):
        context.store.create_file("localhost", "/tmp/empty.js", "", PrivilegeTier.USER)
        assert table["node"]("/tmp/empty.js") is None

    def test_without_runner(self, context, table):
        context.store.create_file("localhost", "/tmp/s.js", "echo(1)", PrivilegeTier.USER)
        with pytest.raises(CommandValidationError, match="script runner unavailable"):
            table["node"]("/tmp/s.js")
