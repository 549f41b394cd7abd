"""Unit tests for path resolution helpers."""

import pytest

from models.paths import basename, join_path, normalize_path, parent_path, resolve_path, split_path


class TestNormalizePath:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/", "/"),
            ("", "/"),
            ("//home///jshacker/", "/home/jshacker"),
            ("/home/./jshacker", "/home/jshacker"),
            ("/home/jshacker/../guest", "/home/guest"),
            ("/..", "/"),
            ("/../../etc", "/etc"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_path(raw) == expected

    def test_normalize_is_idempotent(self):
        once = normalize_path("/a/b/../c/./d//")
        assert normalize_path(once) == once


class TestResolvePath:
    def test_absolute_path_ignores_cwd(self):
        assert resolve_path("/etc/passwd", "/home/jshacker") == "/etc/passwd"

    def test_dot_and_empty_resolve_to_cwd(self):
        assert resolve_path(".", "/home/jshacker") == "/home/jshacker"
        assert resolve_path("", "/home/jshacker") == "/home/jshacker"

    def test_relative_path_appends(self):
        assert resolve_path("downloads/todo.txt", "/home/jshacker") == "/home/jshacker/downloads/todo.txt"

    def test_parent_never_goes_above_root(self):
        assert resolve_path("../../..", "/home") == "/"

    def test_parent_segment(self):
        assert resolve_path("..", "/home/jshacker") == "/home"


class TestPathParts:
    def test_split_drops_empty_segments(self):
        assert split_path("//a//b/") == ["a", "b"]

    def test_parent_and_basename(self):
        assert parent_path("/home/jshacker/notes.txt") == "/home/jshacker"
        assert basename("/home/jshacker/notes.txt") == "notes.txt"

    def test_root_parts(self):
        assert parent_path("/") == "/"
        assert basename("/") == ""

    def test_join(self):
        assert join_path("/tmp", "x.txt") == "/tmp/x.txt"
        assert join_path("/", "x.txt") == "/x.txt"
