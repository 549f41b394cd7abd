"""Core infrastructure fixtures."""

from tests.fixtures.core.filesystems import (
    TEST_MACHINE,
    create_small_tree,
    create_store,
    create_world_store,
)
from tests.fixtures.core.shells import create_context, create_shell, run, texts
from tests.fixtures.core.times import UTC_TIME, create_scheduler, create_simulator_time

__all__ = [
    "TEST_MACHINE",
    "create_small_tree",
    "create_store",
    "create_world_store",
    "create_context",
    "create_shell",
    "run",
    "texts",
    "UTC_TIME",
    "create_scheduler",
    "create_simulator_time",
]
