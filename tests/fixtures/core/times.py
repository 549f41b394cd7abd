"""Fixtures for SimulatorTime and Scheduler."""

from datetime import datetime, timezone

import pytest

from models.scheduler import Scheduler
from models.time import SimulatorTime

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def create_simulator_time(current_time: datetime | None = None) -> SimulatorTime:
    """Create a SimulatorTime at a fixed instant.

    Args:
        current_time: Current simulated time (defaults to 2024-01-01 UTC).

    Returns:
        SimulatorTime instance ready for testing.
    """
    return SimulatorTime(current_time=current_time or EPOCH)


def create_scheduler(current_time: datetime | None = None) -> Scheduler:
    """Create an empty Scheduler on a fresh clock."""
    return Scheduler(time=create_simulator_time(current_time))


UTC_TIME = create_simulator_time(
    current_time=datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
)


@pytest.fixture
def simulator_time():
    return create_simulator_time()


@pytest.fixture
def scheduler():
    """Provide an empty scheduler starting at the fixed epoch."""
    return create_scheduler()
