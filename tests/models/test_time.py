"""Unit tests for SimulatorTime."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from models.time import SimulatorTime, default_epoch
from tests.fixtures.core.times import UTC_TIME, create_simulator_time


class TestSimulatorTimeInstantiation:
    def test_default_epoch(self):
        assert SimulatorTime().current_time == default_epoch()

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValidationError):
            SimulatorTime(current_time=datetime(2025, 1, 1))

    def test_factory_constant(self):
        assert UTC_TIME.current_time == datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestAdvance:
    def test_advance(self, simulator_time):
        start = simulator_time.current_time
        simulator_time.advance(timedelta(seconds=5))
        assert simulator_time.current_time == start + timedelta(seconds=5)

    def test_advance_backwards_rejected(self, simulator_time):
        with pytest.raises(ValueError, match="backwards"):
            simulator_time.advance(timedelta(seconds=-1))

    def test_after_does_not_move_clock(self, simulator_time):
        start = simulator_time.current_time
        assert simulator_time.after(250) == start + timedelta(milliseconds=250)
        assert simulator_time.current_time == start


class TestSetTime:
    def test_set_time_forward(self):
        time_obj = create_simulator_time()
        target = time_obj.current_time + timedelta(hours=1)
        time_obj.set_time(target)
        assert time_obj.current_time == target

    def test_set_time_backwards_rejected(self):
        time_obj = create_simulator_time()
        with pytest.raises(ValueError):
            time_obj.set_time(time_obj.current_time - timedelta(seconds=1))

    def test_set_time_naive_rejected(self):
        time_obj = create_simulator_time()
        with pytest.raises(ValueError, match="timezone-aware"):
            time_obj.set_time(datetime(2030, 1, 1))

    def test_to_dict(self):
        assert create_simulator_time().to_dict() == {"current_time": "2024-01-01T00:00:00+00:00"}
