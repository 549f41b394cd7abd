"""Unit tests for the Scheduler.

The scheduler fires callbacks in (due_time, insertion) order as
simulated time advances.
"""

from datetime import timedelta

import pytest

from models.scheduler import CallbackStatus
from tests.fixtures.core.times import EPOCH


class TestScheduling:
    def test_fires_in_due_order(self, scheduler):
        fired = []
        scheduler.schedule(lambda: fired.append("late"), 300)
        scheduler.schedule(lambda: fired.append("early"), 100)
        scheduler.schedule(lambda: fired.append("middle"), 200)

        assert scheduler.advance(300) == 3
        assert fired == ["early", "middle", "late"]

    def test_equal_due_times_keep_insertion_order(self, scheduler):
        fired = []
        for name in ("a", "b", "c"):
            scheduler.schedule(lambda name=name: fired.append(name), 50)

        scheduler.advance(50)
        assert fired == ["a", "b", "c"]

    def test_clock_is_at_due_time_when_callback_runs(self, scheduler):
        seen = []
        scheduler.schedule(lambda: seen.append(scheduler.current_time), 120)

        scheduler.advance(500)
        assert seen == [EPOCH + timedelta(milliseconds=120)]
        assert scheduler.current_time == EPOCH + timedelta(milliseconds=500)

    def test_callbacks_outside_window_wait(self, scheduler):
        fired = []
        scheduler.schedule(lambda: fired.append(1), 1000)

        assert scheduler.advance(999) == 0
        assert fired == []
        assert scheduler.advance(1) == 1

    def test_chained_callbacks_inside_window(self, scheduler):
        fired = []

        def first():
            fired.append("first")
            scheduler.schedule(lambda: fired.append("second"), 100)

        scheduler.schedule(first, 100)
        scheduler.advance(200)
        assert fired == ["first", "second"]

    def test_negative_delay_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.schedule(lambda: None, -1)

    def test_negative_advance_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.advance(-5)

    def test_cancel(self, scheduler):
        fired = []
        callback_id = scheduler.schedule(lambda: fired.append(1), 10)

        assert scheduler.cancel(callback_id)
        assert not scheduler.cancel(callback_id)
        scheduler.advance(100)
        assert fired == []

    def test_failing_callback_does_not_stop_clock(self, scheduler):
        fired = []

        def boom():
            raise RuntimeError("boom")

        scheduler.schedule(boom, 10)
        scheduler.schedule(lambda: fired.append("after"), 20)

        assert scheduler.advance(20) == 2
        assert fired == ["after"]

    def test_run_until_idle(self, scheduler):
        fired = []
        scheduler.schedule(lambda: fired.append(1), 5000)
        scheduler.schedule(lambda: fired.append(2), 10)

        assert scheduler.run_until_idle() == 2
        assert fired == [2, 1]
        assert scheduler.next_due_time() is None

    def test_clear(self, scheduler):
        scheduler.schedule(lambda: None, 10)
        scheduler.clear()
        assert scheduler.pending_count == 0

    def test_to_dict(self, scheduler):
        scheduler.schedule(lambda: None, 10)
        summary = scheduler.to_dict()
        assert summary["pending_callbacks"] == 1
        assert summary["next_due_time"] == (EPOCH + timedelta(milliseconds=10)).isoformat()


class TestScheduledCallback:
    def test_status_transitions(self, scheduler):
        scheduler.schedule(lambda: None, 0)
        entry = scheduler.callbacks[0]
        scheduler.advance(0)

        assert entry.status == CallbackStatus.EXECUTED
        with pytest.raises(RuntimeError):
            entry.execute()

