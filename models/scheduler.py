"""Deferred-callback scheduler driven by simulated time."""

import bisect
import itertools
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from models.time import SimulatorTime

logger = logging.getLogger(__name__)


class CallbackStatus(str, Enum):
    """Status of a scheduled callback."""

    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ScheduledCallback(BaseModel):
    """A unit of deferred work.

    Args:
        callback_id: Unique identifier used for cancellation.
        due_time: Simulated instant at which the callback fires.
        sequence: Insertion counter breaking ties between equal due times.
        callback: Zero-argument callable to run.
        status: Current execution state.
        error_message: Error details if status is FAILED.
    """

    callback_id: str = Field(default_factory=lambda: str(uuid4()))
    due_time: datetime = Field(description="When the callback fires (simulated time)")
    sequence: int = Field(description="Tie-breaker for equal due times")
    callback: Callable[[], Any] = Field(description="Work to run")
    status: CallbackStatus = Field(default=CallbackStatus.PENDING)
    error_message: Optional[str] = None

    class Config:
        arbitrary_types_allowed = True

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.due_time, self.sequence)

    def execute(self) -> None:
        """Run the callback.

        A failing callback is recorded as FAILED and logged; the error is
        not re-raised so the clock keeps running.
        """
        if self.status != CallbackStatus.PENDING:
            raise RuntimeError(
                f"Cannot execute callback {self.callback_id} with status {self.status}"
            )
        try:
            self.callback()
            self.status = CallbackStatus.EXECUTED
        except Exception as e:
            self.status = CallbackStatus.FAILED
            self.error_message = f"{type(e).__name__}: {str(e)}"
            logger.error(f"Scheduled callback {self.callback_id} failed: {e}", exc_info=True)


class Scheduler(BaseModel):
    """Queue of pending callbacks ordered by (due_time, sequence).

    Args:
        time: Simulated clock the scheduler advances.
        callbacks: Pending callbacks in firing order.
    """

    time: SimulatorTime = Field(default_factory=SimulatorTime)
    callbacks: list[ScheduledCallback] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True

    def __init__(self, **data):
        """Initialize with private attributes."""
        super().__init__(**data)
        self._sequence = itertools.count()

    @property
    def current_time(self) -> datetime:
        return self.time.current_time

    @property
    def pending_count(self) -> int:
        return len(self.callbacks)

    def next_due_time(self) -> Optional[datetime]:
        """Due time of the next pending callback, or None if idle."""
        return self.callbacks[0].due_time if self.callbacks else None

    def schedule(self, callback: Callable[[], Any], delay_ms: int = 0) -> str:
        """Queue a callback ``delay_ms`` simulated milliseconds from now.

        Args:
            callback: Zero-argument callable.
            delay_ms: Non-negative delay in milliseconds.

        Returns:
            The callback id, usable with cancel().

        Raises:
            ValueError: If delay_ms is negative.
        """
        if delay_ms < 0:
            raise ValueError(f"Delay must be non-negative, got {delay_ms}")

        entry = ScheduledCallback(
            due_time=self.time.after(delay_ms),
            sequence=next(self._sequence),
            callback=callback,
        )
        keys = [existing.sort_key for existing in self.callbacks]
        self.callbacks.insert(bisect.bisect_right(keys, entry.sort_key), entry)
        return entry.callback_id

    def cancel(self, callback_id: str) -> bool:
        """Remove a pending callback.

        Returns:
            True if the callback was pending and is now cancelled.
        """
        for index, entry in enumerate(self.callbacks):
            if entry.callback_id == callback_id:
                entry.status = CallbackStatus.CANCELLED
                del self.callbacks[index]
                return True
        return False

    def _pop_due(self, until: datetime) -> Optional[ScheduledCallback]:
        if self.callbacks and self.callbacks[0].due_time <= until:
            return self.callbacks.pop(0)
        return None

    def advance(self, milliseconds: int) -> int:
        """Advance simulated time, firing every callback due in the window.

        Callbacks fire in (due_time, sequence) order, and the clock is
        moved to each callback's due time before it runs. Callbacks that
        schedule further callbacks inside the window are fired too.

        Args:
            milliseconds: Non-negative amount of simulated time.

        Returns:
            Number of callbacks fired.

        Raises:
            ValueError: If milliseconds is negative.
        """
        if milliseconds < 0:
            raise ValueError("Cannot advance time backwards")

        target = self.time.after(milliseconds)
        fired = 0
        while (entry := self._pop_due(target)) is not None:
            if entry.due_time > self.current_time:
                self.time.set_time(entry.due_time)
            logger.debug(f"Firing callback {entry.callback_id} at {entry.due_time.isoformat()}")
            entry.execute()
            fired += 1

        if target > self.current_time:
            self.time.set_time(target)
        return fired

    def run_until_idle(self, max_callbacks: int = 10_000) -> int:
        """Fire callbacks until the queue is empty.

        Args:
            max_callbacks: Safety limit against callbacks that reschedule forever.

        Returns:
            Number of callbacks fired.
        """
        fired = 0
        while self.callbacks and fired < max_callbacks:
            next_due = self.callbacks[0].due_time
            delta = max(next_due - self.current_time, timedelta(0))
            fired += self.advance(int(delta / timedelta(milliseconds=1)))
        if self.callbacks:
            logger.warning(f"Scheduler still has {len(self.callbacks)} callbacks after {fired} runs")
        return fired

    def clear(self) -> None:
        for entry in self.callbacks:
            entry.status = CallbackStatus.CANCELLED
        self.callbacks = []

    def to_dict(self) -> dict:
        next_due = self.next_due_time()
        return {
            **self.time.to_dict(),
            "pending_callbacks": self.pending_count,
            "next_due_time": next_due.isoformat() if next_due else None,
        }
