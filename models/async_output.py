"""Async command-output protocol.

An async command returns an AsyncOutput handle. start() runs the
command body, which emits an acknowledgement line right away and then
schedules further work on the simulated clock through its cancellation
token. cancel() makes every later callback inert: no lines, no
completion, no follow-up.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from models.results import FollowUp
    from models.scheduler import Scheduler

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]
CompleteCallback = Callable[[Optional["FollowUp"]], None]


class CancellationToken:
    """Tracks the callbacks an async command scheduled so they can be dropped.

    Args:
        scheduler: Scheduler the deferred work runs on.
    """

    def __init__(self, scheduler: "Scheduler"):
        self._scheduler = scheduler
        self._callback_ids: list[str] = []
        self.cancelled = False

    def schedule(self, fn: Callable[[], Any], delay_ms: int) -> None:
        """Run ``fn`` after ``delay_ms`` unless cancelled first."""
        if self.cancelled:
            return

        def guarded() -> None:
            if not self.cancelled:
                fn()

        self._callback_ids.append(self._scheduler.schedule(guarded, delay_ms))

    def cancel(self) -> None:
        self.cancelled = True
        for callback_id in self._callback_ids:
            self._scheduler.cancel(callback_id)
        self._callback_ids = []


AsyncBody = Callable[[LineCallback, CompleteCallback, CancellationToken], None]


class AsyncOutput:
    """Handle returned by async commands.

    Args:
        body: Function receiving (emit, complete, token). It must only
            defer work through ``token.schedule``.
        scheduler: Scheduler the deferred work runs on.
        label: Command name, used in log messages.
    """

    def __init__(self, body: AsyncBody, scheduler: "Scheduler", label: str = "async"):
        self._body = body
        self.token = CancellationToken(scheduler)
        self.label = label
        self.started = False
        self.completed = False

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def start(self, on_line: LineCallback, on_complete: CompleteCallback) -> None:
        """Begin streaming output.

        ``on_complete`` fires at most once, and nothing fires after cancel().

        Raises:
            RuntimeError: If the handle was already started.
        """
        if self.started:
            raise RuntimeError(f"{self.label}: async output already started")
        self.started = True
        if self.cancelled:
            return

        def emit(line: str) -> None:
            if not self.cancelled and not self.completed:
                on_line(line)

        def complete(follow_up: Optional["FollowUp"] = None) -> None:
            if self.cancelled or self.completed:
                return
            self.completed = True
            on_complete(follow_up)

        self._body(emit, complete, self.token)

    def cancel(self) -> None:
        if not self.completed and not self.cancelled:
            logger.debug(f"Cancelled pending {self.label}")
        self.token.cancel()

    def __repr__(self) -> str:
        return f"<AsyncOutput {self.label}>"


def is_async_output(value: Any) -> bool:
    return isinstance(value, AsyncOutput)
