"""Simulated clock model."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, field_validator


def default_epoch() -> datetime:
    """Fixed starting instant so runs are reproducible."""
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


class SimulatorTime(BaseModel):
    """Current simulated instant.

    Simulated time is decoupled from wall-clock time: it only moves when
    the scheduler advances it. Async command delays are expressed against
    this clock, so tests and the HTTP API control exactly when deferred
    output appears.

    Args:
        current_time: The current simulated timestamp (timezone-aware).
    """

    current_time: datetime = Field(
        default_factory=default_epoch,
        description="The current simulated timestamp (timezone-aware)",
    )

    @field_validator("current_time")
    @classmethod
    def validate_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware."""
        if v.tzinfo is None:
            raise ValueError("Datetime must be timezone-aware (recommend UTC)")
        return v

    def advance(self, delta: timedelta) -> None:
        """Advance simulated time by the specified delta.

        Does NOT run callbacks - that's the Scheduler's job.

        Args:
            delta: Amount of simulated time to advance.

        Raises:
            ValueError: If delta is negative.
        """
        if delta < timedelta(0):
            raise ValueError("Cannot advance time backwards")
        self.current_time += delta

    def set_time(self, new_time: datetime) -> None:
        """Jump to a specific instant.

        Raises:
            ValueError: If new_time is naive or before current_time.
        """
        if new_time.tzinfo is None:
            raise ValueError("new_time must be timezone-aware")
        if new_time < self.current_time:
            raise ValueError(
                f"Cannot set time backwards: {new_time} < {self.current_time}"
            )
        self.current_time = new_time

    def after(self, milliseconds: int) -> datetime:
        """Return the instant ``milliseconds`` from now."""
        return self.current_time + timedelta(milliseconds=milliseconds)

    def to_dict(self) -> dict:
        return {"current_time": self.current_time.isoformat()}
