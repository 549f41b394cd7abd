"""Shared request and response models for API endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from models.shell import OutputLine


class TerminalResponse(BaseModel):
    """Result of any call that may produce terminal output.

    Attributes:
        lines: Output emitted by the call, in order.
        prompt: Prompt to show before the next input.
        mode: Exclusive mode ("none", "ftp" or "nc").
        input_mode: What the next input is read as ("command", "username", "password").
        busy: Whether an async command is still running.
        current_time: Simulated time after the call.
    """

    lines: list[OutputLine]
    prompt: str
    mode: str
    input_mode: str
    busy: bool
    current_time: datetime


class PromptResponse(BaseModel):
    prompt: str
    mode: str
    input_mode: str
    busy: bool


class ErrorResponse(BaseModel):
    """Standard error response model.

    Attributes:
        error: Error type or code.
        detail: Human-readable error message.
        details: Optional additional error details.
    """

    error: str
    detail: str
    details: dict[str, Any] | None = Field(default=None)
