"""Exception handlers for the VNS FastAPI application.

This module converts Python exceptions into consistent JSON responses.
Errors raised by commands never reach these handlers: the shell renders
them as terminal output. What arrives here is a request problem or a
server fault.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.shell import ShellNotInitializedError

logger = logging.getLogger(__name__)


class MachineNotFoundError(Exception):
    """Raised when a request names a machine the simulator does not have.

    Args:
        machine_id: The machine that was requested.
        available_machines: Machines that exist.
    """

    def __init__(self, machine_id: str, available_machines: list[str]):
        self.machine_id = machine_id
        self.available_machines = available_machines
        super().__init__(f"Machine '{machine_id}' not found")


async def machine_not_found_handler(request: Request, exc: MachineNotFoundError):
    """Handle MachineNotFoundError with a 404 listing the known machines."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Machine Not Found",
            "detail": f"The machine '{exc.machine_id}' does not exist",
            "requested_machine": exc.machine_id,
            "available_machines": exc.available_machines,
        },
    )


async def shell_not_initialized_handler(request: Request, exc: ShellNotInitializedError):
    """Handle requests that arrive before the shell finished loading state.

    Returns a 503 so clients retry once startup completes.
    """
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "Shell Not Initialized",
            "detail": str(exc),
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions.

    ValueErrors indicate input that passed request validation but was
    rejected by the simulator (e.g. advancing the clock backwards).
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    This is a catch-all handler for unexpected errors. The traceback is
    logged; the client only sees a generic body.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
