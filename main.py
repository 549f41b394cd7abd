"""Main entry point for the Virtual Network Simulator (VNS) FastAPI application.

This module creates and configures the FastAPI app instance that serves the
terminal of the simulated network over REST.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_shell, shutdown_shell
from api.exceptions import (
    MachineNotFoundError,
    generic_exception_handler,
    machine_not_found_handler,
    shell_not_initialized_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import filesystem as filesystem_routes
from api.routes import session as session_routes
from api.routes import terminal as terminal_routes
from config import settings
from models.shell import ShellNotInitializedError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Startup loads persisted patches and session state before any request
    is served; shutdown cancels whatever is still scheduled.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    logger.info(f"Starting VNS with '{settings.STORAGE_BACKEND}' storage")
    shell = initialize_shell()
    logger.info(f"Shell ready at {shell.prompt}")

    yield

    logger.info("Shutting down VNS")
    shutdown_shell()


app = FastAPI(
    title="Virtual Network Simulator (VNS)",
    description="A simulated multi-machine Unix network driven through a JavaScript-flavoured terminal",
    version="0.1.0",
    lifespan=lifespan,
)

# Order matters: specific exceptions before general ones
app.add_exception_handler(MachineNotFoundError, machine_not_found_handler)
app.add_exception_handler(ShellNotInitializedError, shell_not_initialized_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(terminal_routes.router)
app.include_router(session_routes.router)
app.include_router(filesystem_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message."""
    return {
        "message": "Welcome to the Virtual Network Simulator API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
