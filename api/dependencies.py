"""Dependency injection providers for the FastAPI application.

This module defines dependencies that can be injected into route handlers,
providing access to the shared Shell and the lock serialising access to it.
"""

import logging
import threading
from typing import Annotated, Optional

from fastapi import Depends

from config import settings
from models.shell import Shell, ShellNotInitializedError
from models.storage import InMemoryStorage, JsonFileStorage, StorageBackend

logger = logging.getLogger(__name__)


# Global state
# One shell per process; FastAPI runs sync handlers in a thread pool, so
# every handler takes _shell_lock before touching it.
_shell: Optional[Shell] = None
_shell_lock = threading.Lock()


def create_storage(backend: Optional[str] = None) -> StorageBackend:
    """Build the configured persistence backend.

    Args:
        backend: "memory" or "json" (defaults to settings.STORAGE_BACKEND).

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = backend or settings.STORAGE_BACKEND
    if backend == "memory":
        return InMemoryStorage()
    if backend == "json":
        return JsonFileStorage(settings.STORAGE_DIR)
    raise ValueError(f"Unknown storage backend: {backend}")


def get_shell() -> Shell:
    """Get the shared Shell instance.

    Returns:
        The shared, initialized Shell.

    Raises:
        ShellNotInitializedError: If initialize_shell() has not run.

    Example:
        @router.get("/some-endpoint")
        def my_handler(shell: ShellDep):
            return {"prompt": shell.prompt}
    """
    if _shell is None or not _shell.is_initialized:
        raise ShellNotInitializedError("Shell not initialized. Call initialize_shell() first.")
    return _shell


def get_shell_lock() -> threading.Lock:
    return _shell_lock


def initialize_shell(storage: Optional[StorageBackend] = None) -> Shell:
    """Create and initialize the shared Shell.

    Called once when the app starts. Persisted state is loaded before
    the shell accepts input.

    Args:
        storage: Backend to use; defaults to the configured one.

    Returns:
        The initialized Shell.
    """
    global _shell

    with _shell_lock:
        _shell = Shell.create(storage=storage or create_storage())
        _shell.initialize()
    return _shell


def shutdown_shell() -> None:
    """Cancel pending work and drop the shared Shell."""
    global _shell

    with _shell_lock:
        if _shell is not None:
            _shell.interrupt()
            _shell.scheduler.clear()
        _shell = None


# Type aliases for dependency injection
ShellDep = Annotated[Shell, Depends(get_shell)]
ShellLockDep = Annotated[threading.Lock, Depends(get_shell_lock)]
