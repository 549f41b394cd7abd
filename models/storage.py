"""Persistence backends for session state and filesystem patches.

Two keys are persisted: the session state and the list of filesystem
patches. Load failures (missing file, unreadable JSON, schema mismatch)
are logged and treated as "nothing persisted" so the caller falls back
to defaults. Write failures are logged and the in-memory state is kept.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from models.filesystem import FileSystemPatch
from models.session import PersistedSessionState

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Interface for the two persisted keys."""

    @abstractmethod
    def load_patches(self) -> Optional[list[FileSystemPatch]]:
        """Return persisted patches, or None if nothing valid is stored."""

    @abstractmethod
    def save_patches(self, patches: list[FileSystemPatch]) -> None:
        """Persist the full patch list."""

    @abstractmethod
    def load_session_state(self) -> Optional[PersistedSessionState]:
        """Return the persisted session state, or None if nothing valid is stored."""

    @abstractmethod
    def save_session_state(self, state: PersistedSessionState) -> None:
        """Persist the session state."""

    @abstractmethod
    def clear(self) -> None:
        """Remove both persisted keys."""


def _parse_patches(raw) -> Optional[list[FileSystemPatch]]:
    if raw is None:
        return None
    try:
        if not isinstance(raw, list):
            raise ValueError("patch data must be a list")
        return [FileSystemPatch.model_validate(item) for item in raw]
    except (ValueError, ValidationError) as e:
        logger.warning(f"Ignoring malformed filesystem patches: {e}")
        return None


def _parse_session_state(raw) -> Optional[PersistedSessionState]:
    if raw is None:
        return None
    try:
        return PersistedSessionState.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed session state: {e}")
        return None


class InMemoryStorage(StorageBackend):
    """Process-local storage holding raw JSON-compatible dicts.

    Data is kept in serialized form so loading goes through the same
    validation as the file backend.
    """

    def __init__(self):
        self._patches: Optional[list] = None
        self._session_state: Optional[dict] = None

    def load_patches(self) -> Optional[list[FileSystemPatch]]:
        return _parse_patches(self._patches)

    def save_patches(self, patches: list[FileSystemPatch]) -> None:
        self._patches = [patch.model_dump(mode="json") for patch in patches]

    def load_session_state(self) -> Optional[PersistedSessionState]:
        return _parse_session_state(self._session_state)

    def save_session_state(self, state: PersistedSessionState) -> None:
        self._session_state = state.model_dump(mode="json")

    def clear(self) -> None:
        self._patches = None
        self._session_state = None

    def set_raw(self, patches=None, session_state=None) -> None:
        """Inject raw persisted data (used to simulate corrupted storage)."""
        self._patches = patches
        self._session_state = session_state


class JsonFileStorage(StorageBackend):
    """Storage backed by two JSON files in a directory.

    Args:
        directory: Directory holding session.json and filesystem.json.
    """

    SESSION_FILE = "session.json"
    PATCHES_FILE = "filesystem.json"

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _read(self, filename: str):
        path = self.directory / filename
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def _write(self, filename: str, data) -> None:
        path = self.directory / filename
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            # In-memory state stays authoritative until the next successful write.
            logger.warning(f"Could not write {path}: {e}")

    def load_patches(self) -> Optional[list[FileSystemPatch]]:
        return _parse_patches(self._read(self.PATCHES_FILE))

    def save_patches(self, patches: list[FileSystemPatch]) -> None:
        self._write(self.PATCHES_FILE, [patch.model_dump(mode="json") for patch in patches])

    def load_session_state(self) -> Optional[PersistedSessionState]:
        return _parse_session_state(self._read(self.SESSION_FILE))

    def save_session_state(self, state: PersistedSessionState) -> None:
        self._write(self.SESSION_FILE, state.model_dump(mode="json"))

    def clear(self) -> None:
        for filename in (self.SESSION_FILE, self.PATCHES_FILE):
            path = self.directory / filename
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {path}: {e}")
