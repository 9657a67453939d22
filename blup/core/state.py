"""
Persistence of the local cache file.

The file is read and rewritten wholesale. A missing, unreadable or corrupt
file is equivalent to empty state, so callers fall back to the network.
"""

import json
import os
import tempfile
from pathlib import Path

import structlog

from blup.models.state import CachedState

logger = structlog.get_logger(__name__)


class StateStore:
    """Loads and saves CachedState as JSON at a fixed path."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> CachedState:
        """
        Read the cache file.

        Returns:
            Parsed state, or empty state if the file is absent or malformed.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return CachedState()
        except OSError as e:
            logger.warning("Cannot read state file", path=str(self._path), error=str(e))
            return CachedState()

        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError:
            logger.warning("State file is corrupt, ignoring it", path=str(self._path))
            return CachedState()
        return CachedState.from_dict(data)

    def save(self, state: CachedState) -> None:
        """Write ``state`` through a temporary file and an atomic rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".config-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("State saved", path=str(self._path))
