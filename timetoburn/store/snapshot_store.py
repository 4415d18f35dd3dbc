"""Cross-process exposure snapshot, persisted as a single JSON file.

Writers replace the file atomically (temp file + rename) so a reader
never observes a half-written snapshot.  Any read or decode failure is
treated as "no data available": load() returns None and the caller
renders a last-known or placeholder state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from timetoburn.models.snapshot import ExposureSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: ExposureSnapshot) -> bool:
        """Write *snapshot*; returns False (and logs) if the write failed."""
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(snapshot.model_dump_json(), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            logger.warning("Could not write snapshot to %s: %s", self._path, exc)
            return False
        return True

    def load(self) -> ExposureSnapshot | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read snapshot from %s: %s", self._path, exc)
            return None
        try:
            return ExposureSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable snapshot %s (%d errors)", self._path, exc.error_count())
            return None

    def load_or_placeholder(self) -> ExposureSnapshot:
        return self.load() or ExposureSnapshot.placeholder()

    def clear(self) -> None:
        try:
            self._path.unlink()
        except FileNotFoundError:
            pass
