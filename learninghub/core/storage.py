from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from learninghub.core.errors import StorageReadError, StorageWriteError
from learninghub.core.state import RootState, migrate

logger = logging.getLogger(__name__)

STORAGE_KEY = "learning-hub-data"
HOME_ENV_VAR = "LEARNINGHUB_HOME"


def default_data_dir() -> Path:
    """Directory holding persisted state: $LEARNINGHUB_HOME or ~/.learninghub."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".learninghub"


def timestamp_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class PersistentStore:
    """Stores the whole learning state as one JSON blob under STORAGE_KEY.

    Reads fail open: anything unreadable yields fresh defaults. Writes are
    best effort: a failure is logged and reported through the return value,
    the caller's in-memory state stays authoritative.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        base = Path(data_dir) if data_dir is not None else default_data_dir()
        self._file_path = base / f"{STORAGE_KEY}.json"
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> RootState:
        try:
            raw = self._read()
        except StorageReadError as e:
            if self._file_path.exists():
                logger.warning("Could not load learning data from %s: %s", self._file_path, e)
            return RootState()
        return RootState.from_dict(migrate(raw))

    def save(self, state: RootState) -> bool:
        state.last_accessed = timestamp_ms(self._clock())
        try:
            self._write(state)
        except StorageWriteError as e:
            logger.warning("Could not save learning data to %s: %s", self._file_path, e)
            return False
        logger.debug("Saved learning data to %s", self._file_path)
        return True

    def clear(self) -> None:
        try:
            self._file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", self._file_path, e)

    def _read(self) -> dict:
        try:
            text = self._file_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise StorageReadError("no stored data", self._file_path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(str(e), self._file_path) from e
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"invalid JSON: {e}", self._file_path) from e
        if not isinstance(payload, dict):
            raise StorageReadError(
                f"expected a JSON object, got {type(payload).__name__}", self._file_path
            )
        return payload

    def _write(self, state: RootState) -> None:
        try:
            text = json.dumps(state.to_dict(), indent=2)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"state is not serializable: {e}", self._file_path) from e
        tmp_path = self._file_path.with_suffix(".json.tmp")
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            raise StorageWriteError(str(e), self._file_path) from e
