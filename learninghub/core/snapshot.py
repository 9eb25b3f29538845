"""Export and import of full learning state snapshots.

An export is the persisted layout plus ``exportedAt`` and ``version``.
Imports accept that layout as well as files written by the browser version
of the app (upgraded through :func:`learninghub.core.state.migrate`).
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from learninghub.core.context import StoreContext
from learninghub.core.errors import ImportReadError, ImportValidationError
from learninghub.core.events import DATA_EXPORTED, DATA_IMPORTED
from learninghub.core.state import RootState, migrate
from learninghub.core.stats import StatsEngine

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
FILENAME_TEMPLATE = "learning-hub-backup-{date}.json"

# Top-level sections an import must carry at least one of, with their JSON type.
_SECTIONS = {"progress": dict, "bookmarks": list, "settings": dict}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    payload: Dict[str, Any]

    def to_bytes(self) -> bytes:
        return json.dumps(self.payload, indent=2).encode("utf-8")

    def write_to(self, directory: Path) -> Path:
        target = Path(directory) / self.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.to_bytes())
        return target


def decode_snapshot(raw: Union[bytes, bytearray, str]) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ImportReadError(f"snapshot is not valid UTF-8: {e}") from e
    if not isinstance(raw, str):
        raise ImportReadError(f"cannot read a snapshot from {type(raw).__name__}")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ImportReadError(f"snapshot is not valid JSON: {e}") from e


def validate_snapshot(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ImportValidationError(f"expected a JSON object, got {type(data).__name__}")
    present = [name for name in _SECTIONS if data.get(name) is not None]
    if not present:
        raise ImportValidationError(
            "snapshot has none of the sections: " + ", ".join(_SECTIONS)
        )
    for name in present:
        expected = _SECTIONS[name]
        if not isinstance(data[name], expected):
            raise ImportValidationError(
                f"'{name}' must be a JSON {'object' if expected is dict else 'array'}"
            )
    return data


class SnapshotCodec:
    def __init__(self, context: StoreContext, stats: StatsEngine) -> None:
        self._ctx = context
        self._stats = stats

    def export_snapshot(self) -> ExportArtifact:
        payload = self._ctx.state.to_dict()
        payload["exportedAt"] = self._ctx.now_ms()
        payload["version"] = EXPORT_VERSION
        artifact = ExportArtifact(
            filename=FILENAME_TEMPLATE.format(date=self._ctx.today().isoformat()),
            payload=payload,
        )
        logger.info("Exported learning data as %s", artifact.filename)
        self._ctx.publish(DATA_EXPORTED, payload)
        return artifact

    async def import_snapshot(
        self, raw: Union[bytes, bytearray, str], merge: bool = True
    ) -> RootState:
        """Decode a snapshot and merge it into, or let it replace, the current state.

        Raises ImportReadError or ImportValidationError without touching the
        current state.
        """
        data = await asyncio.to_thread(decode_snapshot, raw)
        imported = RootState.from_dict(migrate(validate_snapshot(data)))

        if merge:
            self._merge(imported)
        else:
            self._ctx.state = imported

        self._stats.recompute_counts()
        self._ctx.commit()
        logger.info(
            "Imported learning data (%s): %d progress records, %d bookmarks",
            "merge" if merge else "replace",
            len(self._ctx.state.progress),
            len(self._ctx.state.bookmarks),
        )
        self._ctx.publish(DATA_IMPORTED, self._ctx.state)
        return self._ctx.state

    async def import_file(self, path: Path, merge: bool = True) -> RootState:
        try:
            raw = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise ImportReadError(f"could not read {path}: {e}") from e
        return await self.import_snapshot(raw, merge=merge)

    def _merge(self, imported: RootState) -> None:
        state = self._ctx.state
        state.progress.update(imported.progress)

        seen = set()
        merged = []
        for bookmark in state.bookmarks + imported.bookmarks:
            if bookmark.unit_id in seen:
                continue
            seen.add(bookmark.unit_id)
            merged.append(bookmark)
        state.bookmarks = merged
