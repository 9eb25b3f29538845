from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any, List

from learninghub.core.context import StoreContext
from learninghub.core.events import MODULE_COMPLETED, MODULE_UNCOMPLETED, PROGRESS_UPDATED
from learninghub.core.state import ProgressRecord
from learninghub.core.stats import StatsEngine

logger = logging.getLogger(__name__)

_RECORD_FIELDS = frozenset(f.name for f in fields(ProgressRecord))


class ProgressTracker:
    """Per-unit completion state. Records are created on first write and never deleted."""

    def __init__(self, context: StoreContext, stats: StatsEngine) -> None:
        self._ctx = context
        self._stats = stats

    def get_progress(self, unit_id: str) -> ProgressRecord:
        record = self._ctx.state.progress.get(unit_id)
        return replace(record) if record is not None else ProgressRecord()

    def is_completed(self, unit_id: str) -> bool:
        record = self._ctx.state.progress.get(unit_id)
        return record is not None and record.completed

    def completed_units(self) -> List[str]:
        return [unit_id for unit_id, record in self._ctx.state.progress.items() if record.completed]

    def set_progress(self, unit_id: str, **changes: Any) -> ProgressRecord:
        unknown = set(changes) - _RECORD_FIELDS
        if unknown:
            raise TypeError(f"unknown progress field(s): {', '.join(sorted(unknown))}")

        record = self._ctx.state.progress.setdefault(unit_id, ProgressRecord())
        for name, value in changes.items():
            setattr(record, name, value)
        record.last_accessed = self._ctx.now_ms()

        self._stats.recompute_counts()
        self._ctx.commit()
        self._ctx.publish(PROGRESS_UPDATED, {"unitId": unit_id, "progress": replace(record)})
        return replace(record)

    def add_time(self, unit_id: str, milliseconds: int) -> ProgressRecord:
        """Accumulate reading time spent on a unit."""
        if milliseconds < 0:
            raise ValueError(f"time spent must be >= 0, got {milliseconds}")
        current = self.get_progress(unit_id).time_spent
        return self.set_progress(unit_id, time_spent=current + int(milliseconds))

    def mark_complete(self, unit_id: str) -> ProgressRecord:
        now = self._ctx.now_ms()
        record = self.set_progress(unit_id, completed=True, completed_at=now)
        if self._stats.update_streak():
            logger.info("Study streak is now %d day(s)", self._ctx.state.stats.study_streak)
        self._ctx.publish(MODULE_COMPLETED, {"unitId": unit_id, "completedAt": now})
        return record

    def mark_incomplete(self, unit_id: str) -> ProgressRecord:
        # The streak counts study days, so it is left alone here.
        record = self.set_progress(unit_id, completed=False, completed_at=None)
        self._ctx.publish(MODULE_UNCOMPLETED, {"unitId": unit_id})
        return record
