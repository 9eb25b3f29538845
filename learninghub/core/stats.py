from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import List, Optional

from learninghub.core.context import StoreContext
from learninghub.core.state import Stats, parse_study_date

RECENT_COMPLETIONS = 5
RECENT_BOOKMARKS = 3
RECENT_ACTIVITY_LIMIT = 10


@dataclass(frozen=True)
class ActivityEntry:
    kind: str  # "completion" or "bookmark"
    unit_id: str
    timestamp: int
    description: str


@dataclass(frozen=True)
class Analytics:
    total_modules: int
    completed_modules: int
    completion_rate: float
    total_time_spent: int
    average_time_per_module: int
    study_streak: int
    bookmarks_count: int
    last_study_date: Optional[str]
    recent_activity: List[ActivityEntry] = field(default_factory=list)


class StatsEngine:
    """Derived counters and the daily study streak."""

    def __init__(self, context: StoreContext) -> None:
        self._ctx = context

    def get_stats(self) -> Stats:
        return replace(self._ctx.state.stats)

    def recompute_counts(self) -> None:
        state = self._ctx.state
        state.stats.completed_modules = sum(
            1 for record in state.progress.values() if record.completed
        )

    def set_total_modules(self, count: int) -> None:
        """Record the catalog size. The core never counts units itself."""
        if count < 0:
            raise ValueError(f"total modules must be >= 0, got {count}")
        self._ctx.state.stats.total_modules = int(count)
        self.recompute_counts()
        self._ctx.commit()

    def update_streak(self) -> bool:
        """Count today as a study day. Returns True if the stats changed.

        Days are local calendar days. A stored date that is not yesterday
        (a gap, a future date after clock skew, or garbage) restarts the
        streak at 1.
        """
        stats = self._ctx.state.stats
        today = self._ctx.today()
        last = parse_study_date(stats.last_study_date)

        if last is None:
            stats.study_streak = 1
        elif last == today:
            return False
        elif last == today - timedelta(days=1):
            stats.study_streak += 1
        else:
            stats.study_streak = 1

        stats.last_study_date = today.isoformat()
        self._ctx.commit()
        return True

    def analytics(self) -> Analytics:
        state = self._ctx.state
        records = list(state.progress.values())
        completed = [record for record in records if record.completed]
        total_time = sum(record.time_spent for record in records)
        total_modules = state.stats.total_modules

        if total_modules > 0:
            rate = round(len(completed) / total_modules * 100, 1)
        else:
            rate = 0.0

        return Analytics(
            total_modules=total_modules,
            completed_modules=len(completed),
            completion_rate=rate,
            total_time_spent=total_time,
            average_time_per_module=round(total_time / len(completed)) if completed else 0,
            study_streak=state.stats.study_streak,
            bookmarks_count=len(state.bookmarks),
            last_study_date=state.stats.last_study_date,
            recent_activity=self.recent_activity(),
        )

    def recent_activity(self) -> List[ActivityEntry]:
        state = self._ctx.state
        completions = sorted(
            (
                (unit_id, record)
                for unit_id, record in state.progress.items()
                if record.completed and record.completed_at
            ),
            key=lambda item: item[1].completed_at,
            reverse=True,
        )[:RECENT_COMPLETIONS]
        bookmarks = sorted(state.bookmarks, key=lambda b: b.created_at, reverse=True)[
            :RECENT_BOOKMARKS
        ]

        activities = [
            ActivityEntry("completion", unit_id, record.completed_at, "Completed module")
            for unit_id, record in completions
        ]
        activities.extend(
            ActivityEntry("bookmark", b.unit_id, b.created_at, f"Bookmarked: {b.title}")
            for b in bookmarks
        )
        activities.sort(key=lambda entry: entry.timestamp, reverse=True)
        return activities[:RECENT_ACTIVITY_LIMIT]
