"""Root learning state: records, defaults and the persisted schema.

The state is kept in plain dataclasses and converted to and from the
camelCase JSON layout that is written to disk and exported::

    {
      "schemaVersion": 1,
      "progress": {"<unitId>": {"completed", "completedAt", "timeSpent", "lastAccessed"}},
      "bookmarks": [{"id", "unitId", "title", "path", "contentSnippet", "createdAt"}],
      "settings": {"theme", "fontSize", "fontFamily", "lineSpacing"},
      "stats": {"totalModules", "completedModules", "studyStreak", "lastStudyDate"},
      "currentUnit": "<unitId>" | null,
      "lastAccessed": <ms>
    }

Loading is lenient: unknown top-level keys are dropped, malformed nested
entries are skipped with a warning and missing fields fall back to defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SNIPPET_LENGTH = 200

FONT_SIZES = ("small", "medium", "large", "extra-large")

DEFAULT_SETTINGS: Dict[str, str] = {
    "theme": "light",
    "fontSize": "medium",
    "fontFamily": "inter",
    "lineSpacing": "normal",
}

# Date.toDateString() output written by the browser version of the app.
_LEGACY_DATE_FORMAT = "%a %b %d %Y"


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def parse_study_date(value: Any) -> Optional[date]:
    """Parse a stored study date (ISO or legacy ``Sat Oct 17 2026`` form)."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, _LEGACY_DATE_FORMAT).date()
    except ValueError:
        return None


@dataclass
class ProgressRecord:
    completed: bool = False
    completed_at: Optional[int] = None
    time_spent: int = 0
    last_accessed: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ProgressRecord":
        return cls(
            completed=bool(raw.get("completed", False)),
            completed_at=_as_optional_int(raw.get("completedAt")),
            time_spent=max(_as_int(raw.get("timeSpent", 0)), 0),
            last_accessed=_as_optional_int(raw.get("lastAccessed")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": self.completed,
            "completedAt": self.completed_at,
            "timeSpent": self.time_spent,
            "lastAccessed": self.last_accessed,
        }


@dataclass
class Bookmark:
    id: str
    unit_id: str
    title: str
    path: str
    content_snippet: str
    created_at: int

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Bookmark":
        created_at = _as_int(raw.get("createdAt", 0))
        return cls(
            id=str(raw.get("id") or created_at),
            unit_id=str(raw["unitId"]),
            title=str(raw.get("title") or ""),
            path=str(raw.get("path") or ""),
            content_snippet=str(raw.get("contentSnippet") or "")[:SNIPPET_LENGTH],
            created_at=created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "unitId": self.unit_id,
            "title": self.title,
            "path": self.path,
            "contentSnippet": self.content_snippet,
            "createdAt": self.created_at,
        }


@dataclass
class Stats:
    total_modules: int = 0
    completed_modules: int = 0
    study_streak: int = 0
    last_study_date: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Stats":
        last = parse_study_date(raw.get("lastStudyDate"))
        return cls(
            total_modules=max(_as_int(raw.get("totalModules", 0)), 0),
            completed_modules=max(_as_int(raw.get("completedModules", 0)), 0),
            study_streak=max(_as_int(raw.get("studyStreak", 0)), 0),
            last_study_date=last.isoformat() if last else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalModules": self.total_modules,
            "completedModules": self.completed_modules,
            "studyStreak": self.study_streak,
            "lastStudyDate": self.last_study_date,
        }


def default_settings() -> Dict[str, Any]:
    return dict(DEFAULT_SETTINGS)


@dataclass
class RootState:
    progress: Dict[str, ProgressRecord] = field(default_factory=dict)
    bookmarks: List[Bookmark] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=default_settings)
    stats: Stats = field(default_factory=Stats)
    current_unit: Optional[str] = None
    last_accessed: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RootState":
        """Build a state from an already migrated blob, merged over defaults."""
        state = cls()

        progress = raw.get("progress", {})
        if isinstance(progress, dict):
            for unit_id, record in progress.items():
                if isinstance(record, dict):
                    state.progress[str(unit_id)] = ProgressRecord.from_dict(record)
                else:
                    logger.warning("Skipping malformed progress entry for %r", unit_id)
        else:
            logger.warning("Ignoring malformed progress section: %r", type(progress).__name__)

        bookmarks = raw.get("bookmarks", [])
        if isinstance(bookmarks, list):
            seen = set()
            for item in bookmarks:
                if not isinstance(item, dict) or "unitId" not in item:
                    logger.warning("Skipping malformed bookmark: %r", item)
                    continue
                bookmark = Bookmark.from_dict(item)
                if bookmark.unit_id in seen:
                    continue
                seen.add(bookmark.unit_id)
                state.bookmarks.append(bookmark)
        else:
            logger.warning("Ignoring malformed bookmarks section: %r", type(bookmarks).__name__)

        settings = raw.get("settings", {})
        if isinstance(settings, dict):
            state.settings.update(settings)

        stats = raw.get("stats", {})
        if isinstance(stats, dict):
            state.stats = Stats.from_dict(stats)

        current = raw.get("currentUnit")
        state.current_unit = str(current) if current is not None else None
        state.last_accessed = _as_int(raw.get("lastAccessed", 0))
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": SCHEMA_VERSION,
            "progress": {key: value.to_dict() for key, value in self.progress.items()},
            "bookmarks": [bookmark.to_dict() for bookmark in self.bookmarks],
            "settings": dict(self.settings),
            "stats": self.stats.to_dict(),
            "currentUnit": self.current_unit,
            "lastAccessed": self.last_accessed,
        }


def _migrate_v0(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Upgrade the unversioned browser layout (``moduleId``, ``content``)."""
    if "currentModule" in raw and "currentUnit" not in raw:
        raw["currentUnit"] = raw.pop("currentModule")

    bookmarks = raw.get("bookmarks")
    if isinstance(bookmarks, list):
        upgraded = []
        for item in bookmarks:
            if isinstance(item, dict):
                item = dict(item)
                if "moduleId" in item and "unitId" not in item:
                    item["unitId"] = item.pop("moduleId")
                if "content" in item and "contentSnippet" not in item:
                    item["contentSnippet"] = item.pop("content")
            upgraded.append(item)
        raw["bookmarks"] = upgraded

    stats = raw.get("stats")
    if isinstance(stats, dict):
        stats = dict(stats)
        last = parse_study_date(stats.get("lastStudyDate"))
        stats["lastStudyDate"] = last.isoformat() if last else None
        raw["stats"] = stats
    return raw


_MIGRATIONS = {0: _migrate_v0}


def migrate(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a stored or imported blob up to SCHEMA_VERSION.

    Returns a new dict; ``raw`` is not modified.
    """
    data = dict(raw)
    version = max(_as_int(data.get("schemaVersion", 0)), 0)
    if version > SCHEMA_VERSION:
        logger.warning(
            "Data was written by a newer schema (v%d > v%d); loading what is understood",
            version,
            SCHEMA_VERSION,
        )
    while version < SCHEMA_VERSION:
        data = _MIGRATIONS[version](data)
        version += 1
    data["schemaVersion"] = SCHEMA_VERSION
    return data
