"""Exception types raised (or recovered) by the learning state core."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class LearningHubError(Exception):
    """Base class for every error raised by learninghub."""


class StorageError(LearningHubError):
    """The persisted blob could not be read or written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class StorageReadError(StorageError):
    """Stored data is missing or unparsable. Recovered by using defaults."""


class StorageWriteError(StorageError):
    """A write was rejected (disk full, permissions, unserializable value)."""


class SnapshotError(LearningHubError):
    """An imported snapshot was rejected. State is left untouched."""


class ImportReadError(SnapshotError):
    """Snapshot bytes could not be decoded as UTF-8 JSON."""


class ImportValidationError(SnapshotError):
    """Decoded snapshot does not look like learning hub data."""


class CatalogError(LearningHubError, ValueError):
    """A catalog file is malformed."""
