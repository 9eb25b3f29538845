from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from learninghub.core.bookmarks import BookmarkRegistry
from learninghub.core.catalog import UnitCatalog
from learninghub.core.context import StoreContext
from learninghub.core.events import CURRENT_UNIT_CHANGED, DATA_RESET, EventBus
from learninghub.core.progress import ProgressTracker
from learninghub.core.settings import SettingsStore
from learninghub.core.snapshot import SnapshotCodec
from learninghub.core.state import RootState
from learninghub.core.stats import StatsEngine
from learninghub.core.storage import PersistentStore

logger = logging.getLogger(__name__)


class LearningHub:
    """One user's learning state for a session, wired to its store and event bus.

    The sub-stores (``progress``, ``bookmarks``, ``settings``, ``stats``,
    ``snapshots``) share a single :class:`StoreContext`; create as many hubs
    as needed, they do not share anything unless given the same store.
    """

    def __init__(
        self,
        store: PersistentStore,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
        catalog: Optional[UnitCatalog] = None,
    ) -> None:
        self.context = StoreContext(store, bus=bus, clock=clock)
        self.stats = StatsEngine(self.context)
        self.progress = ProgressTracker(self.context, self.stats)
        self.bookmarks = BookmarkRegistry(self.context)
        self.settings = SettingsStore(self.context)
        self.snapshots = SnapshotCodec(self.context, self.stats)
        self.catalog: Optional[UnitCatalog] = None
        if catalog is not None:
            self.attach_catalog(catalog)

    @classmethod
    def open(
        cls,
        data_dir: Optional[Path] = None,
        catalog: Optional[UnitCatalog] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "LearningHub":
        return cls(PersistentStore(data_dir, clock=clock), clock=clock, catalog=catalog)

    @property
    def events(self) -> EventBus:
        return self.context.bus

    @property
    def state(self) -> RootState:
        return self.context.state

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        self.events.subscribe(event, callback)

    def unsubscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        self.events.unsubscribe(event, callback)

    def attach_catalog(self, catalog: UnitCatalog) -> None:
        self.catalog = catalog
        if self.state.stats.total_modules != len(catalog):
            self.stats.set_total_modules(len(catalog))

    @property
    def current_unit(self) -> Optional[str]:
        return self.state.current_unit

    def set_current_unit(self, unit_id: Optional[str]) -> None:
        self.state.current_unit = unit_id
        self.context.commit()
        self.context.publish(CURRENT_UNIT_CHANGED, unit_id)

    def reset_all(self) -> bool:
        """Drop all progress, bookmarks and settings. Asking the user first is up to the caller."""
        self.context.state = RootState()
        if self.catalog is not None:
            self.state.stats.total_modules = len(self.catalog)
        self.context.commit()
        logger.info("Learning data reset to defaults")
        self.context.publish(DATA_RESET, self.state)
        return True
