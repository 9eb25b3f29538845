from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Optional

from learninghub.core.events import DATA_SAVED, EventBus
from learninghub.core.state import RootState
from learninghub.core.storage import PersistentStore, timestamp_ms


class StoreContext:
    """The live root state of a session plus what is needed to change it.

    Sub-stores hold a reference to the context, never to the state itself,
    so a reset or a replacing import is visible to all of them at once.
    """

    def __init__(
        self,
        store: PersistentStore,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.bus = bus if bus is not None else EventBus()
        self.clock = clock
        self.state: RootState = store.load()

    def now_ms(self) -> int:
        return timestamp_ms(self.clock())

    def today(self) -> date:
        return self.clock().date()

    def commit(self) -> bool:
        """Write the whole state back. Returns False if the write failed."""
        saved = self.store.save(self.state)
        if saved:
            self.bus.publish(DATA_SAVED, self.state)
        return saved

    def publish(self, event: str, payload: Any = None) -> None:
        self.bus.publish(event, payload)
