"""Publish/subscribe for state changes.

Callbacks registered with :meth:`EventBus.subscribe` receive the payload of
one event name. Every published event is also broadcast on the Qt signal
:attr:`EventBus.published` as ``(event, payload)``, so widgets can connect to
it like to any other signal without knowing the event names up front.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

PROGRESS_UPDATED = "progress-updated"
MODULE_COMPLETED = "module-completed"
MODULE_UNCOMPLETED = "module-uncompleted"
BOOKMARK_ADDED = "bookmark-added"
BOOKMARK_REMOVED = "bookmark-removed"
SETTING_CHANGED = "setting-changed"
SETTINGS_UPDATED = "settings-updated"
DATA_EXPORTED = "data-exported"
DATA_IMPORTED = "data-imported"
DATA_RESET = "data-reset"
DATA_SAVED = "data-saved"
CURRENT_UNIT_CHANGED = "current-unit-changed"

EVENTS = (
    PROGRESS_UPDATED,
    MODULE_COMPLETED,
    MODULE_UNCOMPLETED,
    BOOKMARK_ADDED,
    BOOKMARK_REMOVED,
    SETTING_CHANGED,
    SETTINGS_UPDATED,
    DATA_EXPORTED,
    DATA_IMPORTED,
    DATA_RESET,
    DATA_SAVED,
    CURRENT_UNIT_CHANGED,
)

Callback = Callable[[Any], None]
Observer = Callable[[str, Any], None]


class EventBus(QObject):
    published = Signal(str, object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._subscribers: Dict[str, List[Callback]] = {}
        self._observers: Dict[Observer, Callable[[str, Any], None]] = {}

    def subscribe(self, event: str, callback: Callback) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callback) -> None:
        callbacks = self._subscribers.get(event)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    on = subscribe
    off = unsubscribe

    def subscribe_all(self, observer: Observer) -> None:
        """Receive every event as ``observer(event, payload)``."""
        if observer in self._observers:
            return

        def _slot(event: str, payload: Any) -> None:
            self._invoke(event, observer, event, payload)

        self._observers[observer] = _slot
        self.published.connect(_slot)

    def unsubscribe_all(self, observer: Observer) -> None:
        slot = self._observers.pop(observer, None)
        if slot is not None:
            self.published.disconnect(slot)

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, ()))

    def publish(self, event: str, payload: Any = None) -> None:
        # Iterate over a copy so callbacks may unsubscribe themselves.
        for callback in list(self._subscribers.get(event, ())):
            self._invoke(event, callback, payload)
        self.published.emit(event, payload)

    emit = publish

    @staticmethod
    def _invoke(event: str, callback: Callable[..., None], *args: Any) -> None:
        try:
            callback(*args)
        except Exception:
            logger.exception("Error in listener for %s", event)
