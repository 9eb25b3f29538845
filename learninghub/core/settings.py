from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from learninghub.core.context import StoreContext
from learninghub.core.events import SETTING_CHANGED, SETTINGS_UPDATED
from learninghub.core.state import DEFAULT_SETTINGS, FONT_SIZES


class SettingsStore:
    """Flat display preferences. Unknown keys are kept but carry no meaning."""

    def __init__(self, context: StoreContext) -> None:
        self._ctx = context

    def get(self, key: str, default: Any = None) -> Any:
        settings = self._ctx.state.settings
        if key in settings:
            return settings[key]
        return DEFAULT_SETTINGS.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._ctx.state.settings[key] = value
        self._ctx.commit()
        self._ctx.publish(SETTING_CHANGED, {"key": key, "value": value})

    def update(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        self._ctx.state.settings.update(values)
        self._ctx.commit()
        current = self.all()
        self._ctx.publish(SETTINGS_UPDATED, current)
        return current

    def all(self) -> Dict[str, Any]:
        return dict(self._ctx.state.settings)

    def increase_font_size(self) -> Optional[str]:
        return self._step_font_size(1)

    def decrease_font_size(self) -> Optional[str]:
        return self._step_font_size(-1)

    def _step_font_size(self, step: int) -> Optional[str]:
        """Move one notch along FONT_SIZES. Returns None at either end."""
        current = self.get("fontSize")
        try:
            index = FONT_SIZES.index(current)
        except ValueError:
            index = FONT_SIZES.index(DEFAULT_SETTINGS["fontSize"])
        target = index + step
        if not 0 <= target < len(FONT_SIZES):
            return None
        size = FONT_SIZES[target]
        self.set("fontSize", size)
        return size
