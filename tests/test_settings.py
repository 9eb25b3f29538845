"""Tests for learninghub.core.settings – display preferences."""

from __future__ import annotations

from learninghub.core.events import SETTING_CHANGED, SETTINGS_UPDATED
from learninghub.core.hub import LearningHub
from learninghub.core.state import DEFAULT_SETTINGS


class TestGetSet:
    def test_defaults(self, hub: LearningHub):
        assert hub.settings.all() == DEFAULT_SETTINGS

    def test_set_and_get(self, hub: LearningHub):
        hub.settings.set("theme", "dark")
        assert hub.settings.get("theme") == "dark"

    def test_unknown_key_default(self, hub: LearningHub):
        assert hub.settings.get("nope") is None
        assert hub.settings.get("nope", 3) == 3

    def test_unknown_key_stored(self, hub: LearningHub):
        hub.settings.set("sidebar", "collapsed")
        assert hub.settings.all()["sidebar"] == "collapsed"

    def test_set_emits_change(self, hub: LearningHub, recorder):
        hub.settings.set("theme", "dark")
        assert (SETTING_CHANGED, {"key": "theme", "value": "dark"}) in recorder

    def test_set_persists(self, hub: LearningHub):
        hub.settings.set("fontFamily", "serif")
        assert hub.context.store.load().settings["fontFamily"] == "serif"

    def test_all_returns_copy(self, hub: LearningHub):
        hub.settings.all()["theme"] = "dark"
        assert hub.settings.get("theme") == "light"


class TestUpdate:
    def test_updates_several(self, hub: LearningHub):
        result = hub.settings.update({"theme": "dark", "lineSpacing": "relaxed"})
        assert result["theme"] == "dark"
        assert result["lineSpacing"] == "relaxed"
        assert result["fontSize"] == "medium"

    def test_emits_updated(self, hub: LearningHub, recorder):
        hub.settings.update({"theme": "dark"})
        payload = next(p for e, p in recorder if e == SETTINGS_UPDATED)
        assert payload["theme"] == "dark"


class TestFontSize:
    def test_increase(self, hub: LearningHub):
        assert hub.settings.increase_font_size() == "large"
        assert hub.settings.increase_font_size() == "extra-large"
        assert hub.settings.increase_font_size() is None
        assert hub.settings.get("fontSize") == "extra-large"

    def test_decrease(self, hub: LearningHub):
        assert hub.settings.decrease_font_size() == "small"
        assert hub.settings.decrease_font_size() is None
        assert hub.settings.get("fontSize") == "small"

    def test_unknown_size_starts_from_medium(self, hub: LearningHub):
        hub.settings.set("fontSize", "huge")
        assert hub.settings.increase_font_size() == "large"
