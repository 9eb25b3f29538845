"""Shared fixtures: a controllable clock and a hub backed by a temp directory."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from learninghub.core.hub import LearningHub


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 17, 9, 30))


@pytest.fixture()
def hub(tmp_path: Path, clock: FakeClock) -> LearningHub:
    """LearningHub storing its data under tmp_path so tests don't touch ~/.learninghub."""
    return LearningHub.open(tmp_path, clock=clock)


@pytest.fixture()
def recorder(hub: LearningHub):
    """List of (event, payload) tuples for everything the hub publishes."""
    seen = []
    hub.events.subscribe_all(lambda event, payload: seen.append((event, payload)))
    return seen
