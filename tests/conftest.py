"""Shared test fixtures: in-memory store, controllable clock, history builders."""

from datetime import datetime, timedelta

import pytest

from battery_sentinel.models import BatteryReading, HistoryEntry
from battery_sentinel.store import MemoryStore

START = datetime(2026, 3, 2, 8, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeSensor:
    """Returns queued readings; an exception in the queue is raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def read(self):
        self.calls += 1
        result = self.results[0] if len(self.results) == 1 else self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return list(result)


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, title, message, severity, play_sound):
        self.sent.append((title, message, severity, play_sound))

    @property
    def titles(self):
        return [title for title, _, _, _ in self.sent]


def entry(minutes: float, percentage: float, charging: bool = False) -> HistoryEntry:
    return HistoryEntry(
        timestamp=START + timedelta(minutes=minutes),
        percentage=percentage,
        is_charging=charging,
    )


def reading(percent=50.0, charging=False, **kwargs) -> BatteryReading:
    return BatteryReading(percent=percent, is_charging=charging, **kwargs)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()
