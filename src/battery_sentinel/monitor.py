"""
Battery monitor - the two poll cycles tying sensor, history, analysis and
notifications together.

poll() runs on the fast cadence (snapshot, UI update, notification pass);
record_history() runs on the slow cadence (one history entry).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from .aggregator import read_snapshot
from .analysis import analyze_battery_usage
from .config import LAST_STATE_KEY
from .history import HistoryStore
from .models import BatteryState, HistoryEntry, Snapshot, UsageAnalysis
from .notifications import NotificationEngine, Notifier
from .predictor import (
    estimated_time_remaining,
    predict_charging_time_to_full,
    predict_optimal_charge_time,
)
from .sensors import BatterySensor
from .settings import SettingsManager
from .store import KeyValueStore

logger = logging.getLogger(__name__)

SIGNIFICANT_PERCENT_CHANGE = 1


@dataclass
class MonitorUpdate:
    """Everything a UI needs for one fast tick."""

    snapshot: Snapshot
    history: List[HistoryEntry]
    significant_change: bool
    analysis: UsageAnalysis = field(default_factory=UsageAnalysis)
    time_remaining_minutes: Optional[int] = None
    minutes_to_full: Optional[int] = None
    optimal_charge_in: Optional[str] = None
    notifications_sent: List[str] = field(default_factory=list)


def is_significant_change(previous: Optional[Snapshot], current: Snapshot) -> bool:
    """First reading, a charging flip, or a move of at least one percent."""
    if previous is None:
        return True
    if previous.is_charging != current.is_charging:
        return True
    return abs(current.percent - previous.percent) >= SIGNIFICANT_PERCENT_CHANGE


class BatteryMonitor:
    def __init__(self, sensor: BatterySensor, store: KeyValueStore, notifier: Notifier,
                 clock: Callable[[], datetime] = datetime.now):
        self.sensor = sensor
        self.store = store
        self.clock = clock
        self.settings = SettingsManager(store)
        self.history = HistoryStore(store, clock)
        self.engine = NotificationEngine(store, notifier, clock)
        self._listeners: List[Callable[[MonitorUpdate], None]] = []
        self._last_snapshot: Optional[Snapshot] = None

    def add_listener(self, callback: Callable[[MonitorUpdate], None]) -> None:
        self._listeners.append(callback)

    def poll(self) -> Optional[MonitorUpdate]:
        """Fast tick. Returns None when the sensor had nothing this cycle."""
        snapshot = read_snapshot(self.sensor)
        if snapshot is None:
            logger.debug("No snapshot this tick, skipping")
            return None

        settings = self.settings.load()
        history = self.history.read()
        analysis = analyze_battery_usage(history)

        significant = is_significant_change(self._last_snapshot, snapshot)
        self._last_snapshot = snapshot

        last_state = BatteryState.from_dict(self.store.get(LAST_STATE_KEY))
        decision = self.engine.evaluate(snapshot, analysis, settings, last_state)
        self.store.set(LAST_STATE_KEY, decision.state.to_dict())

        update = MonitorUpdate(
            snapshot=snapshot,
            history=history,
            significant_change=significant,
            analysis=analysis,
            time_remaining_minutes=estimated_time_remaining(snapshot, analysis),
            minutes_to_full=predict_charging_time_to_full(snapshot, history),
            optimal_charge_in=predict_optimal_charge_time(snapshot, settings, history),
            notifications_sent=decision.sent,
        )

        for listener in self._listeners:
            listener(update)
        return update

    def record_history(self) -> Optional[HistoryEntry]:
        """Slow tick: append the current snapshot to the history."""
        snapshot = read_snapshot(self.sensor)
        if snapshot is None:
            logger.debug("No snapshot for history, skipping")
            return None

        entry = HistoryEntry.from_snapshot(snapshot, self.clock())
        self.history.append(entry)
        return entry
