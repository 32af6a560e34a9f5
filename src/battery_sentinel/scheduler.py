"""
GLib timers driving the monitor's two cadences.
"""

import logging

from gi.repository import GLib

from .config import FAST_POLL_SECONDS
from .monitor import BatteryMonitor

logger = logging.getLogger(__name__)


class PollScheduler:
    """Fast tick every few seconds, history tick every check interval.

    Saving settings while the timers run re-arms them with the new interval.
    """

    def __init__(self, monitor: BatteryMonitor, fast_seconds: int = FAST_POLL_SECONDS):
        self.monitor = monitor
        self.fast_seconds = fast_seconds
        self._fast_source = None
        self._slow_source = None
        monitor.settings.add_listener(self._on_settings_changed)

    @property
    def running(self) -> bool:
        return self._fast_source is not None

    def _history_seconds(self) -> int:
        minutes = self.monitor.settings.load().check_interval_minutes
        return max(1, int(minutes * 60))

    def _on_settings_changed(self, settings) -> None:
        if self.running:
            self.restart()

    def _fast_tick(self) -> bool:
        try:
            self.monitor.poll()
        except Exception as e:
            logger.exception("Poll failed: %s", e)
        return True

    def _slow_tick(self) -> bool:
        try:
            self.monitor.record_history()
        except Exception as e:
            logger.exception("History update failed: %s", e)
        return True

    def start(self) -> None:
        self.restart()

    def restart(self) -> None:
        """Cancel both timers, tick once immediately, then re-arm."""
        self.stop()

        self._fast_tick()
        self._slow_tick()

        history_seconds = self._history_seconds()
        self._fast_source = GLib.timeout_add_seconds(self.fast_seconds, self._fast_tick)
        self._slow_source = GLib.timeout_add_seconds(history_seconds, self._slow_tick)
        logger.info("Polling every %ds, history every %ds", self.fast_seconds, history_seconds)

    def stop(self) -> None:
        for source in (self._fast_source, self._slow_source):
            if source is not None:
                GLib.source_remove(source)
        self._fast_source = None
        self._slow_source = None
