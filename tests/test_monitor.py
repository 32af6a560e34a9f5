"""Tests for battery_sentinel.monitor - fast and slow poll cycles."""

from battery_sentinel.config import HISTORY_KEY, LAST_STATE_KEY
from battery_sentinel.models import Snapshot
from battery_sentinel.monitor import BatteryMonitor, is_significant_change
from battery_sentinel.sensors import SensorUnavailable

from conftest import FakeSensor, reading


def snap(percent, charging=False):
    return Snapshot(percent=percent, is_charging=charging)


class TestSignificantChange:
    def test_first_run(self):
        assert is_significant_change(None, snap(50)) is True

    def test_charging_flip(self):
        assert is_significant_change(snap(50), snap(50, True)) is True

    def test_one_percent(self):
        assert is_significant_change(snap(50), snap(49)) is True
        assert is_significant_change(snap(50), snap(51.5)) is True

    def test_small_change(self):
        assert is_significant_change(snap(50), snap(50.6)) is False


class TestPoll:
    def test_sensor_failure_skips_cycle(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor(SensorUnavailable("gone")), store, notifier, clock)
        updates = []
        monitor.add_listener(updates.append)

        assert monitor.poll() is None
        assert updates == []
        assert store.get(LAST_STATE_KEY) is None

    def test_recovers_after_failure(self, store, notifier, clock):
        sensor = FakeSensor(SensorUnavailable("gone"), [reading(50.0)])
        monitor = BatteryMonitor(sensor, store, notifier, clock)
        assert monitor.poll() is None
        assert monitor.poll().snapshot.percent == 50.0

    def test_publishes_update(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(50.0, time_remaining_minutes=200)]), store, notifier, clock)
        updates = []
        monitor.add_listener(updates.append)

        update = monitor.poll()
        assert updates == [update]
        assert update.significant_change is True
        assert update.time_remaining_minutes == 200
        assert update.history == []

        assert monitor.poll().significant_change is False

    def test_persists_last_state(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(50.0, True)]), store, notifier, clock)
        monitor.poll()
        assert store.get(LAST_STATE_KEY) == {"isCharging": True, "percentage": 50.0}

    def test_transition_notification(self, store, notifier, clock):
        sensor = FakeSensor([reading(50.0)], [reading(50.0, True)])
        monitor = BatteryMonitor(sensor, store, notifier, clock)
        monitor.poll()
        update = monitor.poll()
        assert "Now Charging" in update.notifications_sent
        assert update.significant_change is True

    def test_low_battery_notifies(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(12.0)]), store, notifier, clock)
        monitor.poll()
        assert "Low Battery Alert" in notifier.titles

    def test_notifications_disabled(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(3.0)]), store, notifier, clock)
        monitor.settings.update({"notifications_enabled": False})
        monitor.poll()
        assert notifier.sent == []
        assert store.get(LAST_STATE_KEY)["percentage"] == 3.0

    def test_listeners_run_after_notification_pass(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(12.0)]), store, notifier, clock)
        seen = []
        monitor.add_listener(lambda update: seen.append(
            (update.notifications_sent, store.get(LAST_STATE_KEY), list(notifier.titles))
        ))
        monitor.poll()

        sent, state, dispatched = seen[0]
        assert "Low Battery Alert" in sent
        assert sent == dispatched
        assert state == {"isCharging": False, "percentage": 12.0}

    def test_honours_camel_case_settings_document(self, store, notifier, clock):
        store.set("settings", {
            "notificationsEnabled": False,
            "lowBatteryThreshold": 30,
            "optimalChargeCycles": {"enabled": False},
        })
        monitor = BatteryMonitor(FakeSensor([reading(3.0)]), store, notifier, clock)
        update = monitor.poll()
        assert update.notifications_sent == []
        assert notifier.sent == []

    def test_uses_history_for_predictions(self, store, notifier, clock):
        sensor = FakeSensor(*[[reading(100.0 - i * 10)] for i in range(6)] + [[reading(40.0)]])
        monitor = BatteryMonitor(sensor, store, notifier, clock)
        for _ in range(6):
            monitor.record_history()
            clock.advance(hours=1)

        update = monitor.poll()
        assert update.analysis.average_drain_rate == 10.0
        assert update.time_remaining_minutes == 240
        assert update.optimal_charge_in == "2 hours"
        assert len(update.history) == 6


class TestRecordHistory:
    def test_appends_entry(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor([reading(80.0, cycle_count=3)]), store, notifier, clock)
        entry = monitor.record_history()
        assert entry.timestamp == clock()
        assert entry.cycle_count == 3
        assert len(store.get(HISTORY_KEY)) == 1

    def test_sensor_failure_appends_nothing(self, store, notifier, clock):
        monitor = BatteryMonitor(FakeSensor(SensorUnavailable("gone")), store, notifier, clock)
        assert monitor.record_history() is None
        assert store.get(HISTORY_KEY) is None
