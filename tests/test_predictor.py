"""Tests for battery_sentinel.predictor - time remaining, time to full, optimal charge."""

from battery_sentinel.models import Snapshot, UsageAnalysis
from battery_sentinel.predictor import (
    estimated_time_remaining,
    format_duration,
    predict_charging_time_to_full,
    predict_optimal_charge_time,
)
from battery_sentinel.settings import Settings

from conftest import entry


def snap(percent, charging=False, **kwargs):
    return Snapshot(percent=percent, is_charging=charging, **kwargs)


def hourly_discharge():
    return [entry(hour * 60, 100 - hour * 10) for hour in range(11)]


class TestEstimatedTimeRemaining:
    def test_prefers_sensor_value(self):
        analysis = UsageAnalysis(average_drain_rate=10.0)
        assert estimated_time_remaining(snap(50, time_remaining_minutes=123), analysis) == 123

    def test_derives_from_drain_rate(self):
        analysis = UsageAnalysis(average_drain_rate=10.0)
        assert estimated_time_remaining(snap(50), analysis) == 300

    def test_none_while_charging(self):
        analysis = UsageAnalysis(average_drain_rate=10.0)
        assert estimated_time_remaining(snap(50, True, time_remaining_minutes=5), analysis) is None

    def test_none_without_drain_rate(self):
        assert estimated_time_remaining(snap(50), UsageAnalysis()) is None
        assert estimated_time_remaining(snap(50), None) is None
        assert estimated_time_remaining(None, UsageAnalysis()) is None


def two_sessions():
    return [
        entry(0, 40),
        entry(10, 40, charging=True),
        entry(30, 60, charging=True),  # 1 %/min
        entry(40, 58),
        entry(50, 50, charging=True),
        entry(70, 70, charging=True),  # 1 %/min
        entry(80, 69),
    ]


class TestTimeToFull:
    def test_average_session_rate(self):
        assert predict_charging_time_to_full(snap(70, True), two_sessions()) == 30

    def test_requires_charging(self):
        assert predict_charging_time_to_full(snap(70), two_sessions()) is None

    def test_requires_two_sessions(self):
        history = two_sessions()[:4] + [entry(50, 57), entry(60, 56)]
        assert predict_charging_time_to_full(snap(70, True), history) is None

    def test_requires_five_entries(self):
        history = [entry(0, 40, charging=True), entry(10, 50, charging=True)]
        assert predict_charging_time_to_full(snap(70, True), history) is None

    def test_rounds_minutes(self):
        history = [
            entry(0, 40),
            entry(10, 40, charging=True),
            entry(40, 60, charging=True),  # 0.667 %/min
            entry(50, 58),
            entry(60, 50, charging=True),
            entry(90, 70, charging=True),
            entry(100, 69),
        ]
        assert predict_charging_time_to_full(snap(95, True), history) == 8


class TestFormatDuration:
    def test_minutes(self):
        assert format_duration(0.5) == "30 minutes"

    def test_single_hour(self):
        assert format_duration(1.0) == "1 hour"

    def test_hours_and_minutes(self):
        assert format_duration(2.25) == "2 hours and 15 minutes"

    def test_minutes_do_not_overflow(self):
        assert format_duration(1.999) == "2 hours"


class TestOptimalChargeTime:
    def test_above_lower_limit(self):
        # 40% with a 10 %/h drain and a 20% limit -> 2 hours
        assert predict_optimal_charge_time(snap(40), Settings(), hourly_discharge()) == "2 hours"

    def test_at_lower_limit_is_now(self):
        assert predict_optimal_charge_time(snap(20), Settings(), hourly_discharge()) == "now"

    def test_below_lower_limit(self):
        assert predict_optimal_charge_time(snap(19), Settings(), hourly_discharge()) is None

    def test_while_charging(self):
        assert predict_optimal_charge_time(snap(40, True), Settings(), hourly_discharge()) is None

    def test_without_drain_rate(self):
        assert predict_optimal_charge_time(snap(40), Settings(), hourly_discharge()[:3]) is None

    def test_custom_limit(self):
        settings = Settings(optimal_charge_cycles={"lower_limit": 30, "upper_limit": 90})
        assert predict_optimal_charge_time(snap(35), settings, hourly_discharge()) == "30 minutes"
