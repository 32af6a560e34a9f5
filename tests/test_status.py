"""Tests for battery_sentinel.status - conky output formatting."""

from battery_sentinel.models import Snapshot
from battery_sentinel.status import format_status


class TestFormatStatus:
    def test_no_data(self):
        assert format_status(None) == ["> N/A"]

    def test_discharging(self):
        snapshot = Snapshot(percent=54.4, is_charging=False, health_score=91)
        assert format_status(snapshot, time_remaining=135) == [
            "> 54%",
            "${color4}  2h 15m remaining",
            "${color4}  health 91%",
        ]

    def test_charging_short(self):
        snapshot = Snapshot(percent=90.0, is_charging=True)
        assert format_status(snapshot, time_remaining=300, minutes_to_full=12) == [
            "> 90% CHG",
            "${color4}  12m to full",
        ]
