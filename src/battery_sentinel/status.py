"""
Battery status helper for conky and other scripts.
Outputs battery info with time remaining.
"""

import logging

from .aggregator import read_snapshot
from .analysis import analyze_battery_usage
from .config import SENSOR_KIND, STORE_FILE
from .history import HistoryStore
from .predictor import estimated_time_remaining, predict_charging_time_to_full
from .sensors import SensorUnavailable, create_sensor
from .store import JsonFileStore


def format_status(snapshot, time_remaining=None, minutes_to_full=None) -> list:
    """Lines to print for one snapshot, formatted for conky."""
    if snapshot is None:
        return ["> N/A"]

    status = " CHG" if snapshot.is_charging else ""
    lines = [f"> {snapshot.percent:.0f}%{status}"]

    minutes = minutes_to_full if snapshot.is_charging else time_remaining
    if minutes is not None:
        h, m = divmod(int(minutes), 60)
        suffix = "to full" if snapshot.is_charging else "remaining"
        time_str = f"{h}h {m}m {suffix}" if h > 0 else f"{m}m {suffix}"
        lines.append(f"${{color4}}  {time_str}")

    if snapshot.health_score is not None:
        lines.append(f"${{color4}}  health {snapshot.health_score}%")
    return lines


def main():
    """Entry point for battery status output."""
    logging.basicConfig(level=logging.ERROR, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        sensor = create_sensor(SENSOR_KIND)
    except (SensorUnavailable, ImportError):
        print("> N/A")
        return

    snapshot = read_snapshot(sensor)
    history = HistoryStore(JsonFileStore(STORE_FILE)).read()
    analysis = analyze_battery_usage(history)

    lines = format_status(
        snapshot,
        estimated_time_remaining(snapshot, analysis),
        predict_charging_time_to_full(snapshot, history),
    )
    print("\n".join(lines))


if __name__ == "__main__":
    main()
