"""
Time-to-threshold predictions from the current snapshot and usage analysis.
"""

from typing import Optional, Sequence

from .analysis import MIN_ENTRIES, analyze_battery_usage, extract_charging_sessions
from .health import round_half_up
from .models import HistoryEntry, Snapshot, UsageAnalysis

MIN_SESSIONS = 2


def estimated_time_remaining(snapshot: Optional[Snapshot], analysis: Optional[UsageAnalysis]) -> Optional[int]:
    """
    Minutes of battery left.

    The sensor's own estimate wins when it has one; otherwise the historical
    drain rate is used.
    """
    if snapshot is None or snapshot.is_charging:
        return None
    if snapshot.time_remaining_minutes is not None:
        return snapshot.time_remaining_minutes
    if analysis is None or not analysis.average_drain_rate:
        return None
    return round_half_up(snapshot.percent / analysis.average_drain_rate * 60)


def predict_charging_time_to_full(snapshot: Optional[Snapshot], history: Sequence[HistoryEntry]) -> Optional[int]:
    """Minutes until 100% based on the rate of past charging sessions."""
    if snapshot is None or not snapshot.is_charging:
        return None
    if not history or len(history) < MIN_ENTRIES:
        return None

    sessions = extract_charging_sessions(history)
    if len(sessions) < MIN_SESSIONS:
        return None

    rates = [s.rate_per_minute for s in sessions if s.rate_per_minute > 0]
    if not rates:
        return None

    avg_rate = sum(rates) / len(rates)
    return round_half_up((100 - snapshot.percent) / avg_rate)


def format_duration(hours: float) -> str:
    """Human readable duration: "45 minutes", "1 hour", "2 hours and 5 minutes"."""
    total_minutes = round_half_up(hours * 60)
    if total_minutes < 60:
        return f"{total_minutes} minutes"

    h, m = divmod(total_minutes, 60)
    text = f"{h} hour{'s' if h > 1 else ''}"
    if m > 0:
        text += f" and {m} minutes"
    return text


def predict_optimal_charge_time(snapshot: Optional[Snapshot], settings, history: Sequence[HistoryEntry]) -> Optional[str]:
    """
    How long until the battery reaches the optimal lower charge limit.

    Returns "now" at the limit, a formatted duration above it, and None while
    charging, below the limit, or without a known drain rate.
    """
    if snapshot is None or settings is None or snapshot.is_charging:
        return None

    lower_limit = settings.optimal_charge_cycles.lower_limit
    if snapshot.percent < lower_limit:
        return None

    analysis = analyze_battery_usage(history)
    if not analysis.average_drain_rate:
        return None

    hours_until_threshold = (snapshot.percent - lower_limit) / analysis.average_drain_rate
    if hours_until_threshold <= 0:
        return "now"
    return format_duration(hours_until_threshold)
