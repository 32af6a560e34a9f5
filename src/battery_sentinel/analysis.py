"""
Usage analysis over the battery history.

Derives drain rate, charging habits and charging sessions from the
irregularly sampled history, and turns them into usage recommendations.
"""

from dataclasses import replace
from typing import Iterable, List, Sequence

from .models import (
    ChargingFrequency,
    ChargingSession,
    HistoryEntry,
    Recommendation,
    UsageAnalysis,
)

MIN_ENTRIES = 5

# Pairs closer than this (~36 s) are too noisy to derive a rate from
MIN_HOURS_BETWEEN_SAMPLES = 0.01

DEEP_DISCHARGE_PERCENT = 20
OVERCHARGE_PERCENT = 90

HIGH_DRAIN_RATE = 15  # %/hour
DEEP_DISCHARGE_RATIO = 0.3
MAX_OVERCHARGE_EVENTS = 5

RECOMMENDATION_MESSAGES = {
    "high-drain": (
        "Your battery is draining quickly. Consider reducing screen brightness "
        "and closing unnecessary applications."
    ),
    "deep-discharge": (
        "You frequently let your battery discharge below 20%. "
        "This can reduce battery lifespan."
    ),
    "overcharge": (
        "You often keep your laptop plugged in at high charge levels. "
        "Consider unplugging once your battery reaches 80%."
    ),
}


def _sorted(history: Iterable[HistoryEntry]) -> List[HistoryEntry]:
    # Appends are not guaranteed monotonic if the wall clock was adjusted
    return sorted(history, key=lambda entry: entry.timestamp)


def count_charging_events(history: Sequence[HistoryEntry]) -> ChargingFrequency:
    """Count plug-in events, deep discharges and held-at-high-charge samples."""
    charging_events = 0
    deep_discharge_events = 0
    overcharge_events = 0

    for prev, current in zip(history, history[1:]):
        if not prev.is_charging and current.is_charging:
            charging_events += 1
            if prev.percentage < DEEP_DISCHARGE_PERCENT:
                deep_discharge_events += 1

        if (
            prev.is_charging
            and current.is_charging
            and prev.percentage > OVERCHARGE_PERCENT
            and current.percentage > OVERCHARGE_PERCENT
        ):
            overcharge_events += 1

    return ChargingFrequency(
        total=charging_events,
        deep_discharge=deep_discharge_events,
        overcharge=overcharge_events,
    )


def drain_samples(history: Sequence[HistoryEntry]) -> List[float]:
    """Hourly drain rates over consecutive discharging pairs.

    Negative rates (battery rose while on battery power) are sensor noise and
    dropped rather than averaged in.
    """
    samples = []
    for prev, current in zip(history, history[1:]):
        if prev.is_charging or current.is_charging:
            continue

        hours_diff = (current.timestamp - prev.timestamp).total_seconds() / 3600.0
        if hours_diff <= MIN_HOURS_BETWEEN_SAMPLES:
            continue

        hourly_drain = (prev.percentage - current.percentage) / hours_diff
        if hourly_drain > 0:
            samples.append(hourly_drain)
    return samples


def extract_charging_sessions(history: Iterable[HistoryEntry]) -> List[ChargingSession]:
    """
    Group contiguous charging runs into sessions.

    A session runs from the first to the last charging entry of a run. Runs
    shorter than a minute or without a net gain are discarded.
    """
    sessions = []
    start = None
    last = None

    for entry in _sorted(history):
        if entry.is_charging:
            if start is None:
                start = entry
            last = entry
        elif start is not None:
            sessions.append(_session(start, last))
            start = last = None

    if start is not None:
        sessions.append(_session(start, last))

    return [session for session in sessions if session.is_valid()]


def _session(start: HistoryEntry, end: HistoryEntry) -> ChargingSession:
    return ChargingSession(
        start_time=start.timestamp,
        start_percentage=start.percentage,
        end_time=end.timestamp,
        end_percentage=end.percentage,
    )


def build_recommendations(
    average_drain_rate, frequency: ChargingFrequency
) -> List[Recommendation]:
    recommendations = []

    if average_drain_rate is not None and average_drain_rate > HIGH_DRAIN_RATE:
        recommendations.append(Recommendation("high-drain", RECOMMENDATION_MESSAGES["high-drain"]))

    if frequency.total > 0 and frequency.deep_discharge > frequency.total * DEEP_DISCHARGE_RATIO:
        recommendations.append(
            Recommendation("deep-discharge", RECOMMENDATION_MESSAGES["deep-discharge"])
        )

    if frequency.overcharge > MAX_OVERCHARGE_EVENTS:
        recommendations.append(Recommendation("overcharge", RECOMMENDATION_MESSAGES["overcharge"]))

    return recommendations


def analyze_battery_usage(history: Sequence[HistoryEntry]) -> UsageAnalysis:
    """
    Analyze the battery history.

    Args:
        history: History entries in any order.

    Returns:
        UsageAnalysis; all fields empty when fewer than five entries exist.
    """
    if not history or len(history) < MIN_ENTRIES:
        return UsageAnalysis()

    ordered = _sorted(history)

    samples = drain_samples(ordered)
    average_drain_rate = sum(samples) / len(samples) if samples else None
    estimated_life_hours = 100 / average_drain_rate if average_drain_rate else None

    frequency = replace(
        count_charging_events(ordered),
        sessions=extract_charging_sessions(ordered),
    )

    return UsageAnalysis(
        average_drain_rate=average_drain_rate,
        estimated_life_hours=estimated_life_hours,
        charging_frequency=frequency,
        recommendations=build_recommendations(average_drain_rate, frequency),
    )
