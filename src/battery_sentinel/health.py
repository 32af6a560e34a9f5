"""
Battery health and wear estimation.

Works on anything exposing ``max_capacity``, ``design_capacity`` and
``cycle_count`` (raw readings and snapshots alike).
"""

import math
from typing import Optional, Sequence

from .analysis import count_charging_events
from .models import HealthReport, HistoryEntry

# Cycle penalty starts after this many cycles and is capped at 50%
CYCLE_PENALTY_START = 300
CYCLE_PENALTY_SPAN = 1000
MAX_CYCLE_PENALTY = 0.5

MIN_REPORT_ENTRIES = 5


def round_half_up(value: float) -> int:
    """Round halves towards +inf (never to even)."""
    return int(math.floor(value + 0.5))


def cycle_penalty(cycle_count: Optional[int]) -> float:
    """Fraction of health lost to cycle wear (0.0 - 0.5)."""
    if not cycle_count or cycle_count <= CYCLE_PENALTY_START:
        return 0.0
    return min(MAX_CYCLE_PENALTY, (cycle_count - CYCLE_PENALTY_START) / CYCLE_PENALTY_SPAN)


def calculate_health(battery) -> Optional[int]:
    """
    Health score (0-100) from capacity ratio and cycle count.

    A measured capacity above design capacity is not clamped, so the score can
    exceed 100 on a fresh pack.
    """
    if battery is None:
        return None

    score = 100.0
    if battery.max_capacity and battery.design_capacity:
        score *= battery.max_capacity / battery.design_capacity

    score *= 1 - cycle_penalty(battery.cycle_count)
    return round_half_up(score)


def capacity_percentage(battery) -> Optional[int]:
    """Full-charge capacity as a percentage of design capacity."""
    if battery is None or not battery.max_capacity or not battery.design_capacity:
        return None
    return round_half_up(100 * battery.max_capacity / battery.design_capacity)


def calculate_wear(battery) -> Optional[int]:
    """Capacity lost since manufacture, in percent."""
    percentage = capacity_percentage(battery)
    if percentage is None:
        return None
    return 100 - percentage


def health_report(snapshot, history: Sequence[HistoryEntry]) -> Optional[HealthReport]:
    """
    Composite health score blending capacity, cycles and charging habits.

    Returns None until enough history has been collected.
    """
    if snapshot is None or not history or len(history) < MIN_REPORT_ENTRIES:
        return None

    score = 100.0

    capacity_pct = capacity_percentage(snapshot)
    if capacity_pct is not None:
        score -= (100 - capacity_pct) * 0.5

    if snapshot.cycle_count:
        # Most batteries are rated for 300-500 cycles
        estimated_life = max(0.0, 100 - snapshot.cycle_count / 5)
        score -= (100 - estimated_life) * 0.2

    frequency = count_charging_events(sorted(history, key=lambda e: e.timestamp))
    habits = max(0, 100 - frequency.deep_discharge * 5 - frequency.overcharge * 2)
    score -= (100 - habits) * 0.3

    score = max(0, min(100, round_half_up(score)))

    if score >= 80:
        verdict = "good"
    elif score >= 50:
        verdict = "wear"
    else:
        verdict = "declining"

    return HealthReport(
        score=score,
        verdict=verdict,
        capacity_percentage=capacity_pct,
        cycle_count=snapshot.cycle_count,
        deep_discharge_events=frequency.deep_discharge,
        overcharge_events=frequency.overcharge,
    )
