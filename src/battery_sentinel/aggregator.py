"""
Snapshot aggregation - folds one or many sensor readings into one Snapshot.
"""

import logging
from dataclasses import replace
from typing import Optional, Sequence, Union

from .health import calculate_health, round_half_up
from .models import BatteryReading, Snapshot
from .sensors import BatterySensor, SensorUnavailable

logger = logging.getLogger(__name__)

WEIGHTED = "capacity-weighted"
MEAN = "mean"


def _to_snapshot(reading: BatteryReading) -> Snapshot:
    return Snapshot(
        percent=reading.percent,
        is_charging=reading.is_charging,
        max_capacity=reading.max_capacity,
        design_capacity=reading.design_capacity,
        cycle_count=reading.cycle_count,
        time_remaining_minutes=reading.time_remaining_minutes,
        health_score=calculate_health(reading),
        name=reading.name,
    )


def aggregate(readings: Union[BatteryReading, Sequence[BatteryReading]]) -> Snapshot:
    """
    Build a canonical snapshot from one or more readings.

    Multiple batteries are combined as follows: percent is weighted by full
    capacity when every battery reports one, otherwise a plain mean;
    capacities are summed; cycle count is the rounded mean of the reported
    values; time remaining is the minimum over discharging batteries.
    """
    if isinstance(readings, BatteryReading):
        readings = [readings]
    if not readings:
        raise ValueError("at least one battery reading is required")
    if len(readings) == 1:
        return _to_snapshot(readings[0])

    batteries = tuple(_to_snapshot(reading) for reading in readings)

    if all(b.max_capacity for b in batteries):
        total = sum(b.max_capacity for b in batteries)
        percent = sum(b.percent * b.max_capacity for b in batteries) / total
        method = WEIGHTED
    else:
        percent = sum(b.percent for b in batteries) / len(batteries)
        method = MEAN

    cycles = [b.cycle_count for b in batteries if b.cycle_count is not None]
    cycle_count = round_half_up(sum(cycles) / len(cycles)) if cycles else None

    remaining = [
        b.time_remaining_minutes
        for b in batteries
        if not b.is_charging and b.time_remaining_minutes is not None
    ]

    aggregate_snapshot = Snapshot(
        percent=percent,
        is_charging=any(b.is_charging for b in batteries),
        max_capacity=sum(b.max_capacity or 0 for b in batteries),
        design_capacity=sum(b.design_capacity or 0 for b in batteries),
        cycle_count=cycle_count,
        time_remaining_minutes=min(remaining) if remaining else None,
        batteries=batteries,
        aggregation=method,
    )
    return replace(aggregate_snapshot, health_score=calculate_health(aggregate_snapshot))


def read_snapshot(sensor: BatterySensor) -> Optional[Snapshot]:
    """Query the sensor once; None means "no data this cycle"."""
    try:
        readings = sensor.read()
    except SensorUnavailable as e:
        logger.warning("Battery sensor unavailable: %s", e)
        return None

    if not readings:
        logger.warning("Battery sensor returned no readings")
        return None
    return aggregate(readings)
