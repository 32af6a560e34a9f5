"""
Value types shared by the analytics core.

Everything here is immutable: a Snapshot is built once per sensor poll, a
HistoryEntry once per history tick, and neither is touched afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class BatteryReading:
    """One raw reading as returned by a sensor backend."""

    percent: float
    is_charging: bool
    max_capacity: Optional[float] = None
    design_capacity: Optional[float] = None
    cycle_count: Optional[int] = None
    time_remaining_minutes: Optional[int] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Normalized battery state at one point in time.

    For multi-battery hosts ``batteries`` holds the per-battery snapshots and
    the top-level fields are aggregates over them.
    """

    percent: float
    is_charging: bool
    max_capacity: Optional[float] = None
    design_capacity: Optional[float] = None
    cycle_count: Optional[int] = None
    time_remaining_minutes: Optional[int] = None
    health_score: Optional[int] = None
    name: Optional[str] = None
    batteries: Tuple["Snapshot", ...] = ()
    aggregation: Optional[str] = None

    @property
    def is_multi(self) -> bool:
        return len(self.batteries) > 1

    @property
    def count(self) -> int:
        return len(self.batteries) if self.batteries else 1


@dataclass(frozen=True)
class HistoryEntry:
    """Reduced snapshot persisted for trend analysis."""

    timestamp: datetime
    percentage: float
    is_charging: bool
    capacity: Optional[float] = None
    cycle_count: Optional[int] = None
    battery_percentages: Optional[Tuple[float, ...]] = None
    battery_charging: Optional[Tuple[bool, ...]] = None

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, timestamp: datetime) -> "HistoryEntry":
        percentages = None
        charging = None
        if snapshot.is_multi:
            percentages = tuple(b.percent for b in snapshot.batteries)
            charging = tuple(b.is_charging for b in snapshot.batteries)
        return cls(
            timestamp=timestamp,
            percentage=snapshot.percent,
            is_charging=snapshot.is_charging,
            capacity=snapshot.max_capacity,
            cycle_count=snapshot.cycle_count,
            battery_percentages=percentages,
            battery_charging=charging,
        )

    def to_dict(self) -> dict:
        data = {
            "timestamp": self.timestamp.isoformat(),
            "percentage": self.percentage,
            "isCharging": self.is_charging,
            "capacity": self.capacity,
            "cycleCount": self.cycle_count,
        }
        if self.battery_percentages is not None:
            data["isMultiBattery"] = True
            data["batteryCount"] = len(self.battery_percentages)
            data["batteryPercentages"] = list(self.battery_percentages)
            data["batteryCharging"] = list(self.battery_charging or ())
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        percentages = data.get("batteryPercentages")
        charging = data.get("batteryCharging")
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            percentage=float(data["percentage"]),
            is_charging=bool(data["isCharging"]),
            capacity=data.get("capacity"),
            cycle_count=data.get("cycleCount"),
            battery_percentages=tuple(percentages) if percentages is not None else None,
            battery_charging=tuple(charging) if charging is not None else None,
        )


@dataclass(frozen=True)
class ChargingSession:
    start_time: datetime
    start_percentage: float
    end_time: datetime
    end_percentage: float

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0

    @property
    def rate_per_minute(self) -> float:
        return (self.end_percentage - self.start_percentage) / self.duration_minutes

    def is_valid(self) -> bool:
        return self.duration_minutes >= 1 and self.end_percentage > self.start_percentage


@dataclass(frozen=True)
class ChargingFrequency:
    total: int
    deep_discharge: int
    overcharge: int
    sessions: List[ChargingSession] = field(default_factory=list)


@dataclass(frozen=True)
class Recommendation:
    type: str
    message: str


@dataclass(frozen=True)
class UsageAnalysis:
    average_drain_rate: Optional[float] = None
    estimated_life_hours: Optional[float] = None
    charging_frequency: Optional[ChargingFrequency] = None
    recommendations: List[Recommendation] = field(default_factory=list)


@dataclass(frozen=True)
class HealthReport:
    score: int
    verdict: str
    capacity_percentage: Optional[int] = None
    cycle_count: Optional[int] = None
    deep_discharge_events: int = 0
    overcharge_events: int = 0


@dataclass(frozen=True)
class NotificationRecord:
    """Entry of the recent-notification log used only for throttling."""

    type: str
    title: str
    timestamp: datetime
    window: timedelta

    def is_expired(self, now: datetime) -> bool:
        return self.timestamp < now - self.window

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "title": self.title,
            "timestamp": self.timestamp.isoformat(),
            "windowSeconds": self.window.total_seconds(),
        }

    @classmethod
    def from_dict(cls, data: dict, default_window: timedelta) -> "NotificationRecord":
        window = data.get("windowSeconds")
        return cls(
            type=data["type"],
            title=data["title"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            window=timedelta(seconds=window) if window is not None else default_window,
        )


@dataclass(frozen=True)
class BatteryState:
    """Last-known charging state, threaded between decision cycles."""

    is_charging: bool
    percentage: float

    def to_dict(self) -> dict:
        return {"isCharging": self.is_charging, "percentage": self.percentage}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["BatteryState"]:
        if not data:
            return None
        return cls(is_charging=bool(data["isCharging"]), percentage=float(data["percentage"]))
