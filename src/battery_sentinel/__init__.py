"""
Battery Sentinel - battery analytics and advisory notifications.

This package provides:
- Single and multi-battery snapshot aggregation
- Health score and wear estimation
- Rolling 7-day battery history
- Drain rate, charging habit and charging session analysis
- Time remaining, time to full and optimal charge predictions
- Throttled desktop notifications
- System tray indicator and conky status helper
"""

__version__ = "1.0.0"
__author__ = "Alfonso"

from .aggregator import aggregate, read_snapshot
from .analysis import analyze_battery_usage, extract_charging_sessions
from .health import calculate_health, calculate_wear, health_report
from .history import HistoryStore
from .models import (
    BatteryReading,
    BatteryState,
    ChargingSession,
    HistoryEntry,
    NotificationRecord,
    Snapshot,
    UsageAnalysis,
)
from .monitor import BatteryMonitor, MonitorUpdate
from .notifications import NotificationEngine, NotifySendNotifier
from .predictor import (
    estimated_time_remaining,
    predict_charging_time_to_full,
    predict_optimal_charge_time,
)
from .settings import Settings, SettingsManager
from .sensors import SensorUnavailable, SysfsBatterySensor, create_sensor
from .store import JsonFileStore, MemoryStore

__all__ = [
    "aggregate",
    "read_snapshot",
    "analyze_battery_usage",
    "extract_charging_sessions",
    "calculate_health",
    "calculate_wear",
    "health_report",
    "HistoryStore",
    "BatteryReading",
    "BatteryState",
    "ChargingSession",
    "HistoryEntry",
    "NotificationRecord",
    "Snapshot",
    "UsageAnalysis",
    "BatteryMonitor",
    "MonitorUpdate",
    "NotificationEngine",
    "NotifySendNotifier",
    "estimated_time_remaining",
    "predict_charging_time_to_full",
    "predict_optimal_charge_time",
    "Settings",
    "SettingsManager",
    "SensorUnavailable",
    "SysfsBatterySensor",
    "create_sensor",
    "JsonFileStore",
    "MemoryStore",
]
