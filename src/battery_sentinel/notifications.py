"""
Notification decision engine.

Maps each snapshot to advisory notifications and throttles them so the same
alert is not repeated every five seconds. Every notification sent is logged
with the window it was throttled under; a record leaves the log once its own
window has passed.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, List, Optional, Protocol

from .config import NOTIFICATIONS_KEY
from .health import capacity_percentage, round_half_up
from .models import BatteryState, NotificationRecord, Snapshot, UsageAnalysis
from .store import KeyValueStore

logger = logging.getLogger(__name__)

INFO = "info"
WARNING = "warning"
CRITICAL = "critical"

DEFAULT_WINDOW = timedelta(minutes=15)
HEALTH_WINDOW = timedelta(hours=24)
USAGE_TIP_WINDOW = timedelta(days=3)
IMBALANCE_WINDOW = timedelta(days=7)

CRITICAL_PERCENT = 5
LOW_CRITICAL_PERCENT = 10
IMBALANCE_PERCENT = 20
HEALTH_WARNING_PERCENT = 50

APP_NAME = "Battery Sentinel"

ICONS = {
    INFO: "dialog-information",
    WARNING: "dialog-warning",
    CRITICAL: "dialog-error",
}


class Notifier(Protocol):
    def notify(self, title: str, message: str, severity: str, play_sound: bool) -> None: ...


class NotifySendNotifier:
    """Send a notification via notify-send (works with mako, dunst, etc.)."""

    def __init__(self, expire_ms: int = 10000):
        self.expire_ms = expire_ms

    def build_command(self, title: str, message: str, severity: str, play_sound: bool) -> List[str]:
        urgency = "critical" if severity == CRITICAL else "normal"
        cmd = [
            "notify-send",
            "-a", APP_NAME,
            "-u", urgency,
            "-i", ICONS.get(severity, ICONS[INFO]),
            "-t", str(self.expire_ms),
        ]
        if play_sound:
            cmd += ["-h", "string:sound-name:dialog-warning"]
        return cmd + [title, message]

    def notify(self, title: str, message: str, severity: str, play_sound: bool) -> None:
        cmd = self.build_command(title, message, severity, play_sound)
        try:
            subprocess.run(cmd, timeout=5, capture_output=True)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("notify-send failed for %r: %s", title, e)


@dataclass
class Decision:
    """Outcome of one decision cycle."""

    sent: List[str] = field(default_factory=list)
    state: Optional[BatteryState] = None


class NotificationEngine:
    """Stateful throttle in front of a Notifier."""

    def __init__(self, store: KeyValueStore, notifier: Notifier,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.enabled = True
        self._lock = Lock()

    def _load_records(self) -> List[NotificationRecord]:
        records = []
        for raw in self.store.get(NOTIFICATIONS_KEY) or []:
            try:
                records.append(NotificationRecord.from_dict(raw, DEFAULT_WINDOW))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Dropping malformed notification record %r: %s", raw, e)
        return records

    def recent(self) -> List[NotificationRecord]:
        now = self.clock()
        return [r for r in self._load_records() if not r.is_expired(now)]

    def send_if_not_recent(self, title: str, message: str, severity: str = INFO,
                           window: timedelta = DEFAULT_WINDOW,
                           category: Optional[str] = None) -> bool:
        """
        Dispatch a notification unless an equivalent one is still in its window.

        Without ``category`` the throttle key is (severity, title); with it,
        any earlier notification of that category suppresses this one.

        Returns:
            True if sent, False if suppressed or notifications are disabled.
        """
        if not self.enabled:
            return False

        with self._lock:
            now = self.clock()
            records = [r for r in self._load_records() if not r.is_expired(now)]
            cutoff = now - window

            if category is not None:
                duplicate = any(r.type == category and r.timestamp >= cutoff for r in records)
            else:
                duplicate = any(
                    r.type == severity and r.title == title and r.timestamp >= cutoff
                    for r in records
                )

            if duplicate:
                logger.debug("Suppressed notification %r", title)
                self.store.set(NOTIFICATIONS_KEY, [r.to_dict() for r in records])
                return False

            records.append(NotificationRecord(category or severity, title, now, window))
            self.store.set(NOTIFICATIONS_KEY, [r.to_dict() for r in records])

        logger.info("Notification [%s] %s: %s", severity, title, message)
        self.notifier.notify(title, message, severity, severity == CRITICAL)
        return True

    def clear_history(self) -> None:
        with self._lock:
            self.store.set(NOTIFICATIONS_KEY, [])

    def evaluate(self, snapshot: Optional[Snapshot], analysis: Optional[UsageAnalysis],
                 settings, last_state: Optional[BatteryState]) -> Decision:
        """
        Run every rule for one cycle.

        Rules are independent; several may fire at once. The returned state
        is the new last-known charging state and must be persisted by the
        caller whether or not anything was sent.
        """
        if snapshot is None:
            return Decision(state=last_state)

        self.enabled = settings.notifications_enabled
        sent: List[str] = []

        def send(title, message, severity=INFO, window=DEFAULT_WINDOW, category=None):
            if self.send_if_not_recent(title, message, severity, window, category):
                sent.append(title)

        percentage = snapshot.percent
        charging = snapshot.is_charging

        if snapshot.is_multi:
            for index, battery in enumerate(snapshot.batteries, start=1):
                if not battery.is_charging and battery.percent <= CRITICAL_PERCENT:
                    send(
                        f"Battery {index} Critically Low",
                        f"Battery {index} is critically low ({round_half_up(battery.percent)}%)! "
                        "Save your work and connect to power immediately.",
                        CRITICAL,
                    )

            percentages = [b.percent for b in snapshot.batteries]
            highest, lowest = max(percentages), min(percentages)
            if highest - lowest > IMBALANCE_PERCENT:
                send(
                    "Unbalanced Batteries",
                    f"Your batteries are significantly unbalanced ({round_half_up(lowest)}% - "
                    f"{round_half_up(highest)}%). Consider running a battery calibration.",
                    WARNING,
                    IMBALANCE_WINDOW,
                    "unbalanced-batteries",
                )

        if charging and percentage >= settings.overcharge_threshold:
            send(
                "Overcharging Alert",
                f"Your battery is at {round_half_up(percentage)}%. To maximize battery health, "
                "consider unplugging your charger.",
                WARNING,
            )

        if not charging and percentage <= settings.low_battery_threshold:
            send(
                "Low Battery Alert",
                f"Your battery is at {round_half_up(percentage)}%. Connect your charger soon.",
                CRITICAL if percentage <= LOW_CRITICAL_PERCENT else WARNING,
            )

        if not charging and percentage <= CRITICAL_PERCENT:
            send(
                "Critical Battery Level",
                "Your battery is critically low! Save your work and connect to power immediately.",
                CRITICAL,
            )

        optimal = settings.optimal_charge_cycles
        if optimal.enabled:
            if charging and percentage >= optimal.upper_limit:
                send(
                    "Optimal Charging",
                    f"Battery reached {round_half_up(percentage)}%. For optimal battery life, "
                    "unplug your charger now.",
                )
            elif not charging and percentage <= optimal.lower_limit:
                send(
                    "Optimal Charging",
                    f"Battery at {round_half_up(percentage)}%. For optimal battery life, "
                    "it's a good time to charge now.",
                )

        health_percentage = capacity_percentage(snapshot)
        if health_percentage is not None and health_percentage < HEALTH_WARNING_PERCENT:
            send(
                "Battery Health Warning",
                f"Your battery health is at {health_percentage}%. Consider battery replacement soon.",
                WARNING,
                HEALTH_WINDOW,
                "health-warning",
            )

        if analysis is not None:
            for recommendation in analysis.recommendations:
                send(
                    "Battery Usage Tip",
                    recommendation.message,
                    INFO,
                    USAGE_TIP_WINDOW,
                    f"usage-{recommendation.type}",
                )

        if last_state is not None and last_state.is_charging != charging:
            if charging:
                send("Now Charging", f"Charger connected at {round_half_up(percentage)}%.")
            else:
                send("Running on Battery", f"Charger disconnected at {round_half_up(percentage)}%.")

        return Decision(sent=sent, state=BatteryState(is_charging=charging, percentage=percentage))
