#!/usr/bin/env python3
"""
Battery Tray Indicator.
Shows the monitor's latest update; the monitor and its timers run in the
same GLib main loop.
"""

import logging

import gi
gi.require_version("Gtk", "3.0")
gi.require_version("AyatanaAppIndicator3", "0.1")
from gi.repository import Gtk, AyatanaAppIndicator3

from .config import SENSOR_KIND, STORE_FILE
from .health import calculate_wear, health_report
from .monitor import BatteryMonitor, MonitorUpdate
from .notifications import NotifySendNotifier
from .scheduler import PollScheduler
from .sensors import create_sensor
from .store import JsonFileStore

logger = logging.getLogger(__name__)


def format_minutes(minutes) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def get_battery_icon(percent: float, charging: bool) -> str:
    """Get appropriate battery icon name."""
    if percent >= 80:
        level = "full"
    elif percent >= 50:
        level = "good"
    elif percent >= 20:
        level = "low"
    else:
        level = "empty"

    if charging:
        return f"battery-{level}-charging"
    return f"battery-{level}"


def time_label(update: MonitorUpdate) -> str:
    if update.snapshot.is_charging:
        if update.minutes_to_full is not None:
            return f"Time: {format_minutes(update.minutes_to_full)} to full"
        return "Time: Charging..."
    if update.time_remaining_minutes is not None:
        return f"Time: {format_minutes(update.time_remaining_minutes)} remaining"
    return "Time: Calculating..."


class BatteryIndicator:
    """System tray indicator showing battery status."""

    def __init__(self, monitor: BatteryMonitor, scheduler: PollScheduler):
        self.monitor = monitor
        self.scheduler = scheduler

        self.indicator = AyatanaAppIndicator3.Indicator.new(
            "battery-sentinel", "battery-good", AyatanaAppIndicator3.IndicatorCategory.HARDWARE
        )
        self.indicator.set_status(AyatanaAppIndicator3.IndicatorStatus.ACTIVE)
        self.indicator.set_title("Battery: --%")

        self._build_menu()
        self.monitor.add_listener(self.update)

    def _info_item(self, label: str) -> Gtk.MenuItem:
        item = Gtk.MenuItem(label=label)
        item.set_sensitive(False)
        self.menu.append(item)
        return item

    def _build_menu(self):
        """Build the indicator menu."""
        self.menu = Gtk.Menu()

        self.percent_item = self._info_item("Battery: --%")
        self.time_item = self._info_item("Time: --")
        self.optimal_item = self._info_item("Charge in: --")

        self.menu.append(Gtk.SeparatorMenuItem())

        self.health_item = self._info_item("Health: --")
        self.wear_item = self._info_item("Wear: --")
        self.cycles_item = self._info_item("Cycles: --")
        self.drain_item = self._info_item("Drain: --")
        self.report_item = self._info_item("Report: collecting data...")

        self.menu.append(Gtk.SeparatorMenuItem())

        self.batteries_menu_item = Gtk.MenuItem(label="Batteries")
        self.batteries_submenu = Gtk.Menu()
        self.batteries_menu_item.set_submenu(self.batteries_submenu)
        self.menu.append(self.batteries_menu_item)

        self.menu.append(Gtk.SeparatorMenuItem())

        settings = self.monitor.settings.load()
        self.notify_item = Gtk.CheckMenuItem(label="Notifications")
        self.notify_item.set_active(settings.notifications_enabled)
        self.notify_item.connect("toggled", self.toggle_notifications)
        self.menu.append(self.notify_item)

        clear_item = Gtk.MenuItem(label="Clear notification history")
        clear_item.connect("activate", lambda _: self.monitor.engine.clear_history())
        self.menu.append(clear_item)

        quit_item = Gtk.MenuItem(label="Quit")
        quit_item.connect("activate", self.quit)
        self.menu.append(quit_item)

        self.menu.show_all()
        self.batteries_menu_item.hide()
        self.indicator.set_menu(self.menu)

    def _update_batteries(self, update: MonitorUpdate):
        for child in self.batteries_submenu.get_children():
            self.batteries_submenu.remove(child)

        if not update.snapshot.is_multi:
            self.batteries_menu_item.hide()
            return

        for index, battery in enumerate(update.snapshot.batteries, start=1):
            state = " CHG" if battery.is_charging else ""
            health = f", health {battery.health_score}%" if battery.health_score is not None else ""
            item = Gtk.MenuItem(label=f"Battery {index}: {battery.percent:.0f}%{state}{health}")
            item.set_sensitive(False)
            self.batteries_submenu.append(item)
        self.batteries_submenu.show_all()
        self.batteries_menu_item.show()

    def update(self, update: MonitorUpdate) -> None:
        """Refresh the indicator from a monitor update."""
        snapshot = update.snapshot
        percent = snapshot.percent
        charging = snapshot.is_charging

        self.time_item.set_label(time_label(update))
        if update.optimal_charge_in == "now":
            self.optimal_item.set_label("Charge in: now")
        elif update.optimal_charge_in:
            self.optimal_item.set_label(f"Charge in: {update.optimal_charge_in}")
        else:
            self.optimal_item.set_label("Charge in: --")

        if not update.significant_change:
            return

        icon = self.get_icon(percent, charging)
        self.indicator.set_icon_full(icon, f"Battery {percent:.0f}%")
        self.indicator.set_label(f"{percent:.0f}%", "")
        self.indicator.set_title(f"Battery {percent:.0f}%")
        self.percent_item.set_label(f"Battery: {percent:.0f}%{' CHG' if charging else ''}")

        if snapshot.health_score is not None:
            self.health_item.set_label(f"Health: {snapshot.health_score}%")
        wear = calculate_wear(snapshot)
        self.wear_item.set_label(f"Wear: {wear}%" if wear is not None else "Wear: --")
        if snapshot.cycle_count is not None:
            self.cycles_item.set_label(f"Cycles: {snapshot.cycle_count}")

        rate = update.analysis.average_drain_rate
        self.drain_item.set_label(f"Drain: {rate:.1f}%/h" if rate else "Drain: --")

        report = health_report(snapshot, update.history)
        if report is not None:
            self.report_item.set_label(f"Report: {report.score}% ({report.verdict})")

        self._update_batteries(update)

    @staticmethod
    def get_icon(percent: float, charging: bool) -> str:
        if not charging and percent <= 5:
            return "battery-empty"
        if not charging and percent <= 10:
            return "battery-caution"
        return get_battery_icon(percent, charging)

    def toggle_notifications(self, widget):
        self.monitor.settings.update({"notifications_enabled": widget.get_active()})

    def quit(self, widget):
        """Clean up and quit."""
        self.scheduler.stop()
        Gtk.main_quit()


def main():
    """Entry point for the tray indicator."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    store = JsonFileStore(STORE_FILE)
    monitor = BatteryMonitor(create_sensor(SENSOR_KIND), store, NotifySendNotifier())
    monitor.settings.initialize()

    scheduler = PollScheduler(monitor)
    BatteryIndicator(monitor, scheduler)
    scheduler.start()

    try:
        Gtk.main()
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
