"""
Battery sensor backends.

A sensor returns every battery it can see, or raises SensorUnavailable. It
never returns partial data.
"""

import logging
from pathlib import Path
from typing import List, Optional, Protocol

from .config import POWER_SUPPLY_ROOT
from .models import BatteryReading

logger = logging.getLogger(__name__)


class SensorUnavailable(Exception):
    """The battery could not be queried this cycle."""


class BatterySensor(Protocol):
    def read(self) -> List[BatteryReading]: ...


class SysfsBatterySensor:
    """Reads batteries from the Linux power_supply class."""

    def __init__(self, root: Path = POWER_SUPPLY_ROOT):
        self.root = Path(root)

    def _battery_dirs(self) -> List[Path]:
        if not self.root.is_dir():
            return []

        dirs = []
        for entry in sorted(self.root.iterdir()):
            supply_type = self._read(entry, "type")
            if supply_type == "Battery" or (supply_type is None and entry.name.upper().startswith("BAT")):
                dirs.append(entry)
        return dirs

    @staticmethod
    def _read(directory: Path, name: str) -> Optional[str]:
        path = directory / name
        if not path.exists():
            return None
        return path.read_text().strip()

    def _read_int(self, directory: Path, name: str) -> Optional[int]:
        value = self._read(directory, name)
        if value is None or value == "":
            return None
        return int(value)

    def _read_battery(self, directory: Path) -> BatteryReading:
        percent = self._read_int(directory, "capacity")
        if percent is None:
            raise SensorUnavailable(f"{directory.name}: no capacity attribute")

        status = self._read(directory, "status") or "Unknown"
        charging = status == "Charging"

        # energy_* in uWh, charge_* in uAh; never mix the two families
        if self._read(directory, "energy_full") is not None:
            prefix, rate_name = "energy", "power_now"
        else:
            prefix, rate_name = "charge", "current_now"

        full = self._read_int(directory, f"{prefix}_full")
        design = self._read_int(directory, f"{prefix}_full_design")
        now = self._read_int(directory, f"{prefix}_now")
        rate = self._read_int(directory, rate_name)

        time_remaining = None
        if not charging and now is not None and rate:
            time_remaining = int(now / abs(rate) * 60)

        return BatteryReading(
            percent=float(percent),
            is_charging=charging,
            max_capacity=full or None,
            design_capacity=design or None,
            cycle_count=self._read_int(directory, "cycle_count"),
            time_remaining_minutes=time_remaining,
            name=directory.name,
        )

    def read(self) -> List[BatteryReading]:
        try:
            dirs = self._battery_dirs()
            if not dirs:
                raise SensorUnavailable(f"no battery found under {self.root}")
            return [self._read_battery(d) for d in dirs]
        except (OSError, ValueError) as e:
            raise SensorUnavailable(str(e)) from e


def create_sensor(kind: str) -> BatterySensor:
    """Build the sensor backend named by ``kind`` ("sysfs" or "ina219")."""
    if kind == "sysfs":
        return SysfsBatterySensor()
    if kind == "ina219":
        from .ina219_sensor import INA219Sensor

        return INA219Sensor()
    raise ValueError(f"unknown sensor kind: {kind!r}")
