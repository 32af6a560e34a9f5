"""
INA219 UPS HAT sensor for Raspberry Pi builds.

The HAT has no fuel gauge, so state of charge comes from the pack voltage and
time remaining from the nominal capacity and the averaged current draw.
"""

import logging
from collections import deque
from typing import List

from ina219 import INA219, DeviceRangeError

from .config import I2C_ADDRESS, I2C_BUS, NOMINAL_CAPACITY_MAH, SHUNT_OHMS
from .discharge_curve import voltage_to_percent
from .models import BatteryReading
from .sensors import SensorUnavailable

logger = logging.getLogger(__name__)

CHARGE_CURRENT_THRESHOLD = 10  # mA - above this = charging
MIN_DRAW_MA = 30  # below this the estimate is meaningless
MAX_ESTIMATE_HOURS = 50


class INA219Sensor:
    """Single-battery sensor on the I2C bus."""

    def __init__(self, shunt_ohms=SHUNT_OHMS, address=I2C_ADDRESS, busnum=I2C_BUS,
                 capacity_mah=NOMINAL_CAPACITY_MAH):
        self.capacity_mah = capacity_mah
        # Last 60 samples = ~5 min at 5s intervals
        self._recent_current = deque(maxlen=60)
        try:
            self.ina = INA219(shunt_ohms, address=address, busnum=busnum)
            self.ina.configure()
        except OSError as e:
            raise SensorUnavailable(f"INA219 init error: {e}") from e

    def _time_remaining(self, percent: float) -> int | None:
        if len(self._recent_current) < 3:
            return None
        avg_current = sum(self._recent_current) / len(self._recent_current)
        if avg_current < MIN_DRAW_MA:
            return None

        remaining_mah = (percent / 100.0) * self.capacity_mah
        hours_remaining = remaining_mah / avg_current
        if hours_remaining > MAX_ESTIMATE_HOURS:
            return None
        return int(hours_remaining * 60)

    def read(self) -> List[BatteryReading]:
        try:
            voltage = self.ina.voltage()
            current = self.ina.current()
        except (DeviceRangeError, OSError) as e:
            raise SensorUnavailable(f"INA219 read error: {e}") from e

        charging = current > CHARGE_CURRENT_THRESHOLD
        if charging:
            self._recent_current.clear()
        else:
            self._recent_current.append(abs(current))

        percent = voltage_to_percent(voltage)
        logger.debug("INA219 %.2fV %.1fmA -> %.1f%%", voltage, current, percent)

        return [
            BatteryReading(
                percent=percent,
                is_charging=charging,
                design_capacity=self.capacity_mah,
                time_remaining_minutes=None if charging else self._time_remaining(percent),
                name="ups",
            )
        ]
