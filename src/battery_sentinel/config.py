"""
Static configuration for the battery sentinel daemons.

User-facing preferences (thresholds, notification toggles, history cadence)
live in the persisted settings; see settings.py. The values here describe the
host and rarely change.
"""

import os
from pathlib import Path

# Data storage location
DATA_DIR = Path(os.getenv("BATTERY_SENTINEL_DATA_DIR", Path.home() / ".local" / "share" / "battery-sentinel"))
STORE_FILE = DATA_DIR / "store.json"

# Fast tick: snapshot, UI refresh, notification pass
FAST_POLL_SECONDS = int(os.getenv("BATTERY_SENTINEL_POLL_SECONDS", "5"))

# "sysfs" for laptops, "ina219" for the UPS HAT
SENSOR_KIND = os.getenv("BATTERY_SENTINEL_SENSOR", "sysfs")

POWER_SUPPLY_ROOT = Path("/sys/class/power_supply")

# INA219 UPS HAT (3S Li-ion default)
NOMINAL_CAPACITY_MAH = 3400  # Adjust for your battery
SHUNT_OHMS = 0.1
I2C_ADDRESS = 0x41
I2C_BUS = 1

# Persistence keys
SETTINGS_KEY = "settings"
HISTORY_KEY = "batteryHistory"
NOTIFICATIONS_KEY = "recentNotifications"
LAST_STATE_KEY = "lastBatteryState"
