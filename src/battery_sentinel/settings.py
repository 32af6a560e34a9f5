"""
User settings, persisted under the ``settings`` key of the store.

Stored documents use camelCase keys (``notificationsEnabled``,
``optimalChargeCycles.lowerLimit``) like every other record in the store;
snake_case names are accepted too. The core never writes settings on its
own; it re-reads them every decision cycle so changes made from the tray
take effect on the next tick.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .config import SETTINGS_KEY
from .store import KeyValueStore

logger = logging.getLogger(__name__)


class OptimalChargeCycles(BaseModel):
    """Keep the battery between these limits to slow wear."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    lower_limit: float = Field(20, ge=0, le=100)
    upper_limit: float = Field(80, ge=0, le=100)

    @model_validator(mode="after")
    def check_limits(self) -> "OptimalChargeCycles":
        if self.lower_limit > self.upper_limit:
            raise ValueError("lower_limit must not exceed upper_limit")
        return self


class Settings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start_at_login: bool = True
    minimize_to_tray: bool = True
    notifications_enabled: bool = True
    overcharge_threshold: float = Field(80, ge=0, le=100)
    low_battery_threshold: float = Field(20, ge=0, le=100)
    check_interval_minutes: float = Field(5, gt=0)
    optimal_charge_cycles: OptimalChargeCycles = Field(default_factory=OptimalChargeCycles)


class SettingsManager:
    """Reads and writes Settings through a key-value store.

    ``update`` and ``update_setting`` take snake_case field names. Listeners
    added with ``add_listener`` are called with the new Settings after every
    save.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._listeners: list[Callable[[Settings], None]] = []

    def add_listener(self, callback: Callable[[Settings], None]) -> None:
        self._listeners.append(callback)

    def initialize(self) -> Settings:
        """Persist the defaults if nothing has been saved yet."""
        if self.store.get(SETTINGS_KEY) is None:
            self.store.set(SETTINGS_KEY, Settings().model_dump(by_alias=True))
        return self.load()

    def load(self) -> Settings:
        raw = self.store.get(SETTINGS_KEY)
        if raw is None:
            return Settings()
        try:
            return Settings.model_validate(raw)
        except ValidationError as e:
            logger.warning("Invalid stored settings, using defaults: %s", e)
            return Settings()

    def save(self, settings: Settings) -> Settings:
        self.store.set(SETTINGS_KEY, settings.model_dump(by_alias=True))
        for listener in self._listeners:
            listener(settings)
        return settings

    def update(self, changes: dict[str, Any]) -> Settings:
        """Merge ``changes`` into the current settings.

        The nested ``optimal_charge_cycles`` block is merged key by key, so a
        partial block keeps the untouched limits.
        """
        current = self.load().model_dump()
        optimal = {**current["optimal_charge_cycles"], **(changes.get("optimal_charge_cycles") or {})}
        merged = {**current, **changes, "optimal_charge_cycles": optimal}
        return self.save(Settings.model_validate(merged))

    def reset(self) -> Settings:
        return self.save(Settings())

    def get_setting(self, key: str) -> Any:
        """Dotted-key lookup, e.g. ``optimal_charge_cycles.lower_limit``."""
        value: Any = self.load().model_dump()
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return None
        return value

    def update_setting(self, key: str, value: Any) -> Settings:
        data = self.load().model_dump()
        parts = key.split(".")

        target = data
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                raise KeyError(key)
            target = target[part]
        if parts[-1] not in target:
            raise KeyError(key)
        target[parts[-1]] = value

        return self.save(Settings.model_validate(data))
