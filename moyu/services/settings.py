"""
Settings Service — user preferences persisted in the key-value store.

Defaults live here as module constants; anything the user has saved
overrides them.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from moyu.data.models import CompensationConfig
from moyu.data.store import (
    KEY_CURRENCY,
    KEY_SALARY,
    KEY_TRACKING_ENABLED,
    KEY_WORK_APPS,
    KEY_WORK_DAYS,
    KEY_WORK_HOURS,
    KEY_WORK_INTERVAL_MIN,
    KeyValueStore,
)
from moyu.errors import ConfigurationMissing

logger = logging.getLogger(__name__)

DEFAULT_WORK_DAYS = 22
DEFAULT_WORK_HOURS = 8
DEFAULT_CURRENCY = "¥"
DEFAULT_WORK_INTERVAL_MIN = 60


def parse_work_apps(value: Union[str, Iterable[str], None]) -> List[str]:
    """Accept "Code, Terminal" or ["Code", " Terminal "]; drop blanks."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


def _positive_number(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class SettingsService:
    """Typed accessors over the raw key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ── Whitelist ───────────────────────────────────────────────────────────

    def work_apps(self) -> List[str]:
        return parse_work_apps(self.store.get(KEY_WORK_APPS, []))

    def set_work_apps(self, value: Union[str, Iterable[str]]) -> List[str]:
        apps = parse_work_apps(value)
        self.store.set(KEY_WORK_APPS, apps)
        logger.info("Work app whitelist set to %s", apps)
        return apps

    # ── Compensation ────────────────────────────────────────────────────────

    def compensation(self) -> CompensationConfig:
        return CompensationConfig(
            monthly_salary=_positive_number(self.store.get(KEY_SALARY)),
            work_days_per_month=_positive_number(
                self.store.get(KEY_WORK_DAYS, DEFAULT_WORK_DAYS)),
            work_hours_per_day=_positive_number(
                self.store.get(KEY_WORK_HOURS, DEFAULT_WORK_HOURS)),
            currency_symbol=self.store.get(KEY_CURRENCY) or DEFAULT_CURRENCY,
        )

    def require_compensation(self) -> CompensationConfig:
        """Like compensation(), but raises ConfigurationMissing if unusable."""
        config = self.compensation()
        if not (config.monthly_salary and config.work_days_per_month
                and config.work_hours_per_day):
            raise ConfigurationMissing("Salary, work days and work hours are required.")
        return config

    def set_compensation(
        self,
        salary: float,
        work_days: float = DEFAULT_WORK_DAYS,
        work_hours: float = DEFAULT_WORK_HOURS,
        currency_symbol: Optional[str] = None,
    ) -> None:
        values = {
            KEY_SALARY: salary,
            KEY_WORK_DAYS: work_days,
            KEY_WORK_HOURS: work_hours,
        }
        if currency_symbol:
            values[KEY_CURRENCY] = currency_symbol
        self.store.set_many(values)

    # ── Tracking switch / timer ─────────────────────────────────────────────

    def tracking_enabled(self) -> bool:
        return bool(self.store.get(KEY_TRACKING_ENABLED, True))

    def set_tracking_enabled(self, enabled: bool) -> None:
        self.store.set(KEY_TRACKING_ENABLED, bool(enabled))

    def work_interval_minutes(self) -> float:
        return (_positive_number(self.store.get(KEY_WORK_INTERVAL_MIN))
                or DEFAULT_WORK_INTERVAL_MIN)

    def set_work_interval_minutes(self, minutes: float) -> float:
        value = _positive_number(minutes)
        if value is None:
            raise ValueError(f"Work interval must be a positive number of minutes, got {minutes!r}.")
        self.store.set(KEY_WORK_INTERVAL_MIN, value)
        return value
