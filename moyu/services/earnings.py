"""Earnings Calculator — how much salary a break was worth."""

from __future__ import annotations

from moyu.data.models import CompensationConfig

SECONDS_PER_HOUR = 3600


def rate_per_second(config: CompensationConfig) -> float:
    """
    salary / (days * hours * 3600).

    Any missing, zero or negative factor gives a rate of zero instead of a
    division error: an unconfigured salary simply earns nothing.
    """
    salary = config.monthly_salary
    days = config.work_days_per_month
    hours = config.work_hours_per_day
    if not salary or not days or not hours:
        return 0.0
    if salary < 0 or days < 0 or hours < 0:
        return 0.0
    return float(salary) / (float(days) * float(hours) * SECONDS_PER_HOUR)


def hourly_rate(config: CompensationConfig) -> float:
    return rate_per_second(config) * SECONDS_PER_HOUR


def earned(duration_seconds: float, config: CompensationConfig) -> float:
    return max(duration_seconds, 0.0) * rate_per_second(config)


def format_amount(amount: float, config: CompensationConfig, places: int = 2) -> str:
    return f"{config.currency_symbol}{amount:.{places}f}"
