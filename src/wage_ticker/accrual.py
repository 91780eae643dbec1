"""Linear accrual of the daily rate over the work interval."""

from __future__ import annotations

import math

from .interval import total_minutes
from .models import AccrualConfig, WorkedDuration


def earned(config: AccrualConfig, elapsed_minutes: float) -> float:
    """Amount earned after `elapsed_minutes`, in the primary unit."""
    total = total_minutes(config.interval)
    if elapsed_minutes <= 0:
        return 0.0
    if elapsed_minutes >= total:
        return float(config.daily_rate)
    amount = config.daily_rate * elapsed_minutes / total
    return min(max(amount, 0.0), float(config.daily_rate))


def hourly_rate(config: AccrualConfig) -> float:
    return config.daily_rate / total_minutes(config.interval) * 60


def progress_percent(config: AccrualConfig, elapsed_minutes: float) -> float:
    progress = elapsed_minutes / total_minutes(config.interval) * 100
    return min(100.0, max(0.0, progress))


def worked_duration(elapsed_minutes: float) -> WorkedDuration:
    """Split fractional minutes into whole hours, minutes and seconds."""
    total_seconds = math.floor(max(elapsed_minutes, 0.0) * 60)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return WorkedDuration(hours=hours, minutes=minutes, seconds=seconds)
