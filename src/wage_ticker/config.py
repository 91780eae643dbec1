"""Configuration models and helpers for the earnings ticker."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

from .store import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_MS = 500
MAX_SAMPLE_MS = 24 * 60 * 60 * 1000
DEFAULT_EXCHANGE_RATE = 7.0


@dataclass(slots=True)
class SamplerSettings:
    """Runtime configuration for the sampling driver."""

    sample_period: timedelta = timedelta(milliseconds=DEFAULT_SAMPLE_MS)
    window_capacity: int = DEFAULT_CAPACITY
    exchange_rate: float = DEFAULT_EXCHANGE_RATE

    @classmethod
    def from_inputs(
        cls,
        sample_ms: Union[str, int, None] = None,
        window_capacity: Optional[int] = None,
        exchange_rate: Optional[float] = None,
    ) -> "SamplerSettings":
        capacity = window_capacity if window_capacity and window_capacity > 0 else DEFAULT_CAPACITY
        rate = exchange_rate if exchange_rate and exchange_rate > 0 else DEFAULT_EXCHANGE_RATE
        return cls(
            sample_period=timedelta(milliseconds=parse_sample_period(sample_ms)),
            window_capacity=capacity,
            exchange_rate=rate,
        )


def parse_daily_rate(value: Union[str, float, int, None]) -> float:
    """Parse a daily rate the way a form field would; bad input counts as 0."""
    if value is None:
        return 0.0
    try:
        rate = float(str(value).strip())
    except ValueError:
        return 0.0
    return rate if math.isfinite(rate) else 0.0


def parse_sample_period(value: Union[str, int, None]) -> int:
    """Sampling period in milliseconds, falling back to the default."""
    if value is None:
        return DEFAULT_SAMPLE_MS
    try:
        period = int(str(value).strip())
    except (ValueError, OverflowError):
        logger.debug("Ignoring invalid sample period %r", value)
        return DEFAULT_SAMPLE_MS
    if not 0 < period <= MAX_SAMPLE_MS:
        logger.debug("Sample period %r out of range; using default", value)
        return DEFAULT_SAMPLE_MS
    return period
