"""Domain models for accrued earnings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .currency import DisplayUnit
from .errors import InvalidConfiguration, InvalidInterval, require

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True, slots=True)
class WorkInterval:
    """A daily work window expressed as minutes since midnight."""

    start_minute: int
    end_minute: int

    def __post_init__(self) -> None:
        for minute in (self.start_minute, self.end_minute):
            require(
                0 <= minute < MINUTES_PER_DAY,
                f"minute of day out of range: {minute}",
                InvalidInterval,
            )
        require(
            self.end_minute > self.start_minute,
            "end time must be later than start time",
            InvalidInterval,
        )


@dataclass(frozen=True, slots=True)
class AccrualConfig:
    """What one session earns and over which interval."""

    daily_rate: float
    interval: WorkInterval

    def __post_init__(self) -> None:
        require(
            self.daily_rate > 0,
            "daily rate must be greater than zero",
            InvalidConfiguration,
        )


@dataclass(frozen=True, slots=True)
class Sample:
    """One per-minute bucket of the chart series."""

    bucket_index: int
    time_label: str
    value: float


@dataclass(frozen=True, slots=True)
class WorkedDuration:
    hours: int
    minutes: int
    seconds: int


@dataclass(frozen=True, slots=True)
class EarningsSnapshot:
    """Scalar figures published on every tick."""

    unit: DisplayUnit
    earned: float
    earned_primary: float
    elapsed_minutes: float
    worked: WorkedDuration
    hourly_rate: float
    progress_percent: float
    running: bool


@dataclass(frozen=True, slots=True)
class ChartSeries:
    """The sample window as handed to a chart surface."""

    unit: DisplayUnit
    labels: tuple[str, ...]
    values: tuple[float, ...]
    y_max: Optional[float] = None

    def points(self) -> list[tuple[str, float]]:
        return list(zip(self.labels, self.values))
