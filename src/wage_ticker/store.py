"""Bounded, per-minute sample window backing the earnings chart."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import replace
from typing import Iterator, Optional

from .accrual import earned
from .currency import DisplayUnit, convert, round_to_unit
from .errors import EmptyWindow, OutOfOrderSample, require
from .interval import bucket_label
from .models import AccrualConfig, Sample

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class SampleWindow:
    """Samples ordered by strictly increasing bucket index.

    Holds at most ``capacity`` samples; appending past that evicts the
    oldest bucket. Only the newest bucket may be updated in place.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        require(capacity > 0, "window capacity must be positive")
        self.capacity = capacity
        self._samples: deque[Sample] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(tuple(self._samples))

    @property
    def last(self) -> Optional[Sample]:
        return self._samples[-1] if self._samples else None

    def append(self, sample: Sample) -> None:
        last = self.last
        if last is not None and sample.bucket_index <= last.bucket_index:
            raise OutOfOrderSample(
                f"bucket {sample.bucket_index} does not follow {last.bucket_index}"
            )
        if len(self._samples) == self.capacity:
            evicted = self._samples[0]
            logger.debug("Evicting bucket %d", evicted.bucket_index)
        self._samples.append(sample)

    def update_last(self, value: float) -> None:
        if not self._samples:
            raise EmptyWindow("cannot update the last sample of an empty window")
        self._samples[-1] = replace(self._samples[-1], value=value)

    def convert_all(
        self, from_unit: DisplayUnit, to_unit: DisplayUnit, rate: float
    ) -> None:
        self._samples = deque(
            (
                replace(sample, value=convert(sample.value, from_unit, to_unit, rate))
                for sample in self._samples
            ),
            maxlen=self.capacity,
        )

    def samples(self) -> tuple[Sample, ...]:
        return tuple(self._samples)

    def series(self) -> list[tuple[str, float]]:
        return [(sample.time_label, sample.value) for sample in self._samples]


def sample_value(amount_primary: float, unit: DisplayUnit, rate: float) -> float:
    """Primary-unit amount as stored in a sample of `unit`."""
    return round_to_unit(convert(amount_primary, DisplayUnit.PRIMARY, unit, rate), unit)


def backfill(
    config: AccrualConfig,
    elapsed_at_start: float,
    unit: DisplayUnit,
    rate: float,
    capacity: int = DEFAULT_CAPACITY,
) -> SampleWindow:
    """Synthesize one sample per whole minute already worked.

    Buckets run from 0 to ``floor(elapsed_at_start)`` inclusive; a session
    started before the interval begins gets an empty window.
    """
    window = SampleWindow(capacity)
    if elapsed_at_start < 0:
        return window
    last_bucket = math.floor(elapsed_at_start)
    first_bucket = max(0, last_bucket - capacity + 1)
    for bucket in range(first_bucket, last_bucket + 1):
        window.append(
            Sample(
                bucket_index=bucket,
                time_label=bucket_label(config.interval, bucket),
                value=sample_value(earned(config, bucket), unit, rate),
            )
        )
    logger.debug(
        "Backfilled %d samples (buckets %d..%d)",
        len(window),
        first_bucket,
        last_bucket,
    )
    return window
