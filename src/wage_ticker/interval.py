"""Parsing and clock arithmetic for the daily work window."""

from __future__ import annotations

import re
from datetime import datetime

from .errors import InvalidInterval, InvalidTimeFormat
from .models import MINUTES_PER_DAY, WorkInterval

_DAILY_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{1,2})\s*$")


def parse_daily_time(text: str) -> int:
    """Parse a 24-hour "HH:MM" string into minutes since midnight."""
    match = _DAILY_TIME_PATTERN.match(text or "")
    if not match:
        raise InvalidTimeFormat(f"Expected HH:MM, got {text!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if not 0 <= hours <= 23:
        raise InvalidTimeFormat(f"Hour out of range in {text!r}")
    if not 0 <= minutes <= 59:
        raise InvalidTimeFormat(f"Minute out of range in {text!r}")
    return hours * 60 + minutes


def make_interval(start_text: str, end_text: str) -> WorkInterval:
    start = parse_daily_time(start_text)
    end = parse_daily_time(end_text)
    if end <= start:
        raise InvalidInterval(
            f"End time {end_text!r} must be later than start time {start_text!r}"
        )
    return WorkInterval(start_minute=start, end_minute=end)


def total_minutes(interval: WorkInterval) -> int:
    return interval.end_minute - interval.start_minute


def minute_of_day(now: datetime) -> float:
    """Fractional minutes since midnight, keeping sub-second precision."""
    return (
        now.hour * 60
        + now.minute
        + now.second / 60.0
        + now.microsecond / 60_000_000.0
    )


def raw_elapsed_minutes(interval: WorkInterval, now: datetime) -> float:
    """Minutes since the interval start; negative before it, unbounded after."""
    return minute_of_day(now) - interval.start_minute


def elapsed_minutes(interval: WorkInterval, now: datetime) -> float:
    """Minutes worked so far, clamped to the interval's span."""
    total = total_minutes(interval)
    raw = raw_elapsed_minutes(interval, now)
    if raw < 0:
        return 0.0
    if raw >= total:
        return float(total)
    return raw


def format_minute_of_day(minute: int) -> str:
    hours, minutes = divmod(minute % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{minutes:02d}"


def bucket_label(interval: WorkInterval, bucket_index: int) -> str:
    return format_minute_of_day(interval.start_minute + bucket_index)
