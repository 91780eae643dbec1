from datetime import datetime, timedelta

import pytest

from wage_ticker.config import SamplerSettings
from wage_ticker.driver import SamplingDriver
from wage_ticker.interval import make_interval
from wage_ticker.models import AccrualConfig

DAY = datetime(2026, 3, 2)


def at(hour: int, minute: int = 0, second: int = 0, microsecond: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute, second=second, microsecond=microsecond)


class FakeClock:
    """Callable clock whose time only moves when a test moves it."""

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment += timedelta(**kwargs)


class ManualTimer:
    def __init__(self, period: timedelta, callback) -> None:
        self.period = period
        self.callback = callback
        self.started = False
        self.cancel_calls = 0

    @property
    def cancelled(self) -> bool:
        return self.cancel_calls > 0

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancel_calls += 1

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.callback()


class ManualTimers:
    """Timer factory that records timers instead of spawning threads."""

    def __init__(self) -> None:
        self.created: list[ManualTimer] = []

    def __call__(self, period: timedelta, callback) -> ManualTimer:
        timer = ManualTimer(period, callback)
        self.created.append(timer)
        return timer

    @property
    def current(self) -> ManualTimer:
        return self.created[-1]


@pytest.fixture
def office_config():
    # 800 over 09:00-18:00, 540 minutes
    return AccrualConfig(daily_rate=800.0, interval=make_interval("09:00", "18:00"))


@pytest.fixture
def short_day_config():
    # 600 over 09:00-14:00, 300 minutes
    return AccrualConfig(daily_rate=600.0, interval=make_interval("09:00", "14:00"))


@pytest.fixture
def clock():
    return FakeClock(at(13, 30))


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def driver(clock, timers):
    return SamplingDriver(SamplerSettings(), clock=clock, timer_factory=timers)
