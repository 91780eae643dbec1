"""Sampling driver: turns the accrual function into live figures and a chart."""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from functools import partial
from typing import Callable, Optional, Protocol

from .accrual import earned, hourly_rate, progress_percent, worked_duration
from .config import MAX_SAMPLE_MS, SamplerSettings
from .currency import DisplayUnit, axis_ceiling, exchange
from .errors import InvalidConfiguration, require
from .interval import bucket_label, elapsed_minutes, make_interval, raw_elapsed_minutes
from .models import AccrualConfig, ChartSeries, EarningsSnapshot, Sample
from .store import SampleWindow, backfill, sample_value

logger = logging.getLogger(__name__)

ValueListener = Callable[[EarningsSnapshot], None]
ChartListener = Callable[[ChartSeries], None]


class DriverState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[timedelta, Callable[[], None]], TimerHandle]


class RepeatingTask:
    """Calls ``callback`` every ``period`` on a daemon thread until cancelled."""

    def __init__(
        self,
        period: timedelta,
        callback: Callable[[], None],
        *,
        name: str = "wage-ticker-sampler",
    ) -> None:
        self._period = min(period.total_seconds(), threading.TIMEOUT_MAX)
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def cancel(self) -> None:
        """Stop the task; safe to call more than once and from the callback."""
        self._stop_event.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=10)

    def _run(self) -> None:
        # Sleep in an interruptible manner.
        while not self._stop_event.wait(self._period):
            try:
                self._callback()
            except Exception:
                logger.exception("Sampling tick failed; stopping timer.")
                self._stop_event.set()
                break


def build_snapshot(
    config: AccrualConfig,
    elapsed: float,
    unit: DisplayUnit,
    rate: float,
    *,
    running: bool = False,
) -> EarningsSnapshot:
    """Figures for `elapsed` minutes into the interval, shown in `unit`."""
    amount = earned(config, elapsed)
    return EarningsSnapshot(
        unit=unit,
        earned=exchange(amount, DisplayUnit.PRIMARY, unit, rate),
        earned_primary=amount,
        elapsed_minutes=elapsed,
        worked=worked_duration(elapsed),
        hourly_rate=exchange(hourly_rate(config), DisplayUnit.PRIMARY, unit, rate),
        progress_percent=progress_percent(config, elapsed),
        running=running,
    )


@dataclass(slots=True)
class _Session:
    config: AccrualConfig
    window: SampleWindow
    snapshot: Optional[EarningsSnapshot] = None


class SamplingDriver:
    """Owns the session state and serializes every mutation of it.

    Timer callbacks, ``start``, ``stop`` and ``toggle_unit`` all run under a
    single lock, so each one sees the complete effect of the previous one.
    """

    def __init__(
        self,
        settings: Optional[SamplerSettings] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        timer_factory: TimerFactory = RepeatingTask,
        unit: DisplayUnit = DisplayUnit.PRIMARY,
    ) -> None:
        self.settings = settings or SamplerSettings()
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._state = DriverState.IDLE
        self._unit = unit
        self._session: Optional[_Session] = None
        self._task: Optional[TimerHandle] = None
        self._generation = 0
        self._value_listeners: list[ValueListener] = []
        self._chart_listeners: list[ChartListener] = []

    @property
    def state(self) -> DriverState:
        with self._lock:
            return self._state

    @property
    def unit(self) -> DisplayUnit:
        with self._lock:
            return self._unit

    @property
    def config(self) -> Optional[AccrualConfig]:
        with self._lock:
            return self._session.config if self._session else None

    def is_running(self) -> bool:
        return self.state is DriverState.RUNNING

    def samples(self) -> tuple[Sample, ...]:
        with self._lock:
            return self._session.window.samples() if self._session else ()

    def snapshot(self) -> Optional[EarningsSnapshot]:
        with self._lock:
            return self._session.snapshot if self._session else None

    def chart(self) -> ChartSeries:
        with self._lock:
            return self._chart_locked()

    def subscribe_values(self, listener: ValueListener) -> Callable[[], None]:
        with self._lock:
            self._value_listeners.append(listener)
        return partial(self._unsubscribe, self._value_listeners, listener)

    def subscribe_chart(self, listener: ChartListener) -> Callable[[], None]:
        with self._lock:
            self._chart_listeners.append(listener)
        return partial(self._unsubscribe, self._chart_listeners, listener)

    def start(
        self,
        daily_rate: float,
        start_time: Optional[str],
        end_time: Optional[str],
        *,
        sample_period: Optional[timedelta] = None,
    ) -> EarningsSnapshot:
        """Validate the inputs and begin a fresh session.

        Raises InvalidConfiguration, InvalidTimeFormat or InvalidInterval
        without touching the current state.
        """
        require(
            bool(start_time) and bool(end_time),
            "start and end times are required",
            InvalidConfiguration,
        )
        require(
            math.isfinite(daily_rate) and daily_rate > 0,
            "daily rate must be greater than zero",
            InvalidConfiguration,
        )
        config = AccrualConfig(
            daily_rate=daily_rate, interval=make_interval(start_time, end_time)
        )

        with self._lock:
            previous_task = self._task
            now = self._clock()
            raw = raw_elapsed_minutes(config.interval, now)
            elapsed_at_start = raw if raw < 0 else elapsed_minutes(config.interval, now)
            window = backfill(
                config,
                elapsed_at_start,
                self._unit,
                self.settings.exchange_rate,
                self.settings.window_capacity,
            )
            self._session = _Session(config=config, window=window)
            self._state = DriverState.RUNNING
            self._generation += 1
            logger.info(
                "Session started: rate=%s interval=%s-%s backfilled=%d",
                daily_rate,
                start_time,
                end_time,
                len(window),
            )
            self._publish_chart(self._chart_locked())
            snapshot = self._tick_locked()
            self._task = self._timer_factory(
                self._resolve_period(sample_period),
                partial(self._on_timer, self._generation),
            )
            self._task.start()

        if previous_task is not None:
            previous_task.cancel()
        return snapshot

    def tick(self) -> Optional[EarningsSnapshot]:
        """Sample once; ignored unless a session is running."""
        with self._lock:
            if self._state is not DriverState.RUNNING:
                return None
            return self._tick_locked()

    def stop(self) -> None:
        with self._lock:
            was_running = self._state is DriverState.RUNNING
            task = self._halt_locked()
        if task is not None:
            task.cancel()
        if was_running:
            logger.info("Session stopped.")

    def toggle_unit(self) -> DisplayUnit:
        """Flip the display unit and convert the live value and stored samples."""
        with self._lock:
            old_unit, new_unit = self._unit, self._unit.other
            self._unit = new_unit
            logger.debug("Display unit %s -> %s", old_unit.code, new_unit.code)
            session = self._session
            if session is None:
                return new_unit

            session.window.convert_all(old_unit, new_unit, self.settings.exchange_rate)
            if self._state is DriverState.RUNNING:
                self._tick_locked(force_chart=True)
            else:
                if session.snapshot is not None:
                    session.snapshot = self._snapshot_locked(
                        session, session.snapshot.elapsed_minutes
                    )
                    self._publish_value(session.snapshot)
                self._publish_chart(self._chart_locked())
            return new_unit

    def _resolve_period(self, sample_period: Optional[timedelta]) -> timedelta:
        limit = timedelta(milliseconds=MAX_SAMPLE_MS)
        if sample_period is None:
            return self.settings.sample_period
        if not timedelta(0) < sample_period <= limit:
            logger.warning(
                "Sample period %s out of range; using %s",
                sample_period,
                self.settings.sample_period,
            )
            return self.settings.sample_period
        return sample_period

    def _on_timer(self, generation: int) -> None:
        task: Optional[TimerHandle] = None
        with self._lock:
            if generation != self._generation or self._state is not DriverState.RUNNING:
                return
            try:
                self._tick_locked()
            except Exception:
                logger.exception("Sampling tick failed; session stopped.")
                task = self._halt_locked()
        if task is not None:
            task.cancel()

    def _halt_locked(self) -> Optional[TimerHandle]:
        """Move to IDLE and detach the timer; the caller cancels it unlocked."""
        task = self._task
        self._task = None
        self._state = DriverState.IDLE
        self._generation += 1
        session = self._session
        if session is not None and session.snapshot is not None:
            session.snapshot = replace(session.snapshot, running=False)
        return task

    def _tick_locked(self, *, force_chart: bool = False) -> EarningsSnapshot:
        session = self._session
        assert session is not None
        interval = session.config.interval
        now = self._clock()
        raw = raw_elapsed_minutes(interval, now)
        elapsed = elapsed_minutes(interval, now)
        snapshot = self._snapshot_locked(session, elapsed)
        session.snapshot = snapshot

        appended = False
        if raw >= 0:
            value = sample_value(
                snapshot.earned_primary, self._unit, self.settings.exchange_rate
            )
            bucket = math.floor(elapsed)
            last = session.window.last
            if last is None or bucket > last.bucket_index:
                session.window.append(
                    Sample(
                        bucket_index=bucket,
                        time_label=bucket_label(interval, bucket),
                        value=value,
                    )
                )
                appended = True
                logger.debug("Appended bucket %d value=%s", bucket, value)
            elif bucket < last.bucket_index:
                logger.warning(
                    "Clock moved back to bucket %d behind %d; sample skipped",
                    bucket,
                    last.bucket_index,
                )
            else:
                session.window.update_last(value)

        self._publish_value(snapshot)
        if appended or force_chart:
            self._publish_chart(self._chart_locked())
        return snapshot

    def _snapshot_locked(self, session: _Session, elapsed: float) -> EarningsSnapshot:
        return build_snapshot(
            session.config,
            elapsed,
            self._unit,
            self.settings.exchange_rate,
            running=self._state is DriverState.RUNNING,
        )

    def _chart_locked(self) -> ChartSeries:
        session = self._session
        if session is None:
            return ChartSeries(unit=self._unit, labels=(), values=())
        samples = session.window.samples()
        return ChartSeries(
            unit=self._unit,
            labels=tuple(sample.time_label for sample in samples),
            values=tuple(sample.value for sample in samples),
            y_max=axis_ceiling(
                session.config.daily_rate, self._unit, self.settings.exchange_rate
            ),
        )

    def _publish_value(self, snapshot: EarningsSnapshot) -> None:
        for listener in list(self._value_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Value listener %r failed.", listener)

    def _publish_chart(self, series: ChartSeries) -> None:
        for listener in list(self._chart_listeners):
            try:
                listener(series)
            except Exception:
                logger.exception("Chart listener %r failed.", listener)

    def _unsubscribe(self, listeners: list, listener: Callable) -> None:
        with self._lock:
            if listener in listeners:
                listeners.remove(listener)
