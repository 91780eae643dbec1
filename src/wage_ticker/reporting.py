"""Console rendering of live earnings figures."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from .currency import DisplayUnit
from .models import ChartSeries, EarningsSnapshot, WorkedDuration


class TickerPrinter:
    """Render snapshots and chart updates as plain console lines."""

    def __init__(self, stream: Optional[TextIO] = None, *, show_chart: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.show_chart = show_chart

    def on_value(self, snapshot: EarningsSnapshot) -> None:
        print(format_snapshot(snapshot), file=self.stream, flush=True)

    def on_chart(self, series: ChartSeries) -> None:
        if not self.show_chart:
            return
        if not series.labels:
            print("Chart: no samples yet.", file=self.stream, flush=True)
            return
        print(
            f"Chart: {len(series.labels)} samples, "
            f"{series.labels[0]}..{series.labels[-1]}, "
            f"latest {format_sample_value(series.values[-1], series.unit)}",
            file=self.stream,
            flush=True,
        )


def format_snapshot(snapshot: EarningsSnapshot) -> str:
    state = "running" if snapshot.running else "stopped"
    return (
        f"{format_amount(snapshot.earned, snapshot.unit)} {snapshot.unit.code}"
        f"  worked {format_duration(snapshot.worked)}"
        f"  {format_amount(snapshot.hourly_rate, snapshot.unit)}/h"
        f"  {snapshot.progress_percent:.1f}%"
        f"  [{state}]"
    )


def format_amount(value: float, unit: DisplayUnit) -> str:
    return f"{unit.symbol}{value:.2f}"


def format_sample_value(value: float, unit: DisplayUnit) -> str:
    return f"{unit.symbol}{value:.{unit.decimals}f}"


def format_duration(worked: WorkedDuration) -> str:
    return f"{worked.hours:02d}:{worked.minutes:02d}:{worked.seconds:02d}"
