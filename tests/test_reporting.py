"""Console formatting of snapshots and chart updates."""

import io

from wage_ticker.currency import DisplayUnit
from wage_ticker.driver import build_snapshot
from wage_ticker.models import ChartSeries, WorkedDuration
from wage_ticker.reporting import (
    TickerPrinter,
    format_amount,
    format_duration,
    format_sample_value,
    format_snapshot,
)


def test_formatters():
    assert format_amount(400, DisplayUnit.PRIMARY) == "¥400.00"
    assert format_sample_value(57.1, DisplayUnit.SECONDARY) == "$57.1"
    assert format_sample_value(400.0, DisplayUnit.PRIMARY) == "¥400"
    assert format_duration(WorkedDuration(4, 5, 9)) == "04:05:09"


def test_format_snapshot(office_config):
    snapshot = build_snapshot(office_config, 270, DisplayUnit.PRIMARY, 7, running=True)
    assert format_snapshot(snapshot) == (
        "¥400.00 RMB  worked 04:30:00  ¥88.89/h  50.0%  [running]"
    )


def test_printer_writes_values_and_chart_lines(office_config):
    stream = io.StringIO()
    printer = TickerPrinter(stream)
    printer.on_value(build_snapshot(office_config, 0, DisplayUnit.SECONDARY, 7))
    printer.on_chart(ChartSeries(DisplayUnit.SECONDARY, ("09:00", "09:01"), (0.0, 0.2)))
    printer.on_chart(ChartSeries(DisplayUnit.SECONDARY, (), ()))
    lines = stream.getvalue().splitlines()
    assert lines[0].startswith("$0.00 USD")
    assert lines[0].endswith("[stopped]")
    assert lines[1] == "Chart: 2 samples, 09:00..09:01, latest $0.2"
    assert lines[2] == "Chart: no samples yet."


def test_printer_can_hide_chart_updates():
    stream = io.StringIO()
    TickerPrinter(stream, show_chart=False).on_chart(
        ChartSeries(DisplayUnit.PRIMARY, ("09:00",), (0.0,))
    )
    assert stream.getvalue() == ""
