"""Command-line interface for the earnings ticker."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from typing import Optional

import typer

from .config import MAX_SAMPLE_MS, SamplerSettings, parse_daily_rate
from .currency import DisplayUnit
from .errors import WageTickerError
from .paths import get_log_path

app = typer.Typer(help="Watch a day's pay accrue, minute by minute.")


@app.callback(no_args_is_help=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_file: bool = typer.Option(
        False,
        "--log-file",
        help="Also write logs to the application data directory.",
    ),
) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(get_log_path(), encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
    )


def _parse_unit(value: str) -> DisplayUnit:
    try:
        return DisplayUnit.from_code(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def quote(
    rate: str = typer.Option(..., "--rate", help="Amount earned over the full interval."),
    start: str = typer.Option("09:00", "--start", help="Interval start (HH:MM)."),
    end: str = typer.Option("18:00", "--end", help="Interval end (HH:MM)."),
    at: Optional[str] = typer.Option(
        None,
        "--at",
        help="Time of day (HH:MM[:SS]) to evaluate. Defaults to now.",
    ),
    unit: str = typer.Option("RMB", "--unit", help="Display unit (RMB or USD)."),
    exchange_rate: float = typer.Option(
        7.0, "--exchange-rate", min=0.0001, help="Primary units per secondary unit."
    ),
) -> None:
    """Print what has been earned at a given time of day."""
    from .driver import build_snapshot
    from .interval import elapsed_minutes, make_interval
    from .models import AccrualConfig
    from .reporting import format_snapshot

    display_unit = _parse_unit(unit)
    try:
        moment = datetime.combine(date.today(), time.fromisoformat(at)) if at else datetime.now()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid --at value: {at!r}") from exc
    try:
        config = AccrualConfig(
            daily_rate=parse_daily_rate(rate), interval=make_interval(start, end)
        )
    except WageTickerError as exc:
        raise typer.BadParameter(str(exc)) from exc

    elapsed = elapsed_minutes(config.interval, moment)
    snapshot = build_snapshot(config, elapsed, display_unit, exchange_rate)
    typer.echo(format_snapshot(snapshot))


@app.command()
def watch(
    rate: str = typer.Option(..., "--rate", help="Amount earned over the full interval."),
    start: str = typer.Option("09:00", "--start", help="Interval start (HH:MM)."),
    end: str = typer.Option("18:00", "--end", help="Interval end (HH:MM)."),
    sample_ms: int = typer.Option(
        1000,
        "--interval",
        min=1,
        max=MAX_SAMPLE_MS,
        help="Sampling period in milliseconds.",
    ),
    unit: str = typer.Option("RMB", "--unit", help="Display unit (RMB or USD)."),
    exchange_rate: float = typer.Option(
        7.0, "--exchange-rate", min=0.0001, help="Primary units per secondary unit."
    ),
    window: int = typer.Option(50, "--window", min=1, help="Samples kept for the chart."),
) -> None:
    """Print live earnings to the console until interrupted."""
    from .driver import SamplingDriver
    from .reporting import TickerPrinter

    settings = SamplerSettings.from_inputs(
        sample_ms=sample_ms, window_capacity=window, exchange_rate=exchange_rate
    )
    driver = SamplingDriver(settings, unit=_parse_unit(unit))
    printer = TickerPrinter()
    driver.subscribe_values(printer.on_value)
    driver.subscribe_chart(printer.on_chart)
    try:
        driver.start(parse_daily_rate(rate), start, end)
    except WageTickerError as exc:
        raise typer.BadParameter(str(exc)) from exc

    stop_event = threading.Event()
    try:
        stop_event.wait()
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Ticker interrupted.")
    finally:
        driver.stop()


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    sample_ms: int = typer.Option(
        500,
        "--interval",
        min=1,
        max=MAX_SAMPLE_MS,
        help="Default sampling period in milliseconds.",
    ),
    exchange_rate: float = typer.Option(
        7.0, "--exchange-rate", min=0.0001, help="Primary units per secondary unit."
    ),
    unit: str = typer.Option("RMB", "--unit", help="Initial display unit (RMB or USD)."),
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the dashboard in your default browser.",
    ),
) -> None:
    """Start the local dashboard."""
    from .server_runner import run_dashboard

    settings = SamplerSettings.from_inputs(sample_ms=sample_ms, exchange_rate=exchange_rate)
    run_dashboard(
        host=host,
        port=port,
        settings=settings,
        unit=_parse_unit(unit),
        open_browser=open_browser,
    )
