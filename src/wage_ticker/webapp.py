"""FastAPI application that exposes the earnings ticker to a local web UI."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict

from .config import SamplerSettings, parse_daily_rate, parse_sample_period
from .driver import SamplingDriver
from .errors import WageTickerError
from .models import ChartSeries, EarningsSnapshot

logger = logging.getLogger(__name__)


class ChartBoard:
    """Chart surface that keeps the most recently published series."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._series: Optional[ChartSeries] = None
        self._revision = 0

    def __call__(self, series: ChartSeries) -> None:
        with self._lock:
            self._series = series
            self._revision += 1

    def latest(self) -> tuple[int, Optional[ChartSeries]]:
        with self._lock:
            return self._revision, self._series


class SessionPayload(BaseModel):
    daily_rate: Union[float, str, None] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    sample_ms: Union[int, str, None] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    settings: Optional[SamplerSettings] = None,
    driver: Optional[SamplingDriver] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_driver = driver or SamplingDriver(settings or SamplerSettings())
    board = ChartBoard()
    resolved_driver.subscribe_chart(board)

    app = FastAPI(title="Wage Ticker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.driver = resolved_driver
    app.state.chart_board = board

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        resolved_driver.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        current: SamplingDriver = request.app.state.driver
        config = current.config
        return {
            "state": current.state.value,
            "unit": current.unit.code,
            "sample_ms": int(current.settings.sample_period.total_seconds() * 1000),
            "window_capacity": current.settings.window_capacity,
            "exchange_rate": current.settings.exchange_rate,
            "daily_rate": config.daily_rate if config else None,
        }

    @app.post("/api/session")
    def start_session(payload: SessionPayload, request: Request) -> Dict[str, Any]:
        current: SamplingDriver = request.app.state.driver
        sample_period = (
            timedelta(milliseconds=parse_sample_period(payload.sample_ms))
            if payload.sample_ms is not None
            else None
        )
        try:
            snapshot = current.start(
                parse_daily_rate(payload.daily_rate),
                payload.start_time,
                payload.end_time,
                sample_period=sample_period,
            )
        except WageTickerError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {
            "snapshot": _snapshot_payload(snapshot),
            "chart": _chart_payload(current.chart()),
        }

    @app.post("/api/session/stop")
    def stop_session(request: Request) -> Dict[str, Any]:
        current: SamplingDriver = request.app.state.driver
        current.stop()
        return {"state": current.state.value}

    @app.post("/api/unit/toggle")
    def toggle_unit(request: Request) -> Dict[str, Any]:
        current: SamplingDriver = request.app.state.driver
        unit = current.toggle_unit()
        snapshot = current.snapshot()
        return {
            "unit": unit.code,
            "snapshot": _snapshot_payload(snapshot) if snapshot else None,
        }

    @app.get("/api/snapshot")
    def snapshot(request: Request) -> Dict[str, Any]:
        current: SamplingDriver = request.app.state.driver
        latest = current.snapshot()
        if latest is None:
            raise HTTPException(status_code=404, detail="No session has been started")
        return _snapshot_payload(latest)

    @app.get("/api/chart")
    def chart(request: Request) -> Dict[str, Any]:
        revision, series = request.app.state.chart_board.latest()
        if series is None:
            series = request.app.state.driver.chart()
        payload = _chart_payload(series)
        payload["revision"] = revision
        return payload

    @app.get("/")
    def index(request: Request):
        index_path = (Path(__file__).parent / "static" / "index.html").resolve()
        if not index_path.exists():
            return RedirectResponse(url="/docs")
        return FileResponse(index_path)

    return app


def _snapshot_payload(snapshot: EarningsSnapshot) -> Dict[str, Any]:
    return {
        "unit": snapshot.unit.code,
        "symbol": snapshot.unit.symbol,
        "earned": snapshot.earned,
        "earned_display": f"{snapshot.earned:.2f}",
        "elapsed_minutes": snapshot.elapsed_minutes,
        "worked": asdict(snapshot.worked),
        "hourly_rate": snapshot.hourly_rate,
        "progress_percent": snapshot.progress_percent,
        "running": snapshot.running,
    }


def _chart_payload(series: ChartSeries) -> Dict[str, Any]:
    return {
        "unit": series.unit.code,
        "labels": list(series.labels),
        "values": list(series.values),
        "y_max": series.y_max,
    }
