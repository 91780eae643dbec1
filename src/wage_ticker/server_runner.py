"""Helpers to launch the local web dashboard."""

from __future__ import annotations

import logging
import threading
import time
import webbrowser
from typing import Optional

import uvicorn

from .config import SamplerSettings
from .currency import DisplayUnit
from .driver import SamplingDriver
from .webapp import create_app


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    settings: Optional[SamplerSettings] = None,
    unit: DisplayUnit = DisplayUnit.PRIMARY,
    open_browser: bool = True,
    log_level: str = "info",
) -> None:
    """Serve the ticker dashboard and optionally open it in a browser tab.

    The sampling driver lives for the lifetime of the server; sessions are
    started and stopped through the API.
    """
    driver = SamplingDriver(settings or SamplerSettings(), unit=unit)
    app = create_app(driver=driver)

    if open_browser:
        url = f"http://{host}:{port}"
        threading.Thread(
            target=_launch_browser_after_delay, args=(url,), daemon=True
        ).start()

    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _launch_browser_after_delay(url: str) -> None:
    time.sleep(1.0)
    try:
        webbrowser.open(url)
    except Exception:
        logging.getLogger(__name__).exception("Failed to launch browser for %s", url)
