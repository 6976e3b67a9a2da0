"""Helpers to launch the local JSON API."""

from __future__ import annotations

import logging
import threading
import webbrowser
from typing import Optional

import uvicorn

from .config import TrackerSettings
from .webapp import create_app

logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.0


def build_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    settings: Optional[TrackerSettings] = None,
    log_level: str = "info",
) -> uvicorn.Server:
    """Create the uvicorn server around a freshly initialized app.

    Raises ``CorruptStateError`` if the stored log is invalid, before any
    socket is bound.
    """
    resolved = settings or TrackerSettings()
    app = create_app(settings=resolved)
    logger.info("Serving event log from %s", resolved.resolved_db_path())
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level)
    return uvicorn.Server(config)


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    settings: Optional[TrackerSettings] = None,
    open_browser: bool = False,
    log_level: str = "info",
) -> None:
    """Serve the API until interrupted, optionally opening its docs page."""
    server = build_server(host=host, port=port, settings=settings, log_level=log_level)
    if open_browser:
        docs_url = f"http://{host}:{port}/docs"
        timer = threading.Timer(BROWSER_DELAY_SECONDS, _open_docs, args=(docs_url,))
        timer.daemon = True
        timer.start()
    server.run()


def _open_docs(url: str) -> None:
    if not webbrowser.open(url):
        logger.warning("No browser available to open %s", url)
