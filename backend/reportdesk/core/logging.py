"""Logging setup shared by the server entrypoint and the app lifespan."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    # uvicorn installs its own handlers; only add ours once
    if not any(getattr(h, "_reportdesk", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._reportdesk = True
        root.addHandler(handler)
