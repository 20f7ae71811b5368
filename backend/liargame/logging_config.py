"""Central logging setup for the game server.

A single idempotent setup so that the dev entry point, the WSGI entry point
and the test suite can all call it without stacking handlers.
"""
from __future__ import annotations

import logging

from .config import Config

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_INITIALIZED = False


def setup_logging(level: str | None = None, force: bool = False) -> None:
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    for h in root.handlers:
        h.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    level_name = (level or Config.LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    # engineio/socketio are chatty at INFO
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)

    _INITIALIZED = True


__all__ = ["setup_logging"]
