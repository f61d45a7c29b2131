"""
Process-wide logging setup.
"""

from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Attach one stream handler to the root logger.

    Safe to call more than once (uvicorn reloads, tests).
    """
    root = logging.getLogger()
    root.setLevel(level or config.log_level())
    if any(getattr(h, "_fashionhub", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._fashionhub = True  # type: ignore[attr-defined]
    root.addHandler(handler)
