"""
Logging Setup
==============
One ``taskapi`` logger hierarchy. ``configure_logging`` is called once by
the launcher; library code only ever does ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import json
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

access_logger = logging.getLogger("taskapi.access")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stderr handler to the ``taskapi`` logger.

    Calling it again only changes the level; handlers are not duplicated.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger("taskapi")
    root.setLevel(numeric)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.propagate = False
    return root


def log_access(method: str, path: str, status: int, duration_ms: float) -> None:
    access_logger.info("%s %s - %d - %.0fms", method, path, status, duration_ms)


def log_request_body(method: str, body: dict) -> None:
    """Dump non-GET bodies at DEBUG; they are demo payloads, never secrets."""
    if method != "GET" and body:
        access_logger.debug("Request Body: %s", json.dumps(body, indent=2, default=str))
