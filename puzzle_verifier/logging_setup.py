"""Logging configuration for command line runs."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "puzzle_verifier.stderr"


def parse_log_level(name: str | None) -> int:
    name = (name or "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def configure_logging(level: str | int | None = None) -> None:
    """Send package logs to stderr so stdout stays reserved for verdict lines."""
    if not isinstance(level, int):
        level = parse_log_level(level)
    root = logging.getLogger("puzzle_verifier")
    root.setLevel(level)

    # Repeated runs in one process: replace the handler so it follows the current stderr
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
