"""Central logging setup for the project."""
from __future__ import annotations
import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

def _resolve_level(level: int | str | None) -> int:
    """Turn an int, a level name or $LOG_LEVEL into a level, defaulting to INFO."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO

def setup_logging(level: int | str | None = None) -> None:
    """
    Send form_assist and library logs to stdout.

    Args:
        level: Logging level or level name. Defaults to $LOG_LEVEL; unknown
            names fall back to INFO.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))
