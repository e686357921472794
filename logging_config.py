"""
Process-level logging for the automation CLI.

The engine, admin and producer modules log through ``automation.*`` loggers
and never configure handlers themselves. ``setup_logging`` is called once by
``main`` with the level and optional file taken from settings.
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, log_file: Optional[str] = None) -> None:
    """Send automation logs to stderr, and to ``log_file`` when one is configured.

    An unrecognised level name falls back to INFO. SQLAlchemy's statement
    logger is controlled by ``SQL_ECHO`` on the engine, so it is left alone here.
    """
    resolved = _resolve_level(level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=resolved, format=LOG_FORMAT, handlers=handlers, force=True)
