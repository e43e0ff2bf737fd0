"""
Logging setup for the catalog admin.

Messages keep the bracketed subsystem tag style (``[Session] ...``,
``[DB] ...``) so console output stays greppable.
"""
import logging
import sys
from typing import Optional, Union

ROOT_LOGGER = "catalog_admin"


def setup_logging(level: Union[int, str] = logging.INFO, stream=None) -> logging.Logger:
    """
    Configure the package logger with a single console handler.

    Calling it again replaces the previous handler, so the level can be
    changed at runtime (e.g. from settings on service startup).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a child logger of the package logger."""
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
