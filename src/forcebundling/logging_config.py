"""
Logging Setup
=============
Opt-in handler configuration for the `forcebundling` logger namespace.

Every module of the package logs through `logging.getLogger(__name__)` and
never attaches handlers itself. What each level carries:
    INFO:  per-cycle progress of the bundling driver (P, S, iteration count),
           the self-loop filter summary and run totals.
    DEBUG: individual dropped edges and compatibility list statistics.

Applications that want this output on stdout (and optionally in a file)
call `setup_logging` once; embedding applications with their own logging
configuration simply skip it.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "forcebundling"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach a stdout handler, and a file handler if `log_file` is given, to the package logger.

    Calling it again replaces the previous handlers.

    Args:
        level: Threshold for the package logger and its handlers.
        log_file: Path of a log file, overwritten on each call.

    Returns:
        The `forcebundling` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging to {len(handlers)} handler(s) at level {logging.getLevelName(level)}.")
    return logger
