# log.py
# SPDX-License-Identifier: MIT
"""Package-wide logging helpers for sliderule.

A NullHandler is installed on the package logger so that importing
sliderule as a library stays quiet until the host application (or the
CLI) configures logging.
"""

from __future__ import annotations

import logging
import sys

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "get_logger",
    "configure_logging",
]

PACKAGE_LOGGER_NAME = "sliderule"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a named logger scoped to sliderule.

    Args:
        name (str | None): Fully qualified logger name. Defaults to the
            package logger when omitted.

    Returns:
        logging.Logger: Logger instance for the requested name.
    """
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream=None,
    fmt: str | None = None,
    datefmt: str | None = None,
    propagate: bool | None = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Attach a single stream handler to a sliderule logger.

    Args:
        level (int | str): Logging level or level name.
        stream (IO[str] | None): Target stream; defaults to sys.stderr.
        fmt (str | None): Log format string.
        datefmt (str | None): Date format string for the handler.
        propagate (bool | None): Whether records bubble up to ancestor
            loggers. None keeps propagation on so pytest's caplog sees them.
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name or PACKAGE_LOGGER_NAME)
    logger.setLevel(_coerce_level(level))
    logger.propagate = True if propagate is None else bool(propagate)

    if stream is None:
        stream = sys.stderr
    if fmt is None:
        fmt = "%(levelname)s %(name)s: %(message)s"

    has_stream = False
    for handler in logger.handlers:
        if not isinstance(handler, logging.StreamHandler):
            continue
        has_stream = True
        if getattr(getattr(handler, "stream", None), "closed", False):
            handler.stream = stream
    if not has_stream:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(handler)

    return logger

