#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/fb2md/logging_utils.py
"""Logging setup for the fb2md command line.

Library modules only create ``logging.getLogger(__name__)`` loggers below the
``fb2md`` package logger and never install handlers. The CLI calls
:func:`configure_logging` once to attach its handlers to that package logger,
so a host application's root logging configuration is left alone.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER_NAME = "fb2md"

CONSOLE_FORMAT = "fb2md: %(levelname)s: %(message)s"
TRACE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"
TRACE_DATE_FORMAT = "%H:%M:%S"

# Marks handlers installed here so a second call replaces only those
_HANDLER_MARKER = "_fb2md_cli_handler"


def resolve_log_level(log_level: int | str, verbose: bool = False, trace: bool = False) -> int:
    """Combine ``--log-level``, ``--verbose`` and ``--trace`` into one level.

    ``--trace`` always means DEBUG. ``--verbose`` lowers the default WARNING
    level to DEBUG but does not override an explicit ``--log-level``.

    Examples
    --------
    >>> resolve_log_level("WARNING", verbose=True)
    10
    >>> resolve_log_level("ERROR", verbose=True)
    40

    """
    if trace:
        return logging.DEBUG
    if isinstance(log_level, int):
        level = log_level
    else:
        level = logging.getLevelName(str(log_level).upper())
        if not isinstance(level, int):
            level = logging.WARNING
    if verbose and level == logging.WARNING:
        return logging.DEBUG
    return level


def _console_handler(trace_mode: bool, use_rich: bool) -> logging.Handler:
    if use_rich:
        return RichHandler(
            console=Console(stderr=True),
            show_time=trace_mode,
            show_path=trace_mode,
            markup=False,
        )
    handler = logging.StreamHandler(sys.stderr)
    if trace_mode:
        handler.setFormatter(logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _attach(package_logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    setattr(handler, _HANDLER_MARKER, True)
    package_logger.addHandler(handler)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
    use_rich: bool = False,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``fb2md`` logger.

    Parameters
    ----------
    log_level : int | str
        Level for the package logger and its handlers.
    log_file : str, optional
        Append log records to this file as well. The file always uses the
        timestamped trace format.
    trace_mode : bool, default False
        Show timestamps, logger names and line numbers on the console.
    use_rich : bool, default False
        Render console records through ``rich`` instead of plain text.

    Returns
    -------
    logging.Logger
        The ``fb2md`` package logger.

    """
    level = resolve_log_level(log_level)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            package_logger.removeHandler(handler)
            handler.close()

    package_logger.setLevel(level)
    package_logger.propagate = False

    _attach(package_logger, _console_handler(trace_mode, use_rich), level)
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            package_logger.warning("Cannot open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(logging.Formatter(TRACE_FORMAT))
            _attach(package_logger, file_handler, level)
    return package_logger


__all__ = ["PACKAGE_LOGGER_NAME", "configure_logging", "resolve_log_level"]
