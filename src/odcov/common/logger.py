"""Defines the :class:`.Logger` class and the package-level logging one-liners."""

from __future__ import annotations

# Standard Library Imports
import logging
import sys
from logging.handlers import RotatingFileHandler
from os import makedirs
from os.path import exists, join

# Local Imports
from . import pathSafeTime
from .behavioral_config import BehavioralConfig

PACKAGE_LOGGER_NAME: str = "odcov"
"""``str``: name of the top-level logger that all ODCOV modules report to."""

LOG_FORMAT: str = "%(asctime)s - %(module)s - %(levelname)s - %(message)s"
"""``str``: record format shared by stdout and file handlers."""


class Logger:
    """Extended logger wraps the standard Python logging package.

    It also creates a standard file name and log format for any log files that are saved.
    """

    def __init__(self, name=PACKAGE_LOGGER_NAME, level=None, path=None, allow_multiple_handlers=None):
        """Configure the logging information for this Logger instance.

        Args:
            name (``str``, optional): Name of the the logger instance. Defaults to the package logger.
            level (``int``, optional): Determines what level of log messages are published
            path (``str``, optional): Path to where the log file will be stored, or ``"stdout"``
            allow_multiple_handlers (``bool``, optional): whether multiple log handlers are permitted
        """
        config = BehavioralConfig.getConfig().logging
        if not level:
            level = config.Level
        if not path:
            path = config.OutputLocation
        if allow_multiple_handlers is None:
            allow_multiple_handlers = config.AllowMultipleHandlers

        self.filename = None
        self.logger = logging.getLogger(name)
        if self.logger.handlers and not allow_multiple_handlers:
            return

        if path == "stdout":
            self.filename = "stdout"
            handler = logging.StreamHandler(sys.stdout)

        else:
            if not exists(path):
                self.logger.info(f"Path did not exist: {path!r}. Creating path...")
                makedirs(path)

            self.filename = join(path, f"{name}_{pathSafeTime()}.log")
            handler = RotatingFileHandler(
                self.filename,
                maxBytes=config.MaxFileSize,
                backupCount=config.MaxFileCount,
            )

        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.setLevel(level)
        self.logger.addHandler(handler)

    def __getattr__(self, name):
        """Defer everything else to the wrapped :class:`logging.Logger`."""
        return getattr(self.logger, name)


def _odcovLog(message: str, level: int):
    """Log a message to the top-level log record.

    This provides a simple, easy one-liner that doesn't require pre-initializing a logger object.

    Args:
        message (``str``): message to record with in the log.
        level (``int``): level at which to log this message, corresponding to `logging.LOG_LEVEL`.
    """
    logging.getLogger(PACKAGE_LOGGER_NAME).log(msg=message, level=level)


def odcovLogCritical(message: str):
    """Log a CRITICAL message to the top-level log record."""
    _odcovLog(message, level=logging.CRITICAL)


def odcovLogError(message: str):
    """Log a ERROR message to the top-level log record."""
    _odcovLog(message, level=logging.ERROR)


def odcovLogWarning(message: str):
    """Log a WARNING message to the top-level log record."""
    _odcovLog(message, level=logging.WARNING)


def odcovLogInfo(message: str):
    """Log a INFO message to the top-level log record."""
    _odcovLog(message, level=logging.INFO)


def odcovLogDebug(message: str):
    """Log a DEBUG message to the top-level log record."""
    _odcovLog(message, level=logging.DEBUG)
