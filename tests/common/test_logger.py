from __future__ import annotations

# Standard Library Imports
import logging
import os

# Third Party Imports
import pytest

# ODCOV Imports
from odcov.common.logger import (
    PACKAGE_LOGGER_NAME,
    Logger,
    odcovLogCritical,
    odcovLogError,
    odcovLogWarning,
)

# Local Imports
from .. import FIXTURE_DATA_DIR

CORRECT_OUTPUT: list[list[str | int]] = [
    ["test", logging.DEBUG, "This is a debug message."],
    ["test", logging.INFO, "This is an info message."],
    ["test", logging.WARNING, "This is a warning message."],
    ["test", logging.ERROR, "This is an error message."],
    ["test", logging.CRITICAL, "This is a critical message."],
]

CORRECT_FILE_OUTPUT: list[list[str | int]] = [
    ["test_logger", "DEBUG", "This is a debug message.\n"],
    ["test_logger", "INFO", "This is an info message.\n"],
    ["test_logger", "WARNING", "This is a warning message.\n"],
    ["test_logger", "ERROR", "This is an error message.\n"],
    ["test_logger", "CRITICAL", "This is a critical message.\n"],
]


def testStdout(caplog: pytest.LogCaptureFixture):
    """Test the logger's output to `sys.stdout`."""
    logger = Logger("test")
    assert logger.filename == "stdout"
    logger.debug("This is a debug message.")
    logger.info("This is an info message.")
    logger.warning("This is a warning message.")
    logger.error("This is an error message.")
    logger.critical("This is a critical message.")

    line_count = 0
    for item, record_tuple in enumerate(caplog.record_tuples):
        assert record_tuple == tuple(CORRECT_OUTPUT[item])
        line_count += 1

    assert line_count == 5


def testSingleHandler():
    """Test that re-creating a logger doesn't stack handlers by default."""
    first = Logger("single-handler-test")
    second = Logger("single-handler-test")
    assert first.logger is second.logger
    assert len(second.logger.handlers) == 1
    assert second.filename is None

    Logger("single-handler-test", allow_multiple_handlers=True)
    assert len(second.logger.handlers) == 2


def testPackageOneLiners(caplog: pytest.LogCaptureFixture):
    """Test the package-level logging one-liners report to the package logger."""
    odcovLogCritical("Something went badly wrong.")
    odcovLogError("Something went wrong.")
    odcovLogWarning("Something looks off.")

    assert caplog.record_tuples == [
        (PACKAGE_LOGGER_NAME, logging.CRITICAL, "Something went badly wrong."),
        (PACKAGE_LOGGER_NAME, logging.ERROR, "Something went wrong."),
        (PACKAGE_LOGGER_NAME, logging.WARNING, "Something looks off."),
    ]


@pytest.mark.datafiles(FIXTURE_DATA_DIR)
def testLogfile(datafiles: str, monkeypatch: pytest.MonkeyPatch):
    """Test the logger's output to a logfile."""
    monkeypatch.chdir(datafiles)
    file_logger = Logger("logfile-test", path="logs/")
    assert os.path.dirname(file_logger.filename) == "logs"

    file_logger.debug("This is a debug message.")
    file_logger.info("This is an info message.")
    file_logger.warning("This is a warning message.")
    file_logger.error("This is an error message.")
    file_logger.critical("This is a critical message.")

    with open(file_logger.filename, encoding="utf-8") as logfile:
        line_count = 0
        for item, line in enumerate(logfile):
            assert line.split(" - ")[1:] == CORRECT_FILE_OUTPUT[item]
            line_count += 1

        assert line_count == 5

    for handler in file_logger.logger.handlers:
        handler.close()
