"""Define the command line interface for the ODCOV covariance post-processing tool."""

from __future__ import annotations

# Standard Library Imports
import argparse
import os.path

# Local Imports
from .logger import odcovLogError


def fileChecker(filepath):
    """Checks for valid filepaths passed to the CLI parser.

    Args:
        filepath (``str``): filepath given to CLI parser.

    Raises:
        ValueError: if the file does not exist

    Returns:
        ``str``: fully validated, absolute path to the file
    """
    filepath = os.path.abspath(os.path.realpath(os.path.normpath(filepath)))
    if not os.path.isfile(filepath):
        odcovLogError("Bad filepath given to CLI")
        raise ValueError(filepath)
    return filepath


def positiveFloat(value):
    """Convert a CLI argument to a strictly positive ``float``.

    Raises:
        ValueError: if the value is not a number greater than zero
    """
    converted = float(value)
    if converted <= 0.0:
        odcovLogError(f"Non-positive output time step given to CLI: {value}")
        raise ValueError(value)
    return converted


def getCommandLineParser():
    """Create parser for command line arguments.

    Returns:
        ``argparse.ArgumentParser``: valid parser object
    """
    parser = argparse.ArgumentParser(description="ODCOV Command Line Interface")
    output_group = parser.add_argument_group("Output Files")

    parser.add_argument(
        "estimation_file",
        metavar="INPUT_FILE",
        type=fileChecker,
        help="Path to JSON file holding the observations and estimation output",
    )

    parser.add_argument(
        "-s",
        "--step",
        dest="output_time_step",
        metavar="SECONDS",
        required=True,
        type=positiveFloat,
        help="Time step between covariance history epochs, same unit as the observation times",
    )

    parser.add_argument(
        "-l",
        "--label",
        dest="label",
        metavar="LABEL",
        default="default",
        type=str,
        help="Run label used when saving the covariance history. DEFAULT: 'default'",
    )

    output_group.add_argument(
        "-d",
        "--db-path",
        dest="db_path",
        metavar="DB_PATH",
        default=None,
        type=str,
        help="Path to SQLite database the covariance history is saved into",
    )

    output_group.add_argument(
        "-p",
        "--plot-path",
        dest="plot_path",
        metavar="PLOT_PATH",
        default=None,
        type=str,
        help="Path to image file the formal-error history plot is saved to",
    )

    return parser
