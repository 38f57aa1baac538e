"""Main Module Documentation.

The top-level module is documented below, which mainly serves as a command line entry point for
building the covariance history of a completed batch orbit-determination run.
"""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Type Checking Imports
if TYPE_CHECKING:
    # Local Imports
    from .estimation.results import CovarianceHistory

__version__ = "1.0.0"


def runCovarianceHistory(
    estimation_file: str,
    output_time_step: float,
    db_path: str | None = None,
    run_label: str = "default",
    plot_path: str | None = None,
) -> CovarianceHistory:
    """Build, and optionally save, the covariance history of an estimation file.

    Args:
        estimation_file (``str``): path to the JSON estimation file, see :mod:`.loader`.
        output_time_step (``float``): time step between covariance history epochs.
        db_path (``str``, optional): if saving to database, this points the
            :class:`.CovarianceDatabase` to the desired location. Defaults to ``None``, which skips
            saving.
        run_label (``str``, optional): label the covariance epochs are saved under. Defaults to
            ``"default"``.
        plot_path (``str``, optional): image file to save the formal-error plot to. Defaults to
            ``None``, which skips plotting.

    Returns:
        :class:`.CovarianceHistory`: the computed covariance history.
    """
    # Local Imports
    from .common.logger import Logger
    from .estimation import calculateCovarianceHistoryFromEstimation, loadEstimationFile

    logger = Logger("odcov")
    estimation_input, estimation_output = loadEstimationFile(estimation_file)
    history = calculateCovarianceHistoryFromEstimation(estimation_input, estimation_output, output_time_step)

    if db_path is not None:
        # Local Imports
        from .data import CovarianceDatabase, createDatabasePath

        database = CovarianceDatabase(db_path=createDatabasePath(db_path), logger=logger)
        database.saveCovarianceHistory(history, run_label)

    if plot_path is not None:
        # Third Party Imports
        import matplotlib.pyplot as plt

        # Local Imports
        from .reporting import plotFormalErrorHistory

        figure = plotFormalErrorHistory(history)
        figure.savefig(plot_path)
        plt.close(figure)
        logger.info(f"Saved formal error plot: {plot_path}")

    logger.info("Covariance history complete")
    return history


def main() -> None:
    """ODCOV main entry point.

    This is the function that the :command:`odcov` command points to. See :mod:`.cli` for
    details on what command line options are available.
    """
    # Local Imports
    from .common.cli import getCommandLineParser

    parser = getCommandLineParser()
    cli_args = parser.parse_args()

    runCovarianceHistory(
        cli_args.estimation_file,
        cli_args.output_time_step,
        db_path=cli_args.db_path,
        run_label=cli_args.label,
        plot_path=cli_args.plot_path,
    )
