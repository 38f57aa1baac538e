"""Plot formal-error histories with `matplotlib <https://matplotlib.org/stable/>`_."""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Third Party Imports
import matplotlib.pyplot as plt

# Local Imports
from ..common.exceptions import ShapeMismatchError
from ..common.logger import odcovLogError

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from collections.abc import Sequence

    # Third Party Imports
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

    # Local Imports
    from ..estimation.results import CovarianceHistory


def plotFormalErrorHistory(
    history: CovarianceHistory,
    parameter_names: Sequence[str] | None = None,
    axes: Axes | None = None,
) -> Figure:
    """Plot the formal error of each estimated parameter against the covariance epochs.

    Args:
        history (:class:`.CovarianceHistory`): covariance history to plot.
        parameter_names (``Sequence``, optional): legend label of each parameter. Defaults to
            ``None``, which labels parameters by index.
        axes (:class:`~matplotlib.axes.Axes`, optional): axes to draw on. Defaults to ``None``,
            which creates a new figure.

    Raises:
        :class:`.ShapeMismatchError`: if the number of names differs from the number of parameters.

    Returns:
        :class:`~matplotlib.figure.Figure`: figure holding the plot.
    """
    formal_errors = history.formalErrors()
    num_parameters = formal_errors.shape[1] if formal_errors.ndim == 2 else 0
    if parameter_names is None:
        parameter_names = [f"parameter {index}" for index in range(num_parameters)]
    elif len(parameter_names) != num_parameters:
        msg = f"{len(parameter_names)} parameter names given for {num_parameters} parameters"
        odcovLogError(msg)
        raise ShapeMismatchError(msg)

    if axes is None:
        figure, axes = plt.subplots()
    else:
        figure = axes.get_figure()

    for index, name in enumerate(parameter_names):
        axes.plot(history.times, formal_errors[:, index], marker=".", label=name)

    axes.set_yscale("log")
    axes.set_xlabel("Time")
    axes.set_ylabel("Formal error")
    axes.set_title("Formal error history")
    axes.grid(visible=True, which="both", alpha=0.3)
    if num_parameters:
        axes.legend()

    return figure
