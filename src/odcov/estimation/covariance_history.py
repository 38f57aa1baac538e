"""Time history of the estimation covariance, built by growing the set of included observations.

Observations from every observable type and link are placed in chronological order, and at every
output time step the covariance is recomputed from all observations taken up to that time. The
result shows how the formal uncertainty of the estimated parameters shrinks as data accumulates.
"""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Third Party Imports
from numpy import asarray

# Local Imports
from ..common.behavioral_config import BehavioralConfig
from ..common.exceptions import (
    IndexOutOfBoundsError,
    NonSquareMatrixError,
    ShapeMismatchError,
    SingularMatrixError,
)
from ..common.logger import odcovLogDebug, odcovLogError, odcovLogInfo
from .covariance import calculateUnnormalizedCovariance, getUnnormalizationMatrix
from .lookup import BinarySearchLookupScheme
from .results import CovarianceHistory
from .sorting import getTimeOrderedInformationMatrix, reorderRows

# Type Checking Imports
if TYPE_CHECKING:
    # Third Party Imports
    from numpy import ndarray

    # Local Imports
    from .observations import ObservationCollection
    from .results import EstimationInput, EstimationOutput


def _raiseShapeMismatch(msg: str) -> None:
    odcovLogError(msg)
    raise ShapeMismatchError(msg)


def validateEstimationShapes(
    measurement_data: ObservationCollection,
    normalized_information_matrix: ndarray,
    normalization_factors: ndarray,
    weights_diagonal: ndarray,
    normalized_inverse_apriori_covariance: ndarray,
) -> None:
    """Check the dimensional consistency of all covariance history inputs.

    Raises:
        :class:`.NonSquareMatrixError`: if the inverse a-priori covariance is not square.
        :class:`.ShapeMismatchError`: if the number of parameters or observations differs between
            inputs.
    """
    if normalized_inverse_apriori_covariance.ndim != 2 or (
        normalized_inverse_apriori_covariance.shape[0] != normalized_inverse_apriori_covariance.shape[1]
    ):
        msg = f"A-priori covariance is not square: {normalized_inverse_apriori_covariance.shape}"
        odcovLogError(msg)
        raise NonSquareMatrixError(msg)

    num_parameters = normalized_inverse_apriori_covariance.shape[1]
    if normalized_information_matrix.ndim != 2:
        _raiseShapeMismatch(f"Information matrix must be 2-D, got shape {normalized_information_matrix.shape}")

    if normalized_information_matrix.shape[1] != num_parameters:
        _raiseShapeMismatch(
            f"Number of parameters ({num_parameters}) is inconsistent with information matrix "
            f"columns ({normalized_information_matrix.shape[1]})",
        )

    if normalization_factors.shape != (num_parameters,):
        _raiseShapeMismatch(
            f"Number of parameters ({num_parameters}) is inconsistent with normalization factors "
            f"{normalization_factors.shape}",
        )

    if weights_diagonal.shape != (normalized_information_matrix.shape[0],):
        _raiseShapeMismatch(
            f"Weights {weights_diagonal.shape} are inconsistent with information matrix rows "
            f"({normalized_information_matrix.shape[0]})",
        )

    num_observations = measurement_data.num_scalar_observations
    if num_observations == 0:
        _raiseShapeMismatch("Cannot compute a covariance history without observations")

    if num_observations != normalized_information_matrix.shape[0]:
        _raiseShapeMismatch(
            f"Number of scalar observations ({num_observations}) is inconsistent with information "
            f"matrix rows ({normalized_information_matrix.shape[0]})",
        )


def extendThroughTiedTimes(sorted_times: ndarray, index: int) -> int:
    """Move `index` forward to the last of a run of exactly equal times.

    The last row is terminal: once it is reached the index is not advanced further.

    Args:
        sorted_times (``ndarray``): non-decreasing observation times.
        index (``int``): starting row index.

    Raises:
        :class:`.IndexOutOfBoundsError`: if `index` lies beyond the last row.

    Returns:
        ``int``: index of the last observation sharing the timestamp at `index`.
    """
    last_index = sorted_times.shape[0] - 1
    if not 0 <= index <= last_index:
        msg = f"Observation index {index} is out of bounds for {last_index + 1} sorted observations"
        odcovLogError(msg)
        raise IndexOutOfBoundsError(msg)

    while index < last_index and sorted_times[index] == sorted_times[index + 1]:
        index += 1

    return index


def calculateCovarianceMatrixAsFunctionOfTime(
    measurement_data: ObservationCollection,
    normalized_information_matrix: ndarray,
    normalization_factors: ndarray,
    output_time_step: float,
    weights_diagonal: ndarray,
    normalized_inverse_apriori_covariance: ndarray,
) -> CovarianceHistory:
    """Create a history of the estimation covariance as a function of time.

    Starting at the earliest observation, the query time is advanced by `output_time_step` until it
    reaches the latest observation. At each step, the covariance is computed from every
    observation up to the query time, never splitting observations that share a timestamp, and is
    stored under the timestamp of the last included observation. No covariance is computed for the
    initial epoch itself.

    Args:
        measurement_data (:class:`.ObservationCollection`): all observations, in canonical
            type-and-link order.
        normalized_information_matrix (``ndarray``): :math:`N\\times M` information matrix, normalized
            by `normalization_factors`, rows in canonical type-and-link order.
        normalization_factors (``ndarray``): :math:`M\\times 1` values by which the parameters (and
            partials) were normalized to stabilize the normal equations.
        output_time_step (``float``): time step between consecutive query times.
        weights_diagonal (``ndarray``): :math:`N\\times 1` diagonal of the weight matrix, rows in
            canonical type-and-link order.
        normalized_inverse_apriori_covariance (``ndarray``): :math:`M\\times M` inverse a-priori
            covariance, normalized by `normalization_factors`.

    Raises:
        ValueError: if `output_time_step` is not positive.
        :class:`.NonSquareMatrixError`: if the a-priori covariance is not square.
        :class:`.ShapeMismatchError`: if the inputs' dimensions are inconsistent.
        :class:`.SingularMatrixError`: if the normal equations can't be inverted at some epoch.

    Returns:
        :class:`.CovarianceHistory`: unnormalized covariance for each output epoch.
    """
    normalized_information_matrix = asarray(normalized_information_matrix, dtype=float)
    normalization_factors = asarray(normalization_factors, dtype=float)
    weights_diagonal = asarray(weights_diagonal, dtype=float)
    normalized_inverse_apriori_covariance = asarray(normalized_inverse_apriori_covariance, dtype=float)

    if not output_time_step > 0.0:
        msg = f"Output time step must be positive, not {output_time_step}"
        odcovLogError(msg)
        raise ValueError(msg)

    validateEstimationShapes(
        measurement_data,
        normalized_information_matrix,
        normalization_factors,
        weights_diagonal,
        normalized_inverse_apriori_covariance,
    )

    # Order information matrix and weights by time of observations
    time_ordered_matrix, ordered_times, time_order = getTimeOrderedInformationMatrix(
        measurement_data,
        normalized_information_matrix,
    )
    time_ordered_weights = reorderRows(time_order, weights_diagonal)

    time_lookup = BinarySearchLookupScheme(ordered_times)
    unnormalization_matrix = getUnnormalizationMatrix(normalization_factors)

    config = BehavioralConfig.getConfig().estimation
    tolerance = config.TimeTolerance
    final_time = ordered_times[-1]
    odcovLogInfo(
        f"Computing covariance history of {normalized_information_matrix.shape[1]} parameters from "
        f"{ordered_times.shape[0]} observations over [{ordered_times[0]}, {final_time}], step {output_time_step}",
    )

    covariances: dict[float, ndarray] = {}
    num_observations: dict[float, int] = {}
    current_time = ordered_times[0]
    while current_time < final_time - tolerance:
        # No covariance is computed for the initial epoch
        current_time += output_time_step
        if not config.EmitFinalPartialInterval and current_time > final_time + tolerance:
            break

        # Observations within tolerance of the query time belong to this epoch
        current_index = extendThroughTiedTimes(
            ordered_times,
            time_lookup.findNearestLowerNeighbour(current_time + tolerance),
        )
        epoch = float(ordered_times[current_index])
        if epoch in covariances:
            # No new observations since the previous query time
            continue

        try:
            covariances[epoch] = calculateUnnormalizedCovariance(
                time_ordered_matrix,
                time_ordered_weights,
                normalized_inverse_apriori_covariance,
                unnormalization_matrix,
                current_index + 1,
            )
        except SingularMatrixError as err:
            msg = f"Covariance could not be computed at epoch {epoch}: {err}"
            odcovLogError(msg)
            raise SingularMatrixError(msg, epoch=epoch) from err

        num_observations[epoch] = current_index + 1
        odcovLogDebug(f"Covariance epoch {epoch} includes {current_index + 1} observations")

    odcovLogInfo(f"Covariance history complete with {len(covariances)} epochs")
    return CovarianceHistory(covariances, num_observations=num_observations)


def calculateCovarianceHistoryFromEstimation(
    estimation_input: EstimationInput,
    estimation_output: EstimationOutput,
    output_time_step: float,
) -> CovarianceHistory:
    """Create a history of the estimation covariance from the containers of an estimation run.

    See Also:
        :func:`.calculateCovarianceMatrixAsFunctionOfTime`

    Args:
        estimation_input (:class:`.EstimationInput`): observations and a-priori knowledge.
        estimation_output (:class:`.EstimationOutput`): normal-equations products of the run.
        output_time_step (``float``): time step between consecutive query times.

    Returns:
        :class:`.CovarianceHistory`: unnormalized covariance for each output epoch.
    """
    return calculateCovarianceMatrixAsFunctionOfTime(
        estimation_input.getObservationsAndTimes(),
        estimation_output.normalized_information_matrix,
        estimation_output.normalization_factors,
        output_time_step,
        estimation_output.weights_diagonal,
        estimation_input.inverse_apriori_covariance,
    )
