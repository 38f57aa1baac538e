from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Third Party Imports
import pytest
from numpy import allclose, arange, array, array_equal, diag, eye, ones, zeros
from numpy.linalg import inv

# ODCOV Imports
from odcov.common.behavioral_config import BehavioralConfig
from odcov.common.exceptions import (
    IndexOutOfBoundsError,
    NonSquareMatrixError,
    ShapeMismatchError,
    SingularMatrixError,
)
from odcov.common.labels import ObservableType
from odcov.estimation.covariance_history import (
    calculateCovarianceHistoryFromEstimation,
    calculateCovarianceMatrixAsFunctionOfTime,
    extendThroughTiedTimes,
)
from odcov.estimation.observations import (
    ObservationCollection,
    ObservationRecord,
    getConcatenatedTimeVector,
)

# Local Imports
from .. import STATION_LINK

# Type Checking Imports
if TYPE_CHECKING:
    # Third Party Imports
    from numpy import ndarray

    # ODCOV Imports
    from odcov.estimation.results import EstimationInput, EstimationOutput


NORMALIZATION_FACTORS = array([2.0, 0.5])
UNNORMALIZATION = diag(1.0 / NORMALIZATION_FACTORS)


def expectedCovariance(matrix: ndarray, weights: ndarray, apriori: ndarray, rows: list[int]) -> ndarray:
    """Brute-force unnormalized covariance from the selected canonical-order `rows`."""
    included = matrix[rows]
    inverse_covariance = apriori + included.T @ diag(weights[rows]) @ included
    return UNNORMALIZATION @ inv(inverse_covariance) @ UNNORMALIZATION


def singleRecord(times) -> ObservationCollection:
    """One range record with an observation at each of `times`."""
    times = array(times, dtype=float)
    return ObservationCollection([ObservationRecord(ObservableType.ONE_WAY_RANGE, STATION_LINK, times, times)])


def testTiedObservationHistory(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test the epochs and covariances of observations at times ``[0, 1, 1, 3]``."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        2.0,
        tied_weights,
        unit_apriori,
    )

    assert list(history) == [1.0, 3.0]
    assert history.getNumObservations(1.0) == 3
    assert history.getNumObservations(3.0) == 4

    # Canonical rows 2, 0 and 3 hold the observations at times 0, 1 and 1
    assert allclose(
        history[1.0],
        expectedCovariance(tied_information_matrix, tied_weights, unit_apriori, [2, 0, 3]),
    )
    assert allclose(
        history[3.0],
        expectedCovariance(tied_information_matrix, tied_weights, unit_apriori, [0, 1, 2, 3]),
    )


def testNoInitialEpoch(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that the first observation time is never queried on its own."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        1.0,
        tied_weights,
        unit_apriori,
    )
    assert 0.0 not in history
    assert list(history) == [1.0, 3.0]


@pytest.mark.parametrize("output_time_step", [0.5, 1.0, 1.5, 2.0, 3.0, 10.0])
def testTiesNeverSplit(
    output_time_step: float,
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that every epoch includes all observations sharing its timestamp."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        output_time_step,
        tied_weights,
        unit_apriori,
    )
    times = getConcatenatedTimeVector(tied_observations)

    assert len(history) > 0
    assert history.final[0] == times.max()
    for epoch in history:
        assert epoch in times
        assert history.getNumObservations(epoch) == (times <= epoch).sum()


def testFinalPartialIntervalDisabled(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that an overshooting final query time can be dropped."""
    BehavioralConfig.getConfig().estimation.EmitFinalPartialInterval = False
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        2.0,
        tied_weights,
        unit_apriori,
    )
    assert list(history) == [1.0]
    assert history.final[0] < 3.0

    # An exact final query time is still included
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        1.5,
        tied_weights,
        unit_apriori,
    )
    assert list(history) == [1.0, 3.0]


def testAccumulatedStepError():
    """Test that round-off in the accumulated query time doesn't skip any observation."""
    times = arange(31) * 0.1
    observations = singleRecord(times)
    history = calculateCovarianceMatrixAsFunctionOfTime(
        observations,
        ones((31, 1)),
        [1.0],
        0.1,
        ones(31),
        eye(1),
    )

    assert len(history) == 30
    assert array_equal(history.times, times[1:])
    for count, epoch in enumerate(history, start=2):
        assert history.getNumObservations(epoch) == count
        assert allclose(history[epoch], [[1.0 / (1.0 + count)]])


def testZeroWeightsGiveApriori(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
):
    """Test that zero-weighted observations leave the unnormalized a-priori at every epoch."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        1.0,
        zeros(4),
        diag([4.0, 1.0]),
    )
    assert len(history) == 2
    for covariance in history.values():
        assert allclose(covariance, diag([0.0625, 4.0]))


def testShrinkingFormalErrors(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that adding observations never increases the formal errors."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        tied_information_matrix,
        NORMALIZATION_FACTORS,
        0.5,
        tied_weights,
        unit_apriori,
    )
    formal_errors = history.formalErrors()
    assert (formal_errors[1:] <= formal_errors[:-1]).all()


def testIdempotent(
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that identical inputs give identical histories."""
    args = (tied_observations, tied_information_matrix, NORMALIZATION_FACTORS, 1.0, tied_weights, unit_apriori)
    first = calculateCovarianceMatrixAsFunctionOfTime(*args)
    second = calculateCovarianceMatrixAsFunctionOfTime(*args)

    assert array_equal(first.times, second.times)
    assert array_equal(first.covariances, second.covariances)


def testSingleTimestamp():
    """Test that observations sharing one timestamp give an empty history."""
    history = calculateCovarianceMatrixAsFunctionOfTime(
        singleRecord([5.0, 5.0]),
        ones((2, 1)),
        [1.0],
        1.0,
        ones(2),
        eye(1),
    )
    assert len(history) == 0
    assert history.covariances.shape == (0, 0, 0)


def testSingularEpoch(tied_observations: ObservationCollection):
    """Test that a singular epoch is reported along with its timestamp."""
    with pytest.raises(SingularMatrixError) as error:
        calculateCovarianceMatrixAsFunctionOfTime(
            tied_observations,
            zeros((4, 2)),
            NORMALIZATION_FACTORS,
            2.0,
            ones(4),
            zeros((2, 2)),
        )

    assert error.value.epoch == 1.0


def testSingularPseudoInverse(tied_observations: ObservationCollection):
    """Test that the pseudo-inverse lets a singular history complete."""
    BehavioralConfig.getConfig().estimation.UsePseudoInverse = True
    history = calculateCovarianceMatrixAsFunctionOfTime(
        tied_observations,
        zeros((4, 2)),
        NORMALIZATION_FACTORS,
        2.0,
        ones(4),
        zeros((2, 2)),
    )
    assert list(history) == [1.0, 3.0]
    assert allclose(history.covariances, 0.0)


@pytest.mark.parametrize(
    ("matrix", "factors", "weights", "apriori", "error"),
    [
        (ones((4, 2)), ones(2), ones(4), ones((2, 3)), NonSquareMatrixError),
        (ones((4, 3)), ones(2), ones(4), eye(2), ShapeMismatchError),
        (ones(4), ones(2), ones(4), eye(2), ShapeMismatchError),
        (ones((4, 2)), ones(3), ones(4), eye(2), ShapeMismatchError),
        (ones((4, 2)), ones(2), ones(3), eye(2), ShapeMismatchError),
        (ones((5, 2)), ones(2), ones(5), eye(2), ShapeMismatchError),
    ],
)
def testInconsistentShapes(tied_observations: ObservationCollection, matrix, factors, weights, apriori, error):
    """Test that inconsistent input dimensions are rejected."""
    with pytest.raises(error):
        calculateCovarianceMatrixAsFunctionOfTime(tied_observations, matrix, factors, 1.0, weights, apriori)


def testNoObservations():
    """Test that an empty set of observations is rejected."""
    with pytest.raises(ShapeMismatchError):
        calculateCovarianceMatrixAsFunctionOfTime(
            ObservationCollection(),
            zeros((0, 2)),
            ones(2),
            1.0,
            zeros(0),
            eye(2),
        )


@pytest.mark.parametrize("output_time_step", [0.0, -1.0])
def testBadTimeStep(
    output_time_step: float,
    tied_observations: ObservationCollection,
    tied_information_matrix: ndarray,
    tied_weights: ndarray,
    unit_apriori: ndarray,
):
    """Test that the output time step must be positive."""
    with pytest.raises(ValueError, match="positive"):
        calculateCovarianceMatrixAsFunctionOfTime(
            tied_observations,
            tied_information_matrix,
            NORMALIZATION_FACTORS,
            output_time_step,
            tied_weights,
            unit_apriori,
        )


@pytest.mark.parametrize(
    ("index", "extended"),
    [
        (0, 0),
        (1, 3),
        (2, 3),
        (3, 3),
        (4, 4),
        (5, 6),
        (6, 6),
    ],
)
def testExtendThroughTiedTimes(index: int, extended: int):
    """Test that indices move to the last of a run of equal times, stopping at the last row."""
    sorted_times = array([0.0, 1.0, 1.0, 1.0, 2.0, 4.0, 4.0])
    assert extendThroughTiedTimes(sorted_times, index) == extended


@pytest.mark.parametrize("index", [-1, 7])
def testExtendOutOfBounds(index: int):
    """Test that indices outside the sorted times are rejected."""
    sorted_times = array([0.0, 1.0, 1.0, 1.0, 2.0, 4.0, 4.0])
    with pytest.raises(IndexOutOfBoundsError):
        extendThroughTiedTimes(sorted_times, index)

    with pytest.raises(IndexError):
        extendThroughTiedTimes(sorted_times, index)


def testFromEstimation(estimation_input: EstimationInput, estimation_output: EstimationOutput):
    """Test that the final epoch matches the covariance of the complete estimation."""
    history = calculateCovarianceHistoryFromEstimation(estimation_input, estimation_output, 2.0)
    direct = calculateCovarianceMatrixAsFunctionOfTime(
        estimation_input.observations,
        estimation_output.normalized_information_matrix,
        estimation_output.normalization_factors,
        2.0,
        estimation_output.weights_diagonal,
        estimation_input.inverse_apriori_covariance,
    )

    assert array_equal(history.times, direct.times)
    assert allclose(history.covariances, direct.covariances)

    final_epoch, final_covariance = history.final
    assert final_epoch == 3.0
    assert allclose(
        final_covariance,
        estimation_output.getUnnormalizedCovarianceMatrix(estimation_input.inverse_apriori_covariance),
    )
