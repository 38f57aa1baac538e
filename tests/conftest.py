from __future__ import annotations

# Standard Library Imports
import logging
import sys
from typing import TYPE_CHECKING

# Third Party Imports
import pytest
from numpy import array, diag, eye

# ODCOV Imports
from odcov.common.behavioral_config import BehavioralConfig
from odcov.common.labels import ObservableType
from odcov.estimation.observations import ObservationCollection, ObservationRecord
from odcov.estimation.results import EstimationInput, EstimationOutput

# Local Imports
from . import OTHER_STATION_LINK, STATION_LINK

# Type Checking Imports
if TYPE_CHECKING:
    # Third Party Imports
    from numpy import ndarray


@pytest.fixture(autouse=True)
def _resetBehavioralConfig() -> None:
    """Make sure every test function starts from, and leaves behind, the default configuration.

    Note:
        Tests are run in random order, so config values set by one test must never leak into
        another.
    """
    BehavioralConfig()
    yield
    BehavioralConfig()


@pytest.fixture(scope="session", name="test_logger")
def getTestLoggerObject() -> logging.Logger:
    """Create a custom :class:`logging.Logger` object."""
    logger = logging.getLogger("Unit Test Logger")
    logger.setLevel(logging.DEBUG)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    return logger


@pytest.fixture(name="tied_observations")
def getTiedObservations() -> ObservationCollection:
    """Two range-type records whose sorted times are ``[0, 1, 1, 3]``.

    Concatenated in canonical order the times are ``[1, 3, 0, 1]``.
    """
    return ObservationCollection(
        [
            ObservationRecord(ObservableType.ONE_WAY_RANGE, STATION_LINK, [10.0, 30.0], [1.0, 3.0]),
            ObservationRecord(ObservableType.ONE_WAY_DOPPLER, OTHER_STATION_LINK, [0.5, 0.7], [0.0, 1.0]),
        ],
    )


@pytest.fixture(name="tied_information_matrix")
def getTiedInformationMatrix() -> ndarray:
    """Information matrix for :func:`.getTiedObservations`, rows in canonical order."""
    return array(
        [
            [1.0, 0.0],
            [0.0, 1.0],
            [1.0, 1.0],
            [2.0, 1.0],
        ],
    )


@pytest.fixture(name="tied_weights")
def getTiedWeights() -> ndarray:
    """Distinct weights so that reordering mistakes show up in the covariance."""
    return array([1.0, 2.0, 3.0, 4.0])


@pytest.fixture(name="unit_apriori")
def getUnitApriori() -> ndarray:
    """Identity inverse a-priori covariance of two parameters."""
    return eye(2)


@pytest.fixture(name="estimation_input")
def getEstimationInput(tied_observations: ObservationCollection) -> EstimationInput:
    """Estimation input built around :func:`.getTiedObservations`."""
    return EstimationInput(observations=tied_observations, inverse_apriori_covariance=diag([4.0, 1.0]))


@pytest.fixture(name="estimation_output")
def getEstimationOutput(tied_information_matrix: ndarray, tied_weights: ndarray) -> EstimationOutput:
    """Estimation output built around :func:`.getTiedObservations`."""
    return EstimationOutput(
        normalized_information_matrix=tied_information_matrix,
        normalization_factors=array([2.0, 0.5]),
        weights_diagonal=tied_weights,
        parameter_estimate=array([1.0, -1.0]),
    )
