"""Module describing the containers exchanged with the estimation run and produced from it."""

from __future__ import annotations

# Standard Library Imports
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

# Third Party Imports
from numpy import asarray, diag, empty, ndarray, outer, sqrt, stack

# Local Imports
from ..common.exceptions import SortConsistencyError
from ..common.logger import odcovLogError
from .covariance import (
    calculateInverseOfUpdatedCovarianceMatrix,
    getUnnormalizationMatrix,
    invertCovarianceMatrix,
    unnormalizeCovariance,
)

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from collections.abc import Iterator

    # Local Imports
    from .observations import ObservationCollection


def getFormalErrors(covariance: ndarray) -> ndarray:
    """Return the formal errors (square roots of the variances) of `covariance`."""
    return sqrt(diag(covariance))


def getCorrelationMatrix(covariance: ndarray) -> ndarray:
    """Return the correlation coefficients between all parameter pairs of `covariance`."""
    formal_errors = getFormalErrors(covariance)
    return covariance / outer(formal_errors, formal_errors)


class CovarianceHistory(Mapping[float, ndarray]):
    """Read-only, time-ordered mapping of epoch to unnormalized parameter covariance.

    Each key is the timestamp of the last observation included in the covariance stored under it.
    """

    def __init__(
        self,
        covariances: Mapping[float, ndarray],
        num_observations: Mapping[float, int] | None = None,
    ):
        """Store the epochs of a covariance history.

        Args:
            covariances (``Mapping``): covariance matrix for each epoch, epochs ascending.
            num_observations (``Mapping``, optional): number of scalar observations included at each
                epoch. Defaults to ``None``.

        Raises:
            :class:`.SortConsistencyError`: if the epochs are not strictly increasing.
        """
        self._covariances: dict[float, ndarray] = {}
        previous = None
        for epoch, covariance in covariances.items():
            epoch = float(epoch)  # noqa: PLW2901
            if previous is not None and epoch <= previous:
                msg = f"Covariance history epochs must be strictly increasing: {epoch} after {previous}"
                odcovLogError(msg)
                raise SortConsistencyError(msg)
            matrix = asarray(covariance, dtype=float).copy()
            matrix.flags.writeable = False
            self._covariances[epoch] = matrix
            previous = epoch

        self._num_observations: dict[float, int] = {}
        if num_observations is not None:
            self._num_observations = {float(epoch): int(count) for epoch, count in num_observations.items()}

    def __getitem__(self, epoch: float) -> ndarray:
        """Return the covariance stored at `epoch`."""
        return self._covariances[epoch]

    def __iter__(self) -> Iterator[float]:
        """Iterate over the epochs in ascending order."""
        return iter(self._covariances)

    def __len__(self) -> int:
        """``int``: number of epochs."""
        return len(self._covariances)

    def __repr__(self) -> str:
        """Define how :class:`.CovarianceHistory` objects are represented as a ``str`` object."""
        return f"{self.__class__.__name__}(epochs={len(self)}, times={self.times.tolist()})"

    @property
    def times(self) -> ndarray:
        """``ndarray``: epochs, ascending."""
        return asarray(list(self._covariances), dtype=float)

    @property
    def covariances(self) -> ndarray:
        r"""``ndarray``: :math:`K\times M\times M` covariances, one per epoch."""
        if not self._covariances:
            return empty((0, 0, 0))
        return stack(list(self._covariances.values()))

    @property
    def final(self) -> tuple[float, ndarray]:
        """``tuple``: the last epoch and its covariance."""
        epoch = next(reversed(self._covariances))
        return epoch, self._covariances[epoch]

    def getNumObservations(self, epoch: float) -> int | None:
        """Return the number of scalar observations included at `epoch`, if it was recorded."""
        return self._num_observations.get(float(epoch))

    def formalErrors(self) -> ndarray:
        r"""Return the :math:`K\times M` formal errors of every epoch."""
        if not self._covariances:
            return empty((0, 0))
        return stack([getFormalErrors(covariance) for covariance in self._covariances.values()])

    def correlations(self) -> ndarray:
        r"""Return the :math:`K\times M\times M` correlation matrices of every epoch."""
        if not self._covariances:
            return empty((0, 0, 0))
        return stack([getCorrelationMatrix(covariance) for covariance in self._covariances.values()])


@dataclass
class EstimationInput:
    """Observation data and a-priori knowledge that were fed to the estimation run."""

    observations: ObservationCollection
    """:class:`.ObservationCollection`: all observations, in canonical type-and-link order."""

    inverse_apriori_covariance: ndarray
    r"""``ndarray``: :math:`M\times M` inverse a-priori covariance, normalized by the same factors as the
    information matrix."""

    def __post_init__(self) -> None:
        """Convert array-likes to float arrays."""
        self.inverse_apriori_covariance = asarray(self.inverse_apriori_covariance, dtype=float)

    def getObservationsAndTimes(self) -> ObservationCollection:
        """Return the observations and their times, in canonical order."""
        return self.observations


@dataclass
class EstimationOutput:
    """Linearized normal-equations products of a completed estimation run."""

    normalized_information_matrix: ndarray
    r"""``ndarray``: :math:`N\times M` normalized partials, rows in canonical type-and-link order."""

    normalization_factors: ndarray
    r"""``ndarray``: :math:`M\times 1` values by which each parameter's partials were divided."""

    weights_diagonal: ndarray
    r"""``ndarray``: :math:`N\times 1` diagonal of the weight matrix, same row order."""

    parameter_estimate: ndarray | None = field(default=None)
    r"""``ndarray``: :math:`M\times 1` final parameter estimate, if it was reported."""

    def __post_init__(self) -> None:
        """Convert array-likes to float arrays."""
        self.normalized_information_matrix = asarray(self.normalized_information_matrix, dtype=float)
        self.normalization_factors = asarray(self.normalization_factors, dtype=float)
        self.weights_diagonal = asarray(self.weights_diagonal, dtype=float)
        if self.parameter_estimate is not None:
            self.parameter_estimate = asarray(self.parameter_estimate, dtype=float)

    @property
    def num_parameters(self) -> int:
        """``int``: number of estimated parameters."""
        return self.normalized_information_matrix.shape[1]

    def getInverseNormalizedCovarianceMatrix(self, inverse_apriori_covariance: ndarray) -> ndarray:
        """Return the inverse normalized covariance using every observation."""
        return calculateInverseOfUpdatedCovarianceMatrix(
            self.normalized_information_matrix,
            self.weights_diagonal,
            inverse_apriori_covariance,
        )

    def getNormalizedCovarianceMatrix(self, inverse_apriori_covariance: ndarray) -> ndarray:
        """Return the normalized covariance using every observation."""
        return invertCovarianceMatrix(self.getInverseNormalizedCovarianceMatrix(inverse_apriori_covariance))

    def getUnnormalizedCovarianceMatrix(self, inverse_apriori_covariance: ndarray) -> ndarray:
        """Return the covariance, in physical units, using every observation."""
        return unnormalizeCovariance(
            self.getNormalizedCovarianceMatrix(inverse_apriori_covariance),
            getUnnormalizationMatrix(self.normalization_factors),
        )

    def getFormalErrorVector(self, inverse_apriori_covariance: ndarray) -> ndarray:
        """Return the formal errors, in physical units, using every observation."""
        return getFormalErrors(self.getUnnormalizedCovarianceMatrix(inverse_apriori_covariance))

    def getCorrelationMatrix(self, inverse_apriori_covariance: ndarray) -> ndarray:
        """Return the parameter correlation matrix using every observation."""
        return getCorrelationMatrix(self.getUnnormalizedCovarianceMatrix(inverse_apriori_covariance))
