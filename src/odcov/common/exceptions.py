"""Contains all the custom-defined exceptions used in ODCOV."""

from __future__ import annotations

# Third Party Imports
from numpy.linalg import LinAlgError


class CovarianceHistoryError(Exception):
    """Base exception for failures while building a covariance history."""


class ShapeError(CovarianceHistoryError):
    """Exception indicating an improperly shaped matrix was created."""


class ShapeMismatchError(ShapeError):
    """Exception indicating dimensional inconsistency between estimation inputs."""


class NonSquareMatrixError(ShapeError):
    """Exception indicating a matrix that must be square is not."""


class SortConsistencyError(CovarianceHistoryError):
    """Exception indicating the time-ordering of observations is internally inconsistent."""


class IndexOutOfBoundsError(CovarianceHistoryError, IndexError):
    """Exception indicating an observation index walked past the last valid row."""


class SingularMatrixError(CovarianceHistoryError, LinAlgError):
    """Exception indicating the normal-equations matrix could not be inverted."""

    def __init__(self, message: str, epoch: float | None = None):
        """Instantiate an exception for a non-invertible matrix.

        Args:
            message (``str``): description of the failure.
            epoch (``float``, optional): timestamp of the covariance epoch being computed, if known.
        """
        super().__init__(message)
        self.epoch = epoch
