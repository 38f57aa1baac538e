r"""Covariance of a batch least-squares solution from its (normalized) normal equations.

The inverse of the normalized covariance after processing the first :math:`k` observations is

.. math::

    P_{k}^{-1} = \bar{P}_{0}^{-1} + H_{k}^{T} W_{k} H_{k}

where :math:`\bar{P}_{0}^{-1}` is the normalized inverse a-priori covariance, :math:`H_{k}` holds the
first :math:`k` rows of the normalized information matrix, and :math:`W_{k}` is the diagonal weight
matrix of those rows.

Parameters are normalized by dividing each column of the information matrix by a per-parameter
normalization factor :math:`d_{j}`. With :math:`D = \operatorname{diag}(d)`, the covariance in
physical units is recovered as

.. math::

    P = D^{-1} P_{k} D^{-1}

so the *unnormalization matrix* used here is :math:`D^{-1}`.
"""

from __future__ import annotations

# Third Party Imports
from numpy import asarray, diag, isfinite, ndarray
from numpy.linalg import LinAlgError, multi_dot, pinv
from scipy.linalg import inv

# Local Imports
from ..common.behavioral_config import BehavioralConfig
from ..common.exceptions import NonSquareMatrixError, ShapeMismatchError, SingularMatrixError
from ..common.logger import odcovLogError, odcovLogWarning


def calculateInverseOfUpdatedCovarianceMatrix(
    information_matrix: ndarray,
    weights_diagonal: ndarray,
    inverse_apriori_covariance: ndarray,
) -> ndarray:
    r"""Calculate the inverse of the covariance matrix updated with a set of observations.

    Args:
        information_matrix (``ndarray``): :math:`k\times M` (normalized) information matrix.
        weights_diagonal (``ndarray``): :math:`k\times 1` diagonal of the weight matrix.
        inverse_apriori_covariance (``ndarray``): :math:`M\times M` (normalized) inverse a-priori
            covariance.

    Raises:
        :class:`.ShapeMismatchError`: if the weights don't match the rows of the information
            matrix, or the a-priori matrix doesn't match its columns.

    Returns:
        ``ndarray``: :math:`M\times M` inverse of the updated covariance.
    """
    information_matrix = asarray(information_matrix, dtype=float)
    weights_diagonal = asarray(weights_diagonal, dtype=float)
    inverse_apriori_covariance = asarray(inverse_apriori_covariance, dtype=float)

    if weights_diagonal.shape[0] != information_matrix.shape[0]:
        msg = f"{weights_diagonal.shape[0]} weights given for {information_matrix.shape[0]} information matrix rows"
        odcovLogError(msg)
        raise ShapeMismatchError(msg)

    if inverse_apriori_covariance.shape != (information_matrix.shape[1],) * 2:
        msg = (
            f"A-priori matrix of shape {inverse_apriori_covariance.shape} is inconsistent with "
            f"{information_matrix.shape[1]} parameters"
        )
        odcovLogError(msg)
        raise ShapeMismatchError(msg)

    return inverse_apriori_covariance + information_matrix.T.dot(weights_diagonal[:, None] * information_matrix)


def invertCovarianceMatrix(
    matrix: ndarray,
    use_pseudo_inverse: bool | None = None,
    rcond: float | None = None,
) -> ndarray:
    """Invert a square covariance (or inverse covariance) matrix.

    Args:
        matrix (``ndarray``): :math:`M\\times M` matrix to invert.
        use_pseudo_inverse (``bool``, optional): fall back to the Moore-Penrose pseudo-inverse instead
            of failing on a singular matrix. Defaults to ``None``, which uses the
            ``estimation.UsePseudoInverse`` config value.
        rcond (``float``, optional): relative singular value cutoff for the pseudo-inverse. Defaults to
            ``None``, which uses the ``estimation.PseudoInverseRcond`` config value, or numpy's
            default if that is null too.

    Raises:
        :class:`.NonSquareMatrixError`: if `matrix` is not square.
        :class:`.SingularMatrixError`: if `matrix` is not invertible and the pseudo-inverse is not
            enabled.

    Returns:
        ``ndarray``: inverse of `matrix`.
    """
    matrix = asarray(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        msg = f"Cannot invert non-square matrix of shape {matrix.shape}"
        odcovLogError(msg)
        raise NonSquareMatrixError(msg)

    config = BehavioralConfig.getConfig().estimation
    if use_pseudo_inverse is None:
        use_pseudo_inverse = config.UsePseudoInverse
    if rcond is None:
        rcond = config.PseudoInverseRcond

    try:
        inverse = inv(matrix)
    except LinAlgError as err:
        inverse, reason = None, str(err)
    else:
        reason = "inverse is not finite"

    if inverse is not None and isfinite(inverse).all():
        return inverse

    if not use_pseudo_inverse:
        msg = f"Normal equations matrix is singular: {reason}"
        odcovLogError(msg)
        raise SingularMatrixError(msg)

    odcovLogWarning("Normal equations matrix is singular, using pseudo-inverse")
    return pinv(matrix) if rcond is None else pinv(matrix, rcond=rcond)


def getUnnormalizationMatrix(normalization_factors: ndarray) -> ndarray:
    """Build the diagonal matrix that takes normalized covariances back to physical units.

    Args:
        normalization_factors (``ndarray``): :math:`M\\times 1` per-parameter normalization factors.

    Raises:
        ValueError: if any normalization factor is zero.

    Returns:
        ``ndarray``: :math:`M\\times M` diagonal matrix of inverse normalization factors.
    """
    normalization_factors = asarray(normalization_factors, dtype=float)
    if (normalization_factors == 0.0).any():
        msg = f"Normalization factors must be non-zero: {normalization_factors}"
        odcovLogError(msg)
        raise ValueError(msg)

    return diag(1.0 / normalization_factors)


def unnormalizeCovariance(normalized_covariance: ndarray, unnormalization_matrix: ndarray) -> ndarray:
    """Scale a normalized covariance back to physical units, see :func:`.getUnnormalizationMatrix`."""
    return multi_dot((unnormalization_matrix, normalized_covariance, unnormalization_matrix))


def calculateUnnormalizedCovariance(
    time_ordered_information_matrix: ndarray,
    time_ordered_weights_diagonal: ndarray,
    inverse_apriori_covariance: ndarray,
    unnormalization_matrix: ndarray,
    num_observations: int,
) -> ndarray:
    """Calculate the covariance in physical units after the first `num_observations` observations.

    Args:
        time_ordered_information_matrix (``ndarray``): :math:`N\\times M` normalized information
            matrix, rows in chronological order.
        time_ordered_weights_diagonal (``ndarray``): :math:`N\\times 1` weights, in the same row order.
        inverse_apriori_covariance (``ndarray``): :math:`M\\times M` normalized inverse a-priori
            covariance.
        unnormalization_matrix (``ndarray``): :math:`M\\times M` output of
            :func:`.getUnnormalizationMatrix`.
        num_observations (``int``): number of leading rows to include.

    Returns:
        ``ndarray``: :math:`M\\times M` unnormalized covariance.
    """
    inverse_normalized_covariance = calculateInverseOfUpdatedCovarianceMatrix(
        time_ordered_information_matrix[:num_observations],
        time_ordered_weights_diagonal[:num_observations],
        inverse_apriori_covariance,
    )
    return unnormalizeCovariance(invertCovarianceMatrix(inverse_normalized_covariance), unnormalization_matrix)
