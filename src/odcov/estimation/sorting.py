"""Chronological ordering of concatenated observations and the information matrix rows tied to them."""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Third Party Imports
from numpy import arange, argsort, asarray, empty_like, ndarray

# Local Imports
from ..common.exceptions import SortConsistencyError
from ..common.logger import odcovLogError
from .observations import getConcatenatedTimeVector

# Type Checking Imports
if TYPE_CHECKING:
    # Local Imports
    from .observations import ObservationCollection


def getSortOrderAndSortedVector(values: ndarray) -> tuple[ndarray, ndarray]:
    """Sort `values` ascending and return the order in which it was sorted.

    A stable sort is used, so equal values keep their original relative order and repeated calls
    on identical input give identical permutations.

    Args:
        values (``ndarray``): :math:`N\\times 1` values to sort, typically observation times.

    Returns:
        ``tuple``: the :math:`N\\times 1` integer permutation ``order`` such that ``values[order]``
        is non-decreasing, and the sorted values themselves.
    """
    values = asarray(values, dtype=float)
    order = argsort(values, kind="stable")
    return order, values[order]


def invertPermutation(order: ndarray) -> ndarray:
    """Return the inverse of the permutation `order`, so ``order[inverse]`` is the identity."""
    order = asarray(order, dtype=int)
    inverse = empty_like(order)
    inverse[order] = arange(order.shape[0])
    return inverse


def reorderRows(order: ndarray, array: ndarray) -> ndarray:
    """Permute the rows of `array` so that row ``i`` of the result is row ``order[i]`` of `array`.

    Works for both matrices (e.g. the information matrix) and vectors (e.g. the weight diagonal).

    Args:
        order (``ndarray``): :math:`N\\times 1` row permutation.
        array (``ndarray``): :math:`N\\times M` matrix or :math:`N\\times 1` vector.

    Raises:
        :class:`.SortConsistencyError`: if the permutation length differs from the number of rows.

    Returns:
        ``ndarray``: newly allocated, row-permuted copy of `array`.
    """
    order = asarray(order, dtype=int)
    array = asarray(array)
    if order.shape[0] != array.shape[0]:
        msg = f"Sort order of length {order.shape[0]} is incompatible with {array.shape[0]} rows"
        odcovLogError(msg)
        raise SortConsistencyError(msg)

    return array[order].copy()


def getTimeOrderedInformationMatrix(
    measurement_data: ObservationCollection,
    type_and_link_sorted_information_matrix: ndarray,
) -> tuple[ndarray, ndarray, ndarray]:
    """Sort the information matrix by the time of the associated observations.

    The time associated with the observation of each row determines the new row position: the
    earliest observation becomes the first row, the latest the last row.

    Args:
        measurement_data (:class:`.ObservationCollection`): all observations, in canonical
            type-and-link order.
        type_and_link_sorted_information_matrix (``ndarray``): :math:`N\\times M` information matrix
            in canonical type-and-link row order.

    Raises:
        :class:`.SortConsistencyError`: if the number of observations and matrix rows disagree.

    Returns:
        ``tuple``: the time-ordered information matrix, the sorted observation times, and the
        permutation that was applied.
    """
    time_order, sorted_times = getSortOrderAndSortedVector(getConcatenatedTimeVector(measurement_data))
    sorted_matrix = reorderRows(time_order, type_and_link_sorted_information_matrix)

    return sorted_matrix, sorted_times, time_order
