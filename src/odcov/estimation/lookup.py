"""Defines the :class:`.BinarySearchLookupScheme` used to map query times onto sorted observation rows."""

from __future__ import annotations

# Third Party Imports
from numpy import asarray, diff, ndarray, searchsorted

# Local Imports
from ..common.exceptions import ShapeMismatchError, SortConsistencyError
from ..common.logger import odcovLogError


class BinarySearchLookupScheme:
    """Nearest-lower-neighbour search over a non-decreasing sequence of independent values."""

    def __init__(self, independent_values: ndarray):
        """Validate and store the sequence that is searched.

        Args:
            independent_values (``ndarray``): :math:`N\\times 1` non-decreasing values, e.g. sorted
                observation times.

        Raises:
            :class:`.ShapeMismatchError`: if the values are empty or not one-dimensional.
            :class:`.SortConsistencyError`: if the values ever decrease.
        """
        values = asarray(independent_values, dtype=float)
        if values.ndim != 1 or values.shape[0] == 0:
            msg = f"Lookup scheme requires a non-empty 1-D sequence, got shape {values.shape}"
            odcovLogError(msg)
            raise ShapeMismatchError(msg)

        if (diff(values) < 0.0).any():
            msg = "Lookup scheme requires non-decreasing independent values"
            odcovLogError(msg)
            raise SortConsistencyError(msg)

        self._values = values.copy()
        self._values.flags.writeable = False

    @property
    def independent_values(self) -> ndarray:
        """``ndarray``: read-only view of the searched values."""
        return self._values

    def __len__(self) -> int:
        """``int``: number of searchable values."""
        return self._values.shape[0]

    def findNearestLowerNeighbour(self, value: float) -> int:
        """Find the largest index whose independent value does not exceed `value`.

        Among repeated values the rightmost index is returned. Queries below the first value clamp
        to ``0`` and queries beyond the last value clamp to ``N - 1``.

        Args:
            value (``float``): query value.

        Returns:
            ``int``: index of the nearest lower neighbour.
        """
        index = int(searchsorted(self._values, value, side="right")) - 1
        return min(max(index, 0), self._values.shape[0] - 1)
