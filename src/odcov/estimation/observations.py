r"""Observation records and their concatenation into single time-tagged vectors.

Observation data arrives from the estimation run grouped first by observable type, then by link
ends. Each group holds a flat observation vector of length :math:`d \times n` (with :math:`d` the
observable size and :math:`n` the number of samples) alongside the :math:`n` sample times.

The order of the records in an :class:`.ObservationCollection` is the *canonical* type-and-link
order: it is the row order of the information matrix and weight diagonal produced by the
estimation, so every concatenated vector built here follows it exactly.
"""

from __future__ import annotations

# Standard Library Imports
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

# Third Party Imports
from numpy import asarray, concatenate, empty, ndarray, repeat

# Local Imports
from ..common.exceptions import ShapeMismatchError
from ..common.labels import LinkEndType, ObservableType, getObservableSize
from ..common.logger import odcovLogError

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from collections.abc import Iterator, Mapping
    from typing import Any

    # Local Imports
    from ..common.labels import LinkEnds


def _readOnlyArray(values: Any) -> ndarray:
    """Copy `values` into a flat, read-only ``float`` array."""
    array = asarray(values, dtype=float).reshape(-1).copy()
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class ObservationRecord:
    """Observations of a single observable type over a single set of link ends."""

    observable_type: ObservableType
    """:class:`.ObservableType`: category of measurement held by this record."""

    link_ends: LinkEnds
    """:data:`.LinkEnds`: participants of the observation link and their roles."""

    observations: ndarray
    r"""``ndarray``: :math:`dn\times 1` observation values, one contiguous :math:`d`-block per sample."""

    times: ndarray
    r"""``ndarray``: :math:`n\times 1` sample times."""

    reference_link_end: LinkEndType = LinkEndType.RECEIVER
    """:class:`.LinkEndType`: link end whose clock time-tags the observations."""

    def __post_init__(self) -> None:
        """Normalize the field types and enforce the observation/time length contract."""
        object.__setattr__(self, "observable_type", ObservableType(self.observable_type))
        object.__setattr__(self, "reference_link_end", LinkEndType(self.reference_link_end))
        object.__setattr__(self, "link_ends", tuple(self.link_ends))
        object.__setattr__(self, "observations", _readOnlyArray(self.observations))
        object.__setattr__(self, "times", _readOnlyArray(self.times))

        expected = self.observable_size * self.times.shape[0]
        if self.observations.shape[0] != expected:
            msg = (
                f"{self.observable_type.value} record over {self.link_ends} holds "
                f"{self.observations.shape[0]} observation values, expected {expected} "
                f"({self.times.shape[0]} samples of size {self.observable_size})"
            )
            odcovLogError(msg)
            raise ShapeMismatchError(msg)

    @property
    def observable_size(self) -> int:
        """``int``: number of scalar components per sample."""
        return getObservableSize(self.observable_type)

    @property
    def num_samples(self) -> int:
        """``int``: number of time-tagged samples."""
        return self.times.shape[0]

    @property
    def num_scalar_observations(self) -> int:
        """``int``: number of scalar observation values (rows of the information matrix)."""
        return self.observations.shape[0]

    def getExpandedTimes(self) -> ndarray:
        """Return one time tag per scalar observation value.

        Size-1 observables reuse their sample times directly, larger observables repeat each
        sample time once per component.
        """
        if self.observable_size == 1:
            return self.times
        return repeat(self.times, self.observable_size)


class ObservationCollection(Sequence[ObservationRecord]):
    """Ordered collection of :class:`.ObservationRecord` objects.

    The list order of the records is the canonical type-and-link ordering used to concatenate
    observations and to index the rows of the information matrix.
    """

    def __init__(self, records: Sequence[ObservationRecord] = ()):
        """Instantiate a collection from already-ordered records.

        Args:
            records (``Sequence``): observation records in canonical order.
        """
        self._records: tuple[ObservationRecord, ...] = tuple(records)
        for record in self._records:
            if not isinstance(record, ObservationRecord):
                msg = f"ObservationCollection only holds ObservationRecord objects, not {type(record)}"
                odcovLogError(msg)
                raise TypeError(msg)

    @classmethod
    def fromNestedMapping(
        cls,
        measurement_data: Mapping[ObservableType, Mapping[LinkEnds, tuple[Any, tuple[Any, LinkEndType]]]],
    ) -> ObservationCollection:
        """Flatten an observable type to link ends to data mapping into an ordered collection.

        The outer keys are walked first and the inner keys second, both in the mappings' own
        iteration order, which defines the canonical order.

        Args:
            measurement_data (``Mapping``): ``{observable_type: {link_ends: (observations, (times,
                reference_link_end))}}``.

        Returns:
            :class:`.ObservationCollection`: records in canonical order.
        """
        records = []
        for observable_type, single_observable_data in measurement_data.items():
            for link_ends, (observations, (times, reference_link_end)) in single_observable_data.items():
                records.append(
                    ObservationRecord(
                        observable_type=observable_type,
                        link_ends=link_ends,
                        observations=observations,
                        times=times,
                        reference_link_end=reference_link_end,
                    ),
                )
        return cls(records)

    def __getitem__(self, index):
        """Return the record(s) at `index`."""
        return self._records[index]

    def __len__(self) -> int:
        """``int``: number of records."""
        return len(self._records)

    def __iter__(self) -> Iterator[ObservationRecord]:
        """Iterate over records in canonical order."""
        return iter(self._records)

    @property
    def num_scalar_observations(self) -> int:
        """``int``: total number of scalar observation values across all records."""
        return sum(record.num_scalar_observations for record in self._records)


def getConcatenatedTimeVector(measurement_data: ObservationCollection) -> ndarray:
    """Create a single vector of times from all observation times.

    Times are concatenated in canonical type-and-link order with one time tag per scalar
    observation value.

    Args:
        measurement_data (:class:`.ObservationCollection`): all observation records.

    Returns:
        ``ndarray``: :math:`N\\times 1` concatenated time vector.
    """
    if not len(measurement_data):
        return empty(0)
    return concatenate([record.getExpandedTimes() for record in measurement_data])


def getConcatenatedMeasurementVector(measurement_data: ObservationCollection) -> ndarray:
    """Create a single vector of observations from all observation records.

    Args:
        measurement_data (:class:`.ObservationCollection`): all observation records.

    Returns:
        ``ndarray``: :math:`N\\times 1` concatenated observation vector.
    """
    if not len(measurement_data):
        return empty(0)
    return concatenate([record.observations for record in measurement_data])


def getNumberOfObservationsPerObservable(
    measurement_data: ObservationCollection,
) -> tuple[dict[ObservableType, int], int]:
    """Count the scalar observation values of each observable type.

    Args:
        measurement_data (:class:`.ObservationCollection`): all observation records.

    Returns:
        ``tuple``: number of scalar values per observable type (in order of first appearance) and
        the total number of scalar values.
    """
    counts: dict[ObservableType, int] = {}
    for record in measurement_data:
        counts[record.observable_type] = counts.get(record.observable_type, 0) + record.num_scalar_observations

    return counts, sum(counts.values())
