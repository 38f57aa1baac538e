"""Hold common label types for easier importing."""

from __future__ import annotations

# Standard Library Imports
from enum import Enum
from typing import TYPE_CHECKING

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from collections.abc import Mapping
    from typing import Final


class ObservableType(str, Enum):
    """Defines valid labels for observable types."""

    ONE_WAY_RANGE: str = "one_way_range"
    """``str``: one-way range between transmitter and receiver."""

    N_WAY_RANGE: str = "n_way_range"
    """``str``: range accumulated over a chain of retransmitting link ends."""

    ONE_WAY_DOPPLER: str = "one_way_doppler"
    """``str``: one-way Doppler (range-rate) observable."""

    TWO_WAY_DOPPLER: str = "two_way_doppler"
    """``str``: two-way Doppler (range-rate) observable."""

    ONE_WAY_DIFFERENCED_RANGE: str = "one_way_differenced_range"
    """``str``: one-way range difference over an integration interval."""

    ANGULAR_POSITION: str = "angular_position"
    """``str``: right ascension and declination pair."""

    POSITION: str = "position"
    """``str``: Cartesian position vector."""

    VELOCITY: str = "velocity"
    """``str``: Cartesian velocity vector."""

    EULER_ANGLE_313: str = "euler_angle_313"
    """``str``: 3-1-3 Euler angle orientation triple."""


OBSERVABLE_SIZES: Final[dict[ObservableType, int]] = {
    ObservableType.ONE_WAY_RANGE: 1,
    ObservableType.N_WAY_RANGE: 1,
    ObservableType.ONE_WAY_DOPPLER: 1,
    ObservableType.TWO_WAY_DOPPLER: 1,
    ObservableType.ONE_WAY_DIFFERENCED_RANGE: 1,
    ObservableType.ANGULAR_POSITION: 2,
    ObservableType.POSITION: 3,
    ObservableType.VELOCITY: 3,
    ObservableType.EULER_ANGLE_313: 3,
}
"""``dict``: number of scalar components in a single sample of each observable type."""


def getObservableSize(observable_type: ObservableType | str) -> int:
    """Return the number of scalar components of a single `observable_type` sample.

    Raises:
        ValueError: if `observable_type` is not a known :class:`.ObservableType`.
    """
    return OBSERVABLE_SIZES[ObservableType(observable_type)]


class LinkEndType(str, Enum):
    """Defines valid labels for the role of a participant in an observation link."""

    TRANSMITTER: str = "transmitter"
    REFLECTOR: str = "reflector"
    RETRANSMITTER: str = "retransmitter"
    RECEIVER: str = "receiver"
    OBSERVED_BODY: str = "observed_body"


LinkEnds = tuple[tuple[LinkEndType, str], ...]
"""Ordered, hashable set of ``(role, body or station name)`` pairs describing one observation link."""


def makeLinkEnds(link_ends: Mapping[LinkEndType | str, str]) -> LinkEnds:
    """Build a hashable :data:`.LinkEnds` from a role to participant mapping.

    The mapping's iteration order is kept, since it participates in the canonical ordering of
    observation records.
    """
    return tuple((LinkEndType(role), str(name)) for role, name in link_ends.items())
