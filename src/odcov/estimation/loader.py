"""Read the products of an estimation run from a JSON estimation file.

The file is a single JSON object:

.. code-block:: json

    {
        "observations": [
            {
                "observable_type": "one_way_range",
                "link_ends": {"transmitter": "Station1", "receiver": "Vehicle"},
                "reference_link_end": "receiver",
                "times": [0.0, 60.0],
                "observations": [7.0e6, 7.1e6]
            }
        ],
        "inverse_apriori_covariance": [[1.0, 0.0], [0.0, 1.0]],
        "normalized_information_matrix": [[0.5, 0.1], [0.4, 0.2]],
        "normalization_factors": [1.0, 1.0],
        "weights_diagonal": [1.0, 1.0],
        "parameter_estimate": [0.0, 0.0]
    }

The order of the ``observations`` list is the canonical type-and-link order of the information
matrix rows. ``parameter_estimate`` is optional.
"""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Local Imports
from ..common.labels import makeLinkEnds
from ..common.logger import odcovLogError
from ..common.utilities import loadJSONFile
from .observations import ObservationCollection, ObservationRecord
from .results import EstimationInput, EstimationOutput

# Type Checking Imports
if TYPE_CHECKING:
    # Standard Library Imports
    from pathlib import Path
    from typing import Any, Final


REQUIRED_FIELDS: Final[tuple[str, ...]] = (
    "observations",
    "inverse_apriori_covariance",
    "normalized_information_matrix",
    "normalization_factors",
    "weights_diagonal",
)
"""``tuple``: top-level keys every estimation file must define."""

REQUIRED_RECORD_FIELDS: Final[tuple[str, ...]] = ("observable_type", "link_ends", "times", "observations")
"""``tuple``: keys every observation record must define."""


def _checkRequired(config_label: str, raw: dict[str, Any], required: tuple[str, ...]) -> None:
    for key in required:
        if key not in raw:
            odcovLogError(f"Missing required {key!r} in {config_label!r}")
            raise KeyError(key)


def parseObservationRecord(raw_record: dict[str, Any]) -> ObservationRecord:
    """Build an :class:`.ObservationRecord` from its JSON representation."""
    _checkRequired("observations", raw_record, REQUIRED_RECORD_FIELDS)
    return ObservationRecord(
        observable_type=raw_record["observable_type"],
        link_ends=makeLinkEnds(raw_record["link_ends"]),
        observations=raw_record["observations"],
        times=raw_record["times"],
        reference_link_end=raw_record.get("reference_link_end", "receiver"),
    )


def parseEstimationDict(raw: dict[str, Any]) -> tuple[EstimationInput, EstimationOutput]:
    """Build the estimation containers from an already-decoded estimation file.

    Raises:
        KeyError: if a required field is missing.

    Returns:
        ``tuple``: the :class:`.EstimationInput` and :class:`.EstimationOutput` described by `raw`.
    """
    _checkRequired("estimation", raw, REQUIRED_FIELDS)
    observations = ObservationCollection([parseObservationRecord(record) for record in raw["observations"]])

    estimation_input = EstimationInput(
        observations=observations,
        inverse_apriori_covariance=raw["inverse_apriori_covariance"],
    )
    estimation_output = EstimationOutput(
        normalized_information_matrix=raw["normalized_information_matrix"],
        normalization_factors=raw["normalization_factors"],
        weights_diagonal=raw["weights_diagonal"],
        parameter_estimate=raw.get("parameter_estimate"),
    )
    return estimation_input, estimation_output


def loadEstimationFile(path: str | Path) -> tuple[EstimationInput, EstimationOutput]:
    """Load the estimation containers from the JSON estimation file at `path`."""
    return parseEstimationDict(loadJSONFile(path))
