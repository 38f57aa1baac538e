"""Configure importable things that aren't pytest fixtures."""

from __future__ import annotations

# Standard Library Imports
from pathlib import Path

# ODCOV Imports
from odcov.common.labels import LinkEndType

# Common file paths
FIXTURE_DATA_DIR = Path(__file__).parent / "datafiles"
ESTIMATION_FILES_PATH = Path("estimation")
TWO_STATION_ESTIMATION_FILE = ESTIMATION_FILES_PATH / "two_station_estimation.json"

TWO_STATION_EPOCHS: tuple[float, ...] = (60.0, 120.0, 180.0)
"""``tuple``: covariance epochs of :attr:`.TWO_STATION_ESTIMATION_FILE` for a 60 second step."""

STATION_LINK = ((LinkEndType.TRANSMITTER, "Station1"), (LinkEndType.RECEIVER, "Vehicle"))
"""``tuple``: link ends of a range observation from the first ground station."""

OTHER_STATION_LINK = ((LinkEndType.TRANSMITTER, "Station2"), (LinkEndType.RECEIVER, "Vehicle"))
"""``tuple``: link ends of a range observation from the second ground station."""
