"""Contains all classes and functions related to post-processing a batch estimation.

This includes collating multi-type, multi-link observations, ordering them in time, and building
the covariance history of the estimated parameters.
"""

from __future__ import annotations

# Local Imports
from .covariance_history import (
    calculateCovarianceHistoryFromEstimation,
    calculateCovarianceMatrixAsFunctionOfTime,
)
from .loader import loadEstimationFile
from .lookup import BinarySearchLookupScheme
from .observations import (
    ObservationCollection,
    ObservationRecord,
    getConcatenatedMeasurementVector,
    getConcatenatedTimeVector,
)
from .results import CovarianceHistory, EstimationInput, EstimationOutput

__all__ = [
    "BinarySearchLookupScheme",
    "CovarianceHistory",
    "EstimationInput",
    "EstimationOutput",
    "ObservationCollection",
    "ObservationRecord",
    "calculateCovarianceHistoryFromEstimation",
    "calculateCovarianceMatrixAsFunctionOfTime",
    "getConcatenatedMeasurementVector",
    "getConcatenatedTimeVector",
    "loadEstimationFile",
]
