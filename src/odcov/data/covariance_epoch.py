"""Defines the :class:`.CovarianceEpoch` data table class."""

from __future__ import annotations

# Standard Library Imports
from typing import TYPE_CHECKING

# Third Party Imports
from sqlalchemy import Column, Float, Integer, String, UniqueConstraint

# Local Imports
from ..common.utilities import ndArrayToString, stringToNdarray
from ..estimation.results import getFormalErrors
from .table_base import Base, _DataMixin

if TYPE_CHECKING:
    # Third Party Imports
    from numpy import ndarray


class CovarianceEpoch(Base, _DataMixin):
    """Single epoch of a covariance history, as produced by one post-processing run."""

    __tablename__ = "covariance_epochs"
    __table_args__ = (UniqueConstraint("run_label", "time", name="uq_run_label_time"),)

    id = Column(Integer, primary_key=True)
    """``int``: The id number of the covariance epoch."""

    run_label = Column(String, index=True, nullable=False)
    """``str``: label grouping all epochs of one covariance history."""

    time = Column(Float, nullable=False)
    """``float``: timestamp of the last observation included in this covariance."""

    num_observations = Column(Integer, nullable=True)
    """``int``: number of scalar observations included in this covariance."""

    num_parameters = Column(Integer, nullable=False)
    """``int``: dimension of the covariance matrix."""

    _covariance = Column(String, nullable=False)
    """``str``: JSON-serialized unnormalized covariance matrix."""

    _formal_errors = Column(String, nullable=False)
    """``str``: JSON-serialized formal errors, kept alongside for cheap reporting queries."""

    MUTABLE_COLUMN_NAMES = (
        "run_label",
        "time",
        "num_observations",
        "num_parameters",
        "_covariance",
        "_formal_errors",
    )

    @classmethod
    def fromCovariance(
        cls,
        run_label: str,
        time: float,
        covariance: ndarray,
        num_observations: int | None = None,
    ) -> CovarianceEpoch:
        """Construct a :class:`.CovarianceEpoch` from an array-valued covariance.

        Args:
            run_label (``str``): label of the covariance history this epoch belongs to.
            time (``float``): epoch timestamp.
            covariance (``ndarray``): :math:`M\\times M` unnormalized covariance.
            num_observations (``int``, optional): number of scalar observations included.

        Returns:
            :class:`.CovarianceEpoch`: data object ready to be inserted.
        """
        return cls(
            run_label=run_label,
            time=float(time),
            num_observations=num_observations,
            num_parameters=covariance.shape[0],
            _covariance=ndArrayToString(covariance),
            _formal_errors=ndArrayToString(getFormalErrors(covariance)),
        )

    @property
    def covariance(self) -> ndarray:
        """``ndarray``: unnormalized covariance matrix."""
        return stringToNdarray(self._covariance)

    @property
    def formal_errors(self) -> ndarray:
        """``ndarray``: formal errors of the estimated parameters."""
        return stringToNdarray(self._formal_errors)
