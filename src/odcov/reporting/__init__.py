"""Figures summarizing covariance histories."""

from __future__ import annotations

# Local Imports
from .plots import plotFormalErrorHistory

__all__ = ["plotFormalErrorHistory"]
