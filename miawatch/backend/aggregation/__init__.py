"""
aggregation/__init__.py

Public API for the aggregation sub-package.
"""

from .models import (
    HISTOGRAM_BINS,
    ConfidenceHistogram,
    HistogramBin,
    QueryStats,
    RealtimePoint,
)
from .tracker import StatsTracker

__all__ = [
    "StatsTracker",
    "ConfidenceHistogram",
    "HistogramBin",
    "QueryStats",
    "RealtimePoint",
    "HISTOGRAM_BINS",
]
