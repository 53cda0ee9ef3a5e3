"""
aggregation/tracker.py

StatsTracker — running aggregates over every ingested query.

Design:
  - avg_confidence is a running mean: avg' = (avg * (n - 1) + c) / n
  - Realtime series is a deque(maxlen=capacity); oldest point is evicted
  - Histogram is a fixed 10-bin counter array
  - Nothing here is recomputed from the raw query log

Thread safety: NOT thread-safe. DetectionEngine calls it under its lock.
"""

from __future__ import annotations

import logging
from collections import deque

from ..config import settings
from .models import ConfidenceHistogram, QueryStats, RealtimePoint

logger = logging.getLogger(__name__)


class StatsTracker:
    """
    Args:
        series_capacity: Max points kept in the realtime confidence series.
    """

    def __init__(self, series_capacity: int | None = None) -> None:
        self._capacity = (
            settings.REALTIME_SERIES_CAPACITY if series_capacity is None else series_capacity
        )
        self._reset()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(self, confidence: float, total_users: int) -> RealtimePoint:
        """Fold one query's confidence into every aggregate."""
        s = self.stats
        s.total_queries += 1
        s.total_users = total_users
        n = s.total_queries
        s.avg_confidence = (s.avg_confidence * (n - 1) + confidence) / n

        point = RealtimePoint(sequence=n, confidence_pct=confidence * 100)
        self.series.append(point)
        self.histogram.add(confidence)
        return point

    def reset(self) -> None:
        self._reset()
        logger.debug("StatsTracker reset")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self.stats = QueryStats()
        self.series: deque[RealtimePoint] = deque(maxlen=self._capacity)
        self.histogram = ConfidenceHistogram()
