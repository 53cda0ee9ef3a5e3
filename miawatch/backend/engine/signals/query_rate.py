"""
engine/signals/query_rate.py

Query-rate signal.

Rate is measured over the wall-clock span of the window, not the number
of samples:  rate = len(window) / span_seconds * 60  (queries per minute).

A window whose queries all share one timestamp has zero span; its rate is
treated as unbounded, which always satisfies the threshold.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from ...models import QueryRecord
from ..models import SignalResult
from .base import BaseSignal

logger = logging.getLogger(__name__)


class QueryRateSignal(BaseSignal):
    name = "query_rate"
    points = 35
    order = 20
    enabled = True

    max_queries_per_minute: float = 30.0

    def evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        try:
            return self._evaluate(queries)
        except Exception as exc:
            logger.exception("QueryRateSignal.evaluate() raised: %s", exc)
            return self.not_triggered("internal error in query_rate signal")

    def _evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        if not queries:
            return self.not_triggered("empty window")

        span_seconds = (queries[-1].timestamp_ms - queries[0].timestamp_ms) / 1000
        rate = self.rate_per_minute(len(queries), span_seconds)

        if rate <= self.max_queries_per_minute:
            return self.not_triggered(f"rate {rate:.1f} q/min within limit")

        return SignalResult(
            triggered=True,
            points=self.points,
            evidence={
                "queries_per_minute": rate if math.isfinite(rate) else None,
                "span_seconds": round(span_seconds, 3),
                "window_queries": len(queries),
            },
            description=f"High rate: {rate:.1f} q/min",
        )

    @staticmethod
    def rate_per_minute(count: int, span_seconds: float) -> float:
        if span_seconds <= 0:
            return math.inf
        return count / span_seconds * 60
