"""
engine/signals/targeting.py

Focused-targeting signal.

An extraction attempt that keeps probing the region where the model is
confident shows up as most of the window sitting above a high-confidence
cut-off.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ...models import QueryRecord
from ..models import SignalResult
from .base import BaseSignal

logger = logging.getLogger(__name__)


class TargetingSignal(BaseSignal):
    name = "targeting"
    points = 20
    order = 30
    enabled = True

    high_confidence: float = 0.75
    max_high_confidence_ratio: float = 0.70

    def evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        try:
            return self._evaluate(queries)
        except Exception as exc:
            logger.exception("TargetingSignal.evaluate() raised: %s", exc)
            return self.not_triggered("internal error in targeting signal")

    def _evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        if not queries:
            return self.not_triggered("empty window")

        high = sum(1 for q in queries if q.confidence > self.high_confidence)
        ratio = high / len(queries)

        if ratio <= self.max_high_confidence_ratio:
            return self.not_triggered("confidence spread looks normal")

        return SignalResult(
            triggered=True,
            points=self.points,
            evidence={
                "high_confidence_ratio": round(ratio, 4),
                "high_confidence_queries": high,
            },
            description=f"Focused targeting: {ratio * 100:.0f}%",
        )
