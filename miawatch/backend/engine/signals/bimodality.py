"""
engine/signals/bimodality.py

Bimodal-confidence signal.

Probing members and non-members alternately pulls confidences towards
both ends of the range. A wide population standard deviation over the
window is used as the cheap proxy for that split.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ...models import QueryRecord
from ..models import SignalResult
from .base import BaseSignal

logger = logging.getLogger(__name__)


class BimodalitySignal(BaseSignal):
    name = "bimodality"
    points = 25
    order = 40
    enabled = True

    min_std: float = 0.15

    def evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        try:
            return self._evaluate(queries)
        except Exception as exc:
            logger.exception("BimodalitySignal.evaluate() raised: %s", exc)
            return self.not_triggered("internal error in bimodality signal")

    def _evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        if not queries:
            return self.not_triggered("empty window")

        confidences = np.array([q.confidence for q in queries])
        std = float(np.std(confidences))

        if std <= self.min_std:
            return self.not_triggered(f"std {std:.3f} within limit")

        return SignalResult(
            triggered=True,
            points=self.points,
            evidence={
                "std": round(std, 4),
                "mean": round(float(np.mean(confidences)), 4),
            },
            description=f"Bimodal pattern: σ={std:.3f}",
        )
