"""
engine/signals/repeat_query.py

Repeat-query signal.

Membership-inference probing replays the same record many times to read
off a stable confidence. Queries are grouped by input_hash; the largest
group decides.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from ...models import QueryRecord
from ..models import SignalResult
from .base import BaseSignal

logger = logging.getLogger(__name__)


class RepeatQuerySignal(BaseSignal):
    name = "repeat_query"
    points = 30
    order = 10
    enabled = True

    min_repeats: int = 5

    def evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        try:
            return self._evaluate(queries)
        except Exception as exc:
            logger.exception("RepeatQuerySignal.evaluate() raised: %s", exc)
            return self.not_triggered("internal error in repeat_query signal")

    def _evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        if not queries:
            return self.not_triggered("empty window")

        counts = Counter(q.input_hash for q in queries)
        top_hash, max_repeats = counts.most_common(1)[0]

        if max_repeats < self.min_repeats:
            return self.not_triggered("no repeated inputs")

        return SignalResult(
            triggered=True,
            points=self.points,
            evidence={
                "max_repeats": max_repeats,
                "input_hash": top_hash,
                "distinct_inputs": len(counts),
            },
            description=f"Repeated queries: {max_repeats}x",
        )
