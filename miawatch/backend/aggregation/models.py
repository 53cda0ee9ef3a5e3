"""
aggregation/models.py

Data models for the query aggregation layer.

HistogramBin        — one labelled bin of the confidence histogram
ConfidenceHistogram — 10 fixed-width bins over confidence 0–100 %
RealtimePoint       — one entry in the bounded realtime confidence series
QueryStats          — running per-query counters (no alert fields)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import NamedTuple

HISTOGRAM_BINS = 10


# ---------------------------------------------------------------------------
# Confidence histogram
# ---------------------------------------------------------------------------

class HistogramBin(NamedTuple):
    label: str
    """e.g. '30-40%'."""

    count: int


@dataclass
class ConfidenceHistogram:
    """
    Fixed-size array of counters indexed by bin.

    bin = floor(confidence * 10), clamped to [0, 9] so that a confidence of
    exactly 1.0 lands in the top bin. Never resized.
    """

    counts: list[int] = field(default_factory=lambda: [0] * HISTOGRAM_BINS)

    @staticmethod
    def bin_index(confidence: float) -> int:
        return min(max(math.floor(confidence * HISTOGRAM_BINS), 0), HISTOGRAM_BINS - 1)

    @staticmethod
    def label_for(index: int) -> str:
        width = 100 // HISTOGRAM_BINS
        return f"{index * width}-{(index + 1) * width}%"

    def add(self, confidence: float) -> int:
        """Count *confidence* and return the bin it landed in."""
        idx = self.bin_index(confidence)
        self.counts[idx] += 1
        return idx

    @property
    def total(self) -> int:
        return sum(self.counts)

    def bins(self) -> list[HistogramBin]:
        return [HistogramBin(self.label_for(i), c) for i, c in enumerate(self.counts)]

    def __repr__(self) -> str:
        return f"ConfidenceHistogram({self.counts})"


# ---------------------------------------------------------------------------
# Realtime series / running stats
# ---------------------------------------------------------------------------

class RealtimePoint(NamedTuple):
    sequence: int
    """1-based query number across the session."""

    confidence_pct: float
    """Confidence scaled to 0–100."""


@dataclass
class QueryStats:
    """Counters updated incrementally on every ingested query."""

    total_queries: int = 0
    total_users: int = 0
    avg_confidence: float = 0.0
    """Running mean of every confidence seen, in (0, 1)."""
