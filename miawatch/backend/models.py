"""
backend/models.py

Shared dataclasses passed between the classifier, the detection engine,
the simulator and the API layer. Defining them in one place keeps the
contracts between those stages stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Sequence


def input_hash(features: Sequence[float]) -> str:
    """
    Order-sensitive fingerprint of a feature vector.

    Position-weighted sum (1-based) rendered to two decimals. Not
    cryptographic: it only groups replays of the same input, and distinct
    vectors may collide.
    """
    return f"{sum(v * (i + 1) for i, v in enumerate(features)):.2f}"


# ---------------------------------------------------------------------------
# Stage 1: one ingested inference query
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class QueryRecord:
    """A single query against the classifier. Never mutated after creation."""

    sequence_id: int
    """0-based position in the engine's global query log."""

    user_id: str

    features: tuple[float, ...]

    input_hash: str
    """See input_hash()."""

    confidence: float
    """Classifier output in (0, 1)."""

    timestamp_ms: int
    """Wall-clock arrival time in epoch milliseconds."""


# ---------------------------------------------------------------------------
# Stage 2: per-user behaviour
# ---------------------------------------------------------------------------

@dataclass
class UserActivity:
    """Rolling history and latest suspicion score for one user."""

    user_id: str
    query_history: list[QueryRecord] = field(default_factory=list)
    total_queries: int = 0
    suspicious_score: int = 0
    """Score from the most recent analysis, 0–100."""

    def __repr__(self) -> str:
        return (
            f"UserActivity({self.user_id!r} "
            f"queries={self.total_queries} score={self.suspicious_score})"
        )


class UserRanking(NamedTuple):
    """Read-only row returned by DetectionEngine.get_top_suspicious_users()."""

    user_id: str
    score: int
    total_queries: int


# Re-exported so callers can import every shared type from backend.models.
from .classifier.models import Dataset, Sample  # noqa: E402,F401
