"""
engine/models.py

Data models for the detection engine.

AlertSeverity  — per-alert level (WARNING / CRITICAL)
ThreatLevel    — 4-level global threat state derived from the latest alert
SignalResult   — returned by every signal's evaluate() method
AnalysisResult — combined suspicion score + triggers for one window
Alert          — emitted when a user's score crosses a threshold
AggregateStats — read-only snapshot of session-wide counters
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class AlertSeverity(str, Enum):
    WARNING  = "WARNING"
    CRITICAL = "CRITICAL"


class ThreatLevel(str, Enum):
    LOW      = "LOW"
    MEDIUM   = "MEDIUM"
    HIGH     = "HIGH"
    CRITICAL = "CRITICAL"


# ---------------------------------------------------------------------------
# SignalResult: lightweight return value from every signal.evaluate() call
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class SignalResult:
    """
    Return value of BaseSignal.evaluate().

    Signals must NEVER raise — catch internally and return a non-triggered result.
    Evidence must contain only JSON-serializable types (str, int, float, list, dict).
    """

    triggered: bool
    points: int
    evidence: dict[str, Any]
    description: str
    """Human-readable trigger text; only meaningful when triggered."""

    def __repr__(self) -> str:
        return (
            f"SignalResult(triggered={self.triggered} "
            f"points={self.points} desc={self.description!r})"
        )


@dataclass(slots=True)
class AnalysisResult:
    """Outcome of PatternAnalyzer.analyze() for one user window."""

    score: int = 0
    """Sum of triggered signal points, capped at 100."""

    triggers: list[str] = field(default_factory=list)
    """One message per triggered signal, in evaluation order."""

    evidence: dict[str, Any] = field(default_factory=dict)
    """signal name → evidence dict, for triggered signals only."""


# ---------------------------------------------------------------------------
# Alert: emitted when a score crosses WARNING_SCORE / CRITICAL_SCORE
# ---------------------------------------------------------------------------

@dataclass
class Alert:
    """Threat alert recorded by the AlertManager."""

    alert_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    """Unique UUID4 identifier."""

    timestamp: float = field(default_factory=time.time)
    """Wall-clock time at alert creation."""

    user_id: str = ""

    severity: AlertSeverity = AlertSeverity.WARNING

    score: int = 0
    """Suspicion score that raised the alert, 0–100."""

    triggers: list[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"Alert({self.user_id!r} {self.severity.value} "
            f"score={self.score} triggers={len(self.triggers)})"
        )


# ---------------------------------------------------------------------------
# AggregateStats: snapshot handed to API / UI collaborators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AggregateStats:
    total_queries: int = 0
    total_users: int = 0
    total_alerts: int = 0
    threat_level: ThreatLevel = ThreatLevel.LOW
    avg_confidence: float = 0.0
