"""
engine/signals/base.py

Abstract base class that all behavioural signals must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models import QueryRecord
from ..models import SignalResult


class BaseSignal(ABC):
    """
    Contract that every pattern signal must satisfy.

    Class-level attributes:
        name    — unique snake_case identifier used as the evidence key
        points  — score contribution when the signal fires
        order   — evaluation position; triggers are reported in this order
        enabled — False for stubs not yet implemented

    The evaluate() method MUST:
        - Never raise an exception (catch internally, return non-triggered result)
        - Treat degenerate windows (zero span, zero variance) arithmetically
        - Return only JSON-serializable types in evidence
    """

    name: str = ""
    points: int = 0
    order: int = 100
    enabled: bool = True

    @abstractmethod
    def evaluate(self, queries: Sequence[QueryRecord]) -> SignalResult:
        """
        Evaluate a user's recent query window (oldest first).

        Must never raise — catch all exceptions internally.
        """
        ...

    def not_triggered(self, description: str) -> SignalResult:
        return SignalResult(triggered=False, points=0, evidence={}, description=description)

    def __repr__(self) -> str:
        return f"<Signal:{self.name} points={self.points} enabled={self.enabled}>"
