"""
backend/metrics.py

Process-wide counters for the detection core, exposed on /health.

Counters are declared once in COUNTERS (name → meaning); Metrics builds
one thread-safe Counter per entry, so adding a counter is a one-line change.

Usage:
    from miawatch.backend.metrics import METRICS
    METRICS.queries_ingested.inc()
    METRICS.as_dict()   # {"queries_ingested": 1, ...}
"""

import threading

COUNTERS: dict[str, str] = {
    "queries_ingested":    "Queries accepted by DetectionEngine.ingest()",
    "queries_rejected":    "Queries refused before any state changed",
    "alerts_raised":       "WARNING + CRITICAL alerts recorded",
    "trainings_completed": "Training tasks whose classifier was installed",
    "simulator_ticks":     "Simulator intervals that ran to completion",
}


class Counter:
    """A monotonically increasing integer guarded by its own lock."""

    __slots__ = ("name", "_value", "_lock")

    def __init__(self, name: str) -> None:
        self.name = name
        self._value = 0
        self._lock = threading.Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    def reset(self) -> None:
        with self._lock:
            self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:  # pragma: no cover
        return f"Counter({self.name}={self._value})"


class Metrics:
    """Attribute access to every counter in COUNTERS."""

    queries_ingested: Counter
    queries_rejected: Counter
    alerts_raised: Counter
    trainings_completed: Counter
    simulator_ticks: Counter

    def __init__(self) -> None:
        self._counters = {name: Counter(name) for name in COUNTERS}
        for name, counter in self._counters.items():
            setattr(self, name, counter)

    def as_dict(self) -> dict[str, int]:
        """Current values keyed by counter name, in declaration order."""
        return {name: c.value for name, c in self._counters.items()}

    def reset_all(self) -> None:
        """Zero every counter (tests reset between cases)."""
        for counter in self._counters.values():
            counter.reset()


METRICS = Metrics()
