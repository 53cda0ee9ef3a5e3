"""
engine/analyzer.py

PatternAnalyzer — turns one user's recent query window into a suspicion
score (0–100) and a list of human-readable triggers.

Signals are discovered from engine/signals/ at construction time and run
in ascending `order`. Each triggered signal adds its points; the total is
capped at 100. Windows shorter than MIN_QUERIES_FOR_ANALYSIS score 0.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
import time
from typing import Sequence

from ..config import settings
from ..models import QueryRecord
from .models import AnalysisResult, SignalResult
from .signals.base import BaseSignal

logger = logging.getLogger(__name__)

MAX_SCORE = 100
_SIGNAL_TIMEOUT_MS = 50.0


class PatternAnalyzer:
    def __init__(
        self,
        signals: Sequence[BaseSignal] | None = None,
        min_queries: int | None = None,
    ) -> None:
        self.min_queries = (
            settings.MIN_QUERIES_FOR_ANALYSIS if min_queries is None else min_queries
        )
        loaded = list(signals) if signals is not None else self._load_signals()
        self.signals: list[BaseSignal] = sorted(loaded, key=lambda s: s.order)
        logger.info(
            "PatternAnalyzer loaded %d signal(s): %s | min_queries=%d",
            len(self.signals),
            [s.name for s in self.signals],
            self.min_queries,
        )

    def analyze(self, recent_queries: Sequence[QueryRecord]) -> AnalysisResult:
        if len(recent_queries) < self.min_queries:
            return AnalysisResult()

        score = 0
        triggers: list[str] = []
        evidence: dict = {}

        for signal in self.signals:
            result = self._safe_evaluate(signal, recent_queries)
            if not result.triggered:
                continue
            score += result.points
            triggers.append(result.description)
            evidence[signal.name] = result.evidence

        return AnalysisResult(score=min(score, MAX_SCORE), triggers=triggers, evidence=evidence)

    def _safe_evaluate(
        self, signal: BaseSignal, queries: Sequence[QueryRecord]
    ) -> SignalResult:
        t0 = time.monotonic()
        try:
            result = signal.evaluate(queries)
        except Exception as exc:
            logger.exception("Signal %r raised an unhandled exception: %s", signal.name, exc)
            result = SignalResult(
                triggered=False, points=0, evidence={},
                description=f"signal error: {exc}",
            )
        elapsed_ms = (time.monotonic() - t0) * 1000
        if elapsed_ms > _SIGNAL_TIMEOUT_MS:
            logger.warning("Signal %r took %.1fms", signal.name, elapsed_ms)
        return result

    def _load_signals(self) -> list[BaseSignal]:
        import miawatch.backend.engine.signals as signals_pkg
        signals: list[BaseSignal] = []
        for _, module_name, _ in pkgutil.iter_modules(signals_pkg.__path__):
            if module_name == "base":
                continue
            try:
                module = importlib.import_module(
                    f"miawatch.backend.engine.signals.{module_name}"
                )
            except Exception as exc:
                logger.error("Failed to import signal module %r: %s", module_name, exc)
                continue
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, BaseSignal)
                    and obj is not BaseSignal
                    and obj.__module__ == module.__name__
                ):
                    try:
                        instance: BaseSignal = obj()
                        if instance.enabled:
                            signals.append(instance)
                    except Exception as exc:
                        logger.error("Failed to instantiate signal %r: %s", obj, exc)
        return signals
