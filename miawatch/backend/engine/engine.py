"""
engine/engine.py

DetectionEngine — per-query ingestion and all mutable session state.

ingest() is the only mutating entry point:
  1. classifier.predict()            (raises before anything is touched)
  2. build QueryRecord, append to the global log (last QUERY_LOG_CAPACITY
     records) and the user's history (last USER_HISTORY_LIMIT records)
  3. PatternAnalyzer over the user's last ANALYSIS_WINDOW_SIZE queries
  4. at most one alert: CRITICAL_SCORE → CRITICAL, WARNING_SCORE → WARNING
  5. running stats, realtime series, confidence histogram

Every mutation happens under a single lock, so concurrent callers
(simulator task, API handlers, worker threads) never interleave.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Sequence

from ..aggregation.models import ConfidenceHistogram, RealtimePoint
from ..aggregation.tracker import StatsTracker
from ..classifier.models import Classifier
from ..config import settings
from ..errors import ModelNotTrainedError
from ..metrics import METRICS
from ..models import QueryRecord, UserActivity, UserRanking, input_hash
from .alerts import AlertManager
from .analyzer import PatternAnalyzer
from .models import AggregateStats, Alert, AlertSeverity

logger = logging.getLogger(__name__)


class DetectionEngine:
    def __init__(
        self,
        classifier: Classifier | None = None,
        analyzer: PatternAnalyzer | None = None,
    ) -> None:
        self._classifier = classifier
        self.analyzer = analyzer or PatternAnalyzer()

        self._window_size: int = settings.ANALYSIS_WINDOW_SIZE
        self._history_limit: int = max(settings.USER_HISTORY_LIMIT, self._window_size)
        self._warning_score: int = settings.WARNING_SCORE
        self._critical_score: int = settings.CRITICAL_SCORE

        self._lock = threading.Lock()
        self._next_sequence = 0
        self._query_log: deque[QueryRecord] = deque(maxlen=settings.QUERY_LOG_CAPACITY)
        self._users: dict[str, UserActivity] = {}
        self._alerts = AlertManager()
        self._tracker = StatsTracker()

        logger.info(
            "DetectionEngine ready — window=%d warning>=%d critical>=%d classifier=%r",
            self._window_size,
            self._warning_score,
            self._critical_score,
            classifier,
        )

    # ------------------------------------------------------------------
    # Classifier ownership
    # ------------------------------------------------------------------

    @property
    def classifier(self) -> Classifier | None:
        return self._classifier

    def install_classifier(self, classifier: Classifier) -> None:
        """Swap in a newly trained model; query history is kept."""
        with self._lock:
            self._classifier = classifier
        logger.info("Classifier installed: %r", classifier)

    def clear_classifier(self) -> None:
        """Drop the current model so nothing is scored until a new one is installed."""
        with self._lock:
            self._classifier = None
        logger.info("Classifier cleared")

    def predict(self, features: Sequence[float]) -> float:
        classifier = self._classifier
        if classifier is None:
            raise ModelNotTrainedError("no classifier installed — train a model first")
        return classifier.predict(features)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, user_id: str, features: Sequence[float]) -> QueryRecord:
        with self._lock:
            try:
                confidence = self.predict(features)
            except Exception:
                METRICS.queries_rejected.inc()
                raise

            query = QueryRecord(
                sequence_id=self._next_sequence,
                user_id=user_id,
                features=tuple(float(v) for v in features),
                input_hash=input_hash(features),
                confidence=confidence,
                timestamp_ms=int(time.time() * 1000),
            )
            self._next_sequence += 1
            self._query_log.append(query)

            user = self._users.get(user_id)
            if user is None:
                user = UserActivity(user_id=user_id)
                self._users[user_id] = user
            user.query_history.append(query)
            del user.query_history[:-self._history_limit]
            user.total_queries += 1

            window = user.query_history[-self._window_size:]
            analysis = self.analyzer.analyze(window)
            user.suspicious_score = analysis.score

            if analysis.score >= self._critical_score:
                self._raise_alert(user_id, AlertSeverity.CRITICAL, analysis.score, analysis.triggers)
            elif analysis.score >= self._warning_score:
                self._raise_alert(user_id, AlertSeverity.WARNING, analysis.score, analysis.triggers)

            self._tracker.record(confidence, total_users=len(self._users))
            METRICS.queries_ingested.inc()

        logger.debug(
            "Query #%d user=%r conf=%.3f hash=%s score=%d",
            query.sequence_id,
            user_id,
            confidence,
            query.input_hash,
            analysis.score,
        )
        return query

    def _raise_alert(
        self, user_id: str, severity: AlertSeverity, score: int, triggers: list[str]
    ) -> Alert:
        alert = self._alerts.record_alert(user_id, severity, score, triggers)
        METRICS.alerts_raised.inc()
        return alert

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear all session state, classifier included, in one step."""
        with self._lock:
            self._classifier = None
            self._next_sequence = 0
            self._query_log.clear()
            self._users = {}
            self._alerts.reset()
            self._tracker.reset()
        logger.info("DetectionEngine reset")

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def stats(self) -> AggregateStats:
        with self._lock:
            q = self._tracker.stats
            return AggregateStats(
                total_queries=q.total_queries,
                total_users=q.total_users,
                total_alerts=self._alerts.total_alerts,
                threat_level=self._alerts.threat_level,
                avg_confidence=q.avg_confidence,
            )

    @property
    def alerts(self) -> list[Alert]:
        """Most recent alerts, newest first."""
        with self._lock:
            return self._alerts.alerts

    @property
    def histogram(self) -> ConfidenceHistogram:
        with self._lock:
            return ConfidenceHistogram(counts=list(self._tracker.histogram.counts))

    @property
    def realtime_series(self) -> list[RealtimePoint]:
        with self._lock:
            return list(self._tracker.series)

    @property
    def query_log(self) -> list[QueryRecord]:
        with self._lock:
            return list(self._query_log)

    def get_user(self, user_id: str) -> UserActivity | None:
        with self._lock:
            return self._users.get(user_id)

    def get_top_suspicious_users(self, limit: int = 5) -> list[UserRanking]:
        """Users by descending score; ties keep first-seen order."""
        with self._lock:
            ranked = sorted(
                self._users.values(), key=lambda u: u.suspicious_score, reverse=True
            )
            return [
                UserRanking(u.user_id, u.suspicious_score, u.total_queries)
                for u in ranked[:limit]
            ]
