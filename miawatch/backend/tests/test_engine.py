"""
tests/test_engine.py

Tests for the DetectionEngine — ingestion, alert thresholds, bounded
aggregates, rejection without mutation, reset and the read accessors.
"""

from __future__ import annotations

import pytest

from miawatch.backend.classifier.models import Classifier
from miawatch.backend.config import settings
from miawatch.backend.engine.analyzer import PatternAnalyzer
from miawatch.backend.engine.engine import DetectionEngine
from miawatch.backend.engine.models import AlertSeverity, ThreatLevel
from miawatch.backend.errors import (
    DimensionMismatchError,
    InvalidFeaturesError,
    ModelNotTrainedError,
)
from miawatch.backend.metrics import METRICS


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_metrics():
    METRICS.reset_all()
    yield
    METRICS.reset_all()


@pytest.fixture
def neutral_engine() -> DetectionEngine:
    """Every prediction is exactly 0.5."""
    return DetectionEngine(classifier=Classifier(weights=(0.0, 0.0), bias=0.0))


@pytest.fixture
def confident_engine() -> DetectionEngine:
    """predict([1.0]) ≈ 0.99995."""
    return DetectionEngine(classifier=Classifier(weights=(10.0,), bias=0.0))


def send_repeats(engine: DetectionEngine, user_id: str, features, n: int) -> None:
    for _ in range(n):
        engine.ingest(user_id, features)


# ---------------------------------------------------------------------------
# Ingestion and scoring
# ---------------------------------------------------------------------------

class TestIngest:

    def test_returns_record(self, neutral_engine):
        q = neutral_engine.ingest("user_1", [1.0, 2.0])
        assert q.sequence_id == 0
        assert q.user_id == "user_1"
        assert q.features == (1.0, 2.0)
        assert q.input_hash == "5.00"
        assert q.confidence == 0.5
        assert q.timestamp_ms > 0

    def test_sequence_ids_are_global(self, neutral_engine):
        a = neutral_engine.ingest("user_1", [1.0, 2.0])
        b = neutral_engine.ingest("user_2", [1.0, 2.0])
        assert (a.sequence_id, b.sequence_id) == (0, 1)

    def test_user_history_tracked(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 3)
        user = neutral_engine.get_user("user_1")
        assert user.total_queries == 3
        assert len(user.query_history) == 3
        assert neutral_engine.get_user("nobody") is None

    def test_nine_identical_queries_raise_nothing(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 9)
        assert neutral_engine.get_user("user_1").suspicious_score == 0
        assert neutral_engine.alerts == []

    def test_ten_identical_fast_queries_raise_warning(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 10)

        user = neutral_engine.get_user("user_1")
        assert user.suspicious_score >= 65

        alerts = neutral_engine.alerts
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.severity == AlertSeverity.WARNING
        assert alert.user_id == "user_1"
        assert alert.triggers[0] == "Repeated queries: 10x"
        assert alert.triggers[1].startswith("High rate:")
        assert neutral_engine.stats.threat_level == ThreatLevel.HIGH

    def test_high_confidence_repeats_raise_critical(self, confident_engine):
        send_repeats(confident_engine, "user_7", [1.0], 10)
        alert = confident_engine.alerts[0]
        assert alert.severity == AlertSeverity.CRITICAL
        assert alert.score == 85
        assert confident_engine.stats.threat_level == ThreatLevel.CRITICAL

    def test_one_alert_per_qualifying_ingest(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 12)
        assert neutral_engine.stats.total_alerts == 3
        assert METRICS.alerts_raised.value == 3

    def test_window_limited_to_last_thirty(self):
        seen = []

        class RecordingAnalyzer(PatternAnalyzer):
            def analyze(self, recent_queries):
                seen.append(len(recent_queries))
                return super().analyze(recent_queries)

        engine = DetectionEngine(
            classifier=Classifier(weights=(0.0,)), analyzer=RecordingAnalyzer()
        )
        for i in range(35):
            engine.ingest("user_1", [float(i)])
        assert seen[-1] == 30
        assert max(seen) == 30

    def test_metrics_count_ingested(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 4)
        assert METRICS.queries_ingested.value == 4


# ---------------------------------------------------------------------------
# Rejection leaves state untouched
# ---------------------------------------------------------------------------

class TestRejection:

    def test_dimension_mismatch_mutates_nothing(self, neutral_engine):
        with pytest.raises(DimensionMismatchError):
            neutral_engine.ingest("user_1", [1.0, 2.0, 3.0])

        stats = neutral_engine.stats
        assert stats.total_queries == 0
        assert stats.total_users == 0
        assert neutral_engine.query_log == []
        assert neutral_engine.get_user("user_1") is None
        assert neutral_engine.histogram.total == 0
        assert neutral_engine.realtime_series == []
        assert METRICS.queries_rejected.value == 1

    def test_non_finite_feature_rejected(self, neutral_engine):
        with pytest.raises(InvalidFeaturesError):
            neutral_engine.ingest("user_1", [float("nan"), 1.0])
        assert neutral_engine.stats.total_queries == 0

    def test_no_classifier(self):
        engine = DetectionEngine()
        with pytest.raises(ModelNotTrainedError):
            engine.ingest("user_1", [1.0])
        with pytest.raises(ModelNotTrainedError):
            engine.predict([1.0])
        assert engine.query_log == []


# ---------------------------------------------------------------------------
# Bounded aggregates
# ---------------------------------------------------------------------------

class TestAggregates:

    def test_bounds_after_many_ingests(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 60)

        assert len(neutral_engine.alerts) == 10
        assert neutral_engine.stats.total_alerts == 51
        series = neutral_engine.realtime_series
        assert len(series) == 50
        assert series[0].sequence == 11
        assert series[-1].sequence == 60
        assert neutral_engine.histogram.total == 60

    def test_logs_keep_newest_records(self, monkeypatch):
        monkeypatch.setattr(settings, "QUERY_LOG_CAPACITY", 20)
        monkeypatch.setattr(settings, "USER_HISTORY_LIMIT", 32)
        engine = DetectionEngine(classifier=Classifier(weights=(0.0,)))
        for i in range(45):
            engine.ingest("user_1", [float(i)])

        log = engine.query_log
        assert len(log) == 20
        assert log[0].sequence_id == 25
        assert log[-1].sequence_id == 44

        user = engine.get_user("user_1")
        assert len(user.query_history) == 32
        assert user.query_history[0].sequence_id == 13
        assert user.total_queries == 45
        assert engine.stats.total_queries == 45
        assert engine.ingest("user_2", [1.0]).sequence_id == 45

    def test_history_never_shorter_than_window(self, monkeypatch):
        monkeypatch.setattr(settings, "USER_HISTORY_LIMIT", 5)
        engine = DetectionEngine(classifier=Classifier(weights=(0.0,)))
        for i in range(40):
            engine.ingest("user_1", [float(i)])
        assert len(engine.get_user("user_1").query_history) == 30

    def test_alerts_newest_first(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 12)
        alerts = neutral_engine.alerts
        assert alerts[0].timestamp >= alerts[-1].timestamp

    def test_histogram_bins(self, neutral_engine):
        neutral_engine.ingest("user_1", [1.0, 2.0])
        assert neutral_engine.histogram.counts[5] == 1

    def test_histogram_is_a_copy(self, neutral_engine):
        neutral_engine.ingest("user_1", [1.0, 2.0])
        neutral_engine.histogram.counts[5] = 99
        assert neutral_engine.histogram.counts[5] == 1

    def test_avg_confidence_is_arithmetic_mean(self):
        engine = DetectionEngine(classifier=Classifier(weights=(1.0,), bias=-0.5))
        for x in (-2.0, -1.0, 0.0, 0.5, 3.0, 7.0):
            engine.ingest("user_1", [x])
        confs = [q.confidence for q in engine.query_log]
        assert engine.stats.avg_confidence == pytest.approx(sum(confs) / len(confs))

    def test_total_users_counts_distinct_ids(self, neutral_engine):
        for uid in ("a", "b", "a", "c"):
            neutral_engine.ingest(uid, [0.0, 0.0])
        assert neutral_engine.stats.total_users == 3
        assert neutral_engine.stats.total_queries == 4


# ---------------------------------------------------------------------------
# Top suspicious users
# ---------------------------------------------------------------------------

class TestTopSuspiciousUsers:

    def test_ranked_by_score_ties_in_first_seen_order(self, neutral_engine):
        send_repeats(neutral_engine, "user_a", [1.0, 2.0], 10)
        neutral_engine.ingest("user_b", [3.0, 4.0])
        send_repeats(neutral_engine, "user_c", [1.0, 2.0], 10)

        ranked = neutral_engine.get_top_suspicious_users()
        assert [r.user_id for r in ranked] == ["user_a", "user_c", "user_b"]
        assert ranked[0].score == ranked[1].score
        assert ranked[2].score == 0
        assert ranked[0].total_queries == 10

    def test_limit(self, neutral_engine):
        for i in range(8):
            neutral_engine.ingest(f"user_{i}", [0.0, 0.0])
        assert len(neutral_engine.get_top_suspicious_users()) == 5
        assert len(neutral_engine.get_top_suspicious_users(limit=2)) == 2


# ---------------------------------------------------------------------------
# Classifier swap / reset
# ---------------------------------------------------------------------------

class TestResetAndInstall:

    def test_reset_clears_everything(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 12)
        neutral_engine.reset()

        stats = neutral_engine.stats
        assert stats.total_queries == 0
        assert stats.total_users == 0
        assert stats.total_alerts == 0
        assert stats.avg_confidence == 0.0
        assert stats.threat_level == ThreatLevel.LOW
        assert neutral_engine.alerts == []
        assert neutral_engine.histogram.counts == [0] * 10
        assert neutral_engine.realtime_series == []
        assert neutral_engine.get_top_suspicious_users() == []
        assert neutral_engine.classifier is None

    def test_reset_restarts_sequence_ids(self, neutral_engine):
        send_repeats(neutral_engine, "user_1", [1.0, 2.0], 3)
        neutral_engine.reset()
        neutral_engine.install_classifier(Classifier(weights=(0.0, 0.0)))
        assert neutral_engine.ingest("user_1", [1.0, 2.0]).sequence_id == 0

    def test_clear_classifier_keeps_history(self, neutral_engine):
        neutral_engine.ingest("user_1", [1.0, 2.0])
        neutral_engine.clear_classifier()
        with pytest.raises(ModelNotTrainedError):
            neutral_engine.ingest("user_1", [1.0, 2.0])
        assert neutral_engine.stats.total_queries == 1
        assert neutral_engine.get_user("user_1").total_queries == 1

    def test_install_classifier_keeps_history(self, neutral_engine):
        neutral_engine.ingest("user_1", [1.0, 2.0])
        neutral_engine.install_classifier(Classifier(weights=(10.0, 10.0)))
        q = neutral_engine.ingest("user_1", [1.0, 2.0])
        assert q.confidence > 0.99
        assert neutral_engine.stats.total_queries == 2
