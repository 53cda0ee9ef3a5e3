"""
api/serializers.py

Pydantic request / response models for the REST layer.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..aggregation.models import ConfidenceHistogram, RealtimePoint
from ..engine.models import AggregateStats, Alert
from ..models import QueryRecord, UserRanking


class QueryRequest(BaseModel):
    user_id: str = Field(min_length=1)
    features: list[float]


class QueryResponse(BaseModel):
    sequence_id: int
    user_id: str
    features: list[float]
    input_hash: str
    confidence: float
    timestamp_ms: int
    suspicious_score: int

    @classmethod
    def from_record(cls, q: QueryRecord, suspicious_score: int = 0) -> "QueryResponse":
        return cls(
            sequence_id=q.sequence_id,
            user_id=q.user_id,
            features=list(q.features),
            input_hash=q.input_hash,
            confidence=q.confidence,
            timestamp_ms=q.timestamp_ms,
            suspicious_score=suspicious_score,
        )


class AlertResponse(BaseModel):
    alert_id: str
    timestamp: float
    user_id: str
    severity: str
    score: int
    triggers: list[str]

    model_config = {"from_attributes": True}

    @classmethod
    def from_alert(cls, a: Alert) -> "AlertResponse":
        return cls(
            alert_id=a.alert_id,
            timestamp=a.timestamp,
            user_id=a.user_id,
            severity=a.severity.value,
            score=a.score,
            triggers=list(a.triggers),
        )


class StatsResponse(BaseModel):
    total_queries: int
    total_users: int
    total_alerts: int
    threat_level: str
    avg_confidence: float

    @classmethod
    def from_stats(cls, s: AggregateStats) -> "StatsResponse":
        return cls(
            total_queries=s.total_queries,
            total_users=s.total_users,
            total_alerts=s.total_alerts,
            threat_level=s.threat_level.value,
            avg_confidence=s.avg_confidence,
        )


class HistogramBinResponse(BaseModel):
    range: str
    count: int


class HistogramResponse(BaseModel):
    bins: list[HistogramBinResponse]
    total: int

    @classmethod
    def from_histogram(cls, h: ConfidenceHistogram) -> "HistogramResponse":
        return cls(
            bins=[HistogramBinResponse(range=b.label, count=b.count) for b in h.bins()],
            total=h.total,
        )


class RealtimePointResponse(BaseModel):
    query: int
    confidence: float

    @classmethod
    def from_point(cls, p: RealtimePoint) -> "RealtimePointResponse":
        return cls(query=p.sequence, confidence=p.confidence_pct)


class SuspiciousUserResponse(BaseModel):
    user_id: str
    score: int
    total_queries: int

    @classmethod
    def from_ranking(cls, r: UserRanking) -> "SuspiciousUserResponse":
        return cls(user_id=r.user_id, score=r.score, total_queries=r.total_queries)


class SessionStatusResponse(BaseModel):
    has_dataset: bool
    samples: int
    is_training: bool
    model_trained: bool
    is_monitoring: bool


class DemoDatasetRequest(BaseModel):
    n_samples: int | None = Field(default=None, ge=1, le=100_000)
    """Defaults to DEMO_DATASET_SIZE."""


class DatasetRequest(BaseModel):
    rows: list[list[float]]
    """Each row is the feature values followed by a 0/1 label."""

    headers: list[str] | None = None


class DatasetInfoResponse(BaseModel):
    samples: int
    features: int
    headers: list[str]


class TrainingResponse(BaseModel):
    status: str
    """'started' or 'completed'."""

    train_samples: int | None = None
    test_samples: int | None = None
    bias: float | None = None
