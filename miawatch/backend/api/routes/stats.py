"""
api/routes/stats.py

GET /api/stats           — aggregate statistics + process counters
GET /api/stats/histogram — confidence histogram (10 bins)
GET /api/stats/realtime  — bounded realtime confidence series
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...session import MonitoringSession
from ..serializers import HistogramResponse, RealtimePointResponse, StatsResponse

router = APIRouter(prefix="/stats", tags=["stats"])


def _get_session() -> MonitoringSession:
    from ..main import get_session
    return get_session()


@router.get("", response_model=StatsResponse)
async def get_stats(
    session: MonitoringSession = Depends(_get_session),
) -> StatsResponse:
    return StatsResponse.from_stats(session.engine.stats)


@router.get("/histogram", response_model=HistogramResponse)
async def get_histogram(
    session: MonitoringSession = Depends(_get_session),
) -> HistogramResponse:
    return HistogramResponse.from_histogram(session.engine.histogram)


@router.get("/realtime", response_model=list[RealtimePointResponse])
async def get_realtime(
    session: MonitoringSession = Depends(_get_session),
) -> list[RealtimePointResponse]:
    """Most recent confidences, oldest first."""
    return [RealtimePointResponse.from_point(p) for p in session.engine.realtime_series]
