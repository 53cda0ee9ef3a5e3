"""
api/routes/alerts.py

GET /api/alerts        — current alert log, newest first
GET /api/alerts/{id}   — single alert lookup
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ...session import MonitoringSession
from ..serializers import AlertResponse

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _get_session() -> MonitoringSession:
    from ..main import get_session
    return get_session()


@router.get("", response_model=list[AlertResponse])
async def list_alerts(
    severity: Annotated[str | None, Query()] = None,
    user_id:  Annotated[str | None, Query()] = None,
    session: MonitoringSession = Depends(_get_session),
) -> list[AlertResponse]:
    """Return the bounded alert log, newest first, with optional filters."""
    alerts = session.engine.alerts
    if severity is not None:
        alerts = [a for a in alerts if a.severity.value == severity.upper()]
    if user_id is not None:
        alerts = [a for a in alerts if a.user_id == user_id]
    return [AlertResponse.from_alert(a) for a in alerts]


@router.get("/{alert_id}", response_model=AlertResponse)
async def get_alert(
    alert_id: str,
    session: MonitoringSession = Depends(_get_session),
) -> AlertResponse:
    for a in session.engine.alerts:
        if a.alert_id == alert_id:
            return AlertResponse.from_alert(a)
    raise HTTPException(status_code=404, detail=f"Alert {alert_id!r} not found")
