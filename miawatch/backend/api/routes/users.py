"""
api/routes/users.py

GET /api/users/suspicious — top-N users by suspicion score
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ...session import MonitoringSession
from ..serializers import SuspiciousUserResponse

router = APIRouter(prefix="/users", tags=["users"])


def _get_session() -> MonitoringSession:
    from ..main import get_session
    return get_session()


@router.get("/suspicious", response_model=list[SuspiciousUserResponse])
async def top_suspicious_users(
    limit: Annotated[int, Query(ge=1, le=100)] = 5,
    session: MonitoringSession = Depends(_get_session),
) -> list[SuspiciousUserResponse]:
    return [
        SuspiciousUserResponse.from_ranking(r)
        for r in session.engine.get_top_suspicious_users(limit)
    ]
