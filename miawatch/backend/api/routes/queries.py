"""
api/routes/queries.py

POST /api/queries — ingest one inference query for a user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...errors import DimensionMismatchError, InvalidFeaturesError, ModelNotTrainedError
from ...session import MonitoringSession
from ..serializers import QueryRequest, QueryResponse

router = APIRouter(prefix="/queries", tags=["queries"])


def _get_session() -> MonitoringSession:
    from ..main import get_session
    return get_session()


@router.post("", response_model=QueryResponse, status_code=201)
async def ingest_query(
    body: QueryRequest,
    session: MonitoringSession = Depends(_get_session),
) -> QueryResponse:
    """Score the query, update the user's history and return the record."""
    try:
        record = session.ingest(body.user_id, body.features)
    except ModelNotTrainedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (DimensionMismatchError, InvalidFeaturesError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    user = session.engine.get_user(body.user_id)
    return QueryResponse.from_record(record, user.suspicious_score if user else 0)
