"""
api/routes/session.py

GET  /api/session                    — session status
POST /api/session/demo-dataset       — load the synthetic medical dataset
POST /api/session/dataset            — load a dataset from JSON rows
POST /api/session/train              — start training (wait=true blocks until done)
POST /api/session/monitoring/start   — start the query simulator
POST /api/session/monitoring/stop    — stop the query simulator
POST /api/session/reset              — clear everything
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ...classifier import Dataset
from ...errors import InvalidDatasetError, ModelNotTrainedError, TrainingInProgressError
from ...session import MonitoringSession
from ..serializers import (
    DatasetInfoResponse,
    DatasetRequest,
    DemoDatasetRequest,
    SessionStatusResponse,
    TrainingResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/session", tags=["session"])


def _get_session() -> MonitoringSession:
    """FastAPI dependency — replaced in tests via app.dependency_overrides."""
    from ..main import get_session
    return get_session()


@router.get("", response_model=SessionStatusResponse)
async def read_status(
    session: MonitoringSession = Depends(_get_session),
) -> SessionStatusResponse:
    return SessionStatusResponse(**session.status())


@router.post("/demo-dataset", response_model=DatasetInfoResponse)
async def load_demo_dataset(
    body: DemoDatasetRequest | None = None,
    session: MonitoringSession = Depends(_get_session),
) -> DatasetInfoResponse:
    """Replace the session dataset with freshly generated demo data (full reset)."""
    n_samples = body.n_samples if body is not None else None
    dataset = session.load_demo_dataset(n_samples)
    return DatasetInfoResponse(
        samples=len(dataset),
        features=dataset.feature_count,
        headers=list(dataset.headers or ()),
    )


@router.post("/dataset", response_model=DatasetInfoResponse)
async def load_dataset(
    body: DatasetRequest,
    session: MonitoringSession = Depends(_get_session),
) -> DatasetInfoResponse:
    """Replace the session dataset with caller-supplied rows (full reset)."""
    try:
        dataset = Dataset.from_rows(body.rows, headers=body.headers)
        features = session.load_dataset(dataset)
    except InvalidDatasetError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return DatasetInfoResponse(
        samples=len(dataset),
        features=features,
        headers=list(dataset.headers or ()),
    )


@router.post("/train", response_model=TrainingResponse, status_code=202)
async def train(
    wait: Annotated[bool, Query()] = False,
    session: MonitoringSession = Depends(_get_session),
) -> TrainingResponse:
    try:
        task = session.start_training()
    except InvalidDatasetError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except TrainingInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    if not wait:
        return TrainingResponse(status="started")

    await asyncio.wait([task])
    if task.cancelled():
        raise HTTPException(status_code=409, detail="training was cancelled")
    result = task.result()
    return TrainingResponse(
        status="completed",
        train_samples=len(result.train_set),
        test_samples=len(result.test_set),
        bias=result.classifier.bias,
    )


@router.post("/monitoring/start", response_model=SessionStatusResponse)
async def start_monitoring(
    session: MonitoringSession = Depends(_get_session),
) -> SessionStatusResponse:
    try:
        session.start_monitoring()
    except ModelNotTrainedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return SessionStatusResponse(**session.status())


@router.post("/monitoring/stop", response_model=SessionStatusResponse)
async def stop_monitoring(
    session: MonitoringSession = Depends(_get_session),
) -> SessionStatusResponse:
    session.stop_monitoring()
    return SessionStatusResponse(**session.status())


@router.post("/reset", response_model=SessionStatusResponse)
async def reset(
    session: MonitoringSession = Depends(_get_session),
) -> SessionStatusResponse:
    session.reset()
    return SessionStatusResponse(**session.status())
