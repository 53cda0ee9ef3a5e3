"""
api/main.py

FastAPI application factory.

REST routers are mounted under /api; two WebSocket channels push periodic
updates (see main.stats_broadcaster):
    /ws/alerts — alerts raised since the previous push
    /ws/stats  — aggregate stats snapshot
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.websockets import WebSocketDisconnect

from ..metrics import METRICS
from .routes import alerts as alerts_router
from .routes import queries as queries_router
from .routes import session as session_router
from .routes import stats as stats_router
from .routes import users as users_router
from .ws_manager import ALERTS_CHANNEL, STATS_CHANNEL, ws_manager

logger = logging.getLogger(__name__)

_session = None


def set_session(session) -> None:
    global _session
    _session = session


def get_session():
    if _session is None:
        raise RuntimeError("Session not initialised — call set_session() first")
    return _session


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI startup")
        yield
        logger.info("FastAPI shutdown")
        if _session is not None:
            _session.stop_monitoring()
            _session.cancel_training()

    app = FastAPI(
        title="MIAWatch — Query Pattern Anomaly Detector",
        version="1.0.0",
        description=(
            "Scores inference-query streams for model-extraction and "
            "membership-inference probing"
        ),
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # REST routers
    app.include_router(session_router.router, prefix="/api")
    app.include_router(queries_router.router, prefix="/api")
    app.include_router(alerts_router.router,  prefix="/api")
    app.include_router(stats_router.router,   prefix="/api")
    app.include_router(users_router.router,   prefix="/api")

    # WebSockets
    @app.websocket("/ws/alerts")
    async def ws_alerts(websocket: WebSocket):
        await ws_manager.connect(websocket, ALERTS_CHANNEL)
        try:
            while True:
                await websocket.receive_text()
        except (WebSocketDisconnect, Exception):
            await ws_manager.disconnect(websocket, ALERTS_CHANNEL)

    @app.websocket("/ws/stats")
    async def ws_stats_channel(websocket: WebSocket):
        await ws_manager.connect(websocket, STATS_CHANNEL)
        try:
            while True:
                await websocket.receive_text()
        except (WebSocketDisconnect, Exception):
            await ws_manager.disconnect(websocket, STATS_CHANNEL)

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "metrics": METRICS.as_dict(),
            "ws_connections": ws_manager.all_counts(),
        }

    return app
