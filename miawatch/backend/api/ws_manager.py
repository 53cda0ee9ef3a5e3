"""
api/ws_manager.py

WebSocketManager — live push of detection results to dashboard clients.

Channels:
    ALERTS_CHANNEL — batches of alerts raised since the previous push
    STATS_CHANNEL  — aggregate stats, threat level and top suspicious users

Thread safety: designed to be called exclusively from asyncio coroutines.
"""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from typing import Sequence

from fastapi import WebSocket

from ..engine.models import AggregateStats, Alert
from ..models import UserRanking
from .serializers import AlertResponse, StatsResponse, SuspiciousUserResponse

logger = logging.getLogger(__name__)

ALERTS_CHANNEL = "alerts"
STATS_CHANNEL = "stats"


class WebSocketManager:
    """Named broadcast channels, each holding any number of clients."""

    def __init__(self) -> None:
        self._channels: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, websocket: WebSocket, channel: str) -> None:
        await websocket.accept()
        self._channels[channel].add(websocket)
        logger.debug("WS connected — channel=%r clients=%d", channel, self.connection_count(channel))

    async def disconnect(self, websocket: WebSocket, channel: str) -> None:
        """No-op if *websocket* is not registered on *channel*."""
        self._channels[channel].discard(websocket)
        logger.debug("WS disconnected — channel=%r clients=%d", channel, self.connection_count(channel))

    # ------------------------------------------------------------------
    # Typed publishers
    # ------------------------------------------------------------------

    async def publish_alerts(self, alerts: Sequence[Alert]) -> int:
        """Push *alerts* (oldest first) as one message; nothing is sent for an empty batch."""
        if not alerts:
            return 0
        return await self.broadcast(ALERTS_CHANNEL, {
            "type": "alerts",
            "alerts": [AlertResponse.from_alert(a).model_dump() for a in alerts],
        })

    async def publish_stats(
        self, stats: AggregateStats, top_users: Sequence[UserRanking] = ()
    ) -> int:
        return await self.broadcast(STATS_CHANNEL, {
            "type": "stats",
            "timestamp": time.time(),
            "stats": StatsResponse.from_stats(stats).model_dump(),
            "top_users": [SuspiciousUserResponse.from_ranking(r).model_dump() for r in top_users],
        })

    # ------------------------------------------------------------------
    # Raw broadcast
    # ------------------------------------------------------------------

    async def broadcast(self, channel: str, message: dict) -> int:
        """
        JSON-encode *message* once and send it to every client on *channel*.

        Clients whose send fails are dropped from the channel. Returns the
        number of clients that received the message.
        """
        clients = self._channels.get(channel)
        if not clients:
            return 0

        payload = json.dumps(message, default=str)
        sent = 0
        for ws in list(clients):
            try:
                await ws.send_text(payload)
                sent += 1
            except Exception as exc:
                logger.debug("WS send failed (channel=%r): %s — dropping client", channel, exc)
                clients.discard(ws)
        return sent

    def connection_count(self, channel: str) -> int:
        return len(self._channels.get(channel, ()))

    def all_counts(self) -> dict[str, int]:
        return {ch: len(conns) for ch, conns in self._channels.items()}


ws_manager = WebSocketManager()
