"""
engine/alerts.py

AlertManager — bounded alert log plus the global threat-level state.

The threat level is a pure function of the most recently recorded alert's
score (not an average, and not decayed over time):

    score >= 75 → CRITICAL
    score >= 60 → HIGH
    score >= 40 → MEDIUM
    otherwise   → LOW

It is recomputed each time an alert is recorded and otherwise persists.
"""

from __future__ import annotations

import logging
from collections import deque

from ..config import settings
from .models import Alert, AlertSeverity, ThreatLevel

logger = logging.getLogger(__name__)


class AlertManager:
    """
    Most-recent-first alert log with a fixed capacity; the oldest alert is
    dropped on overflow.

    Thread safety: NOT thread-safe. DetectionEngine calls it under its lock.
    """

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = settings.ALERT_LOG_CAPACITY if capacity is None else capacity
        self._log: deque[Alert] = deque(maxlen=self.capacity)
        self.total_alerts: int = 0
        self.threat_level: ThreatLevel = ThreatLevel.LOW

    def record_alert(
        self,
        user_id: str,
        severity: AlertSeverity,
        score: int,
        triggers: list[str],
    ) -> Alert:
        alert = Alert(user_id=user_id, severity=severity, score=score, triggers=list(triggers))
        self._log.appendleft(alert)   # deque(maxlen) drops from the right end
        self.total_alerts += 1

        previous = self.threat_level
        self.threat_level = self.threat_level_for(score)
        if self.threat_level is not previous:
            logger.info("Threat level %s → %s", previous.value, self.threat_level.value)

        logger.warning(
            "ALERT [%s] user=%r score=%d — %s",
            severity.value,
            user_id,
            score,
            ", ".join(alert.triggers),
        )
        return alert

    @property
    def alerts(self) -> list[Alert]:
        """Alert log, newest first."""
        return list(self._log)

    def reset(self) -> None:
        self._log.clear()
        self.total_alerts = 0
        self.threat_level = ThreatLevel.LOW

    @staticmethod
    def threat_level_for(score: int) -> ThreatLevel:
        if score >= 75:
            return ThreatLevel.CRITICAL
        if score >= 60:
            return ThreatLevel.HIGH
        if score >= 40:
            return ThreatLevel.MEDIUM
        return ThreatLevel.LOW
