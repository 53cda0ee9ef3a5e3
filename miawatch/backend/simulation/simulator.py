"""
simulation/simulator.py

QuerySimulator — synthetic query traffic that drives a DetectionEngine.

Every MONITOR_INTERVAL_SECONDS one tick fires:
  - pick user_<k>, k uniform in 1..user_count
  - pick a random sample from the replay set
  - attackers send that same feature vector `attacker_burst` times,
    everyone else sends it once

Cancellation: stop() clears the liveness flag and cancels the task. Each
ingestion inside a tick re-checks the flag first, so once stop() has
returned nothing more reaches the engine.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Sequence

from ..classifier.models import Sample
from ..config import settings
from ..engine import DetectionEngine
from ..metrics import METRICS
from ..models import QueryRecord

logger = logging.getLogger(__name__)


class QuerySimulator:
    """
    Args:
        engine:         Engine to feed.
        samples:        Replay set (usually TrainingResult.all_data).
        interval:       Seconds between ticks.
        user_count:     Number of simulated users, named user_1..user_N.
        attacker_ids:   User ids that replay each query in a burst.
        attacker_burst: Queries per attacker tick.
        rng:            Random source for user / sample selection.
    """

    def __init__(
        self,
        engine: DetectionEngine,
        samples: Sequence[Sample],
        interval: float | None = None,
        user_count: int | None = None,
        attacker_ids: Sequence[str] | None = None,
        attacker_burst: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if not samples:
            raise ValueError("simulator needs at least one sample to replay")
        self._engine = engine
        self._samples = list(samples)
        self.interval = settings.MONITOR_INTERVAL_SECONDS if interval is None else interval
        self.user_count = settings.SIM_USER_COUNT if user_count is None else user_count
        self.attacker_ids = frozenset(
            settings.SIM_ATTACKER_IDS if attacker_ids is None else attacker_ids
        )
        self.attacker_burst = (
            settings.SIM_ATTACKER_BURST if attacker_burst is None else attacker_burst
        )
        self._rng = rng or random.Random(settings.RANDOM_SEED)

        self._alive = False
        self._task: asyncio.Task | None = None
        self.stats: dict[str, int] = {"ticks": 0, "queries_sent": 0}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._alive

    def start(self) -> asyncio.Task:
        """Schedule the tick loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._alive = True
        self._task = asyncio.get_running_loop().create_task(self._run(), name="simulator")
        logger.info(
            "Simulator started — interval=%.2fs users=%d attackers=%s",
            self.interval,
            self.user_count,
            sorted(self.attacker_ids),
        )
        return self._task

    def stop(self) -> None:
        """Stop ticking. Safe to call repeatedly or before start()."""
        was_alive = self._alive
        self._alive = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if was_alive:
            logger.info("Simulator stopped after %d tick(s)", self.stats["ticks"])

    async def join(self) -> None:
        """Wait for the tick loop to finish after stop()."""
        if self._task is None:
            return
        await asyncio.gather(self._task, return_exceptions=True)

    def tick(self) -> list[QueryRecord]:
        """Run one interval's worth of traffic and return the ingested records."""
        user_id = f"user_{self._rng.randint(1, self.user_count)}"
        sample = self._rng.choice(self._samples)
        repeats = self.attacker_burst if user_id in self.attacker_ids else 1

        records: list[QueryRecord] = []
        for _ in range(repeats):
            if not self._alive:
                break
            records.append(self._engine.ingest(user_id, sample.features))

        self.stats["ticks"] += 1
        self.stats["queries_sent"] += len(records)
        METRICS.simulator_ticks.inc()
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        try:
            while self._alive:
                await asyncio.sleep(self.interval)
                if not self._alive:
                    break
                self.tick()
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            logger.exception("Simulator tick failed, stopping: %s", exc)
            raise
        finally:
            self._alive = False
