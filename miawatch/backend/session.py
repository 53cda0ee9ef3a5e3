"""
backend/session.py

MonitoringSession — one self-contained monitoring session.

Owns the dataset, the training task and its result, the DetectionEngine
and the simulator. Nothing here is process-global: the API layer and the
CLI each hold a session handle and pass it around.

Lifecycle:
    load_dataset() / load_demo_dataset()   → full reset, dataset stored
    start_training()                        → background task, monitoring off
    (training completes)                    → classifier installed in engine
    start_monitoring() / stop_monitoring()  → simulator on / off
    reset()                                 → everything cleared together
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Sequence

from .classifier import Dataset, Trainer, TrainingResult, make_demo_dataset
from .config import settings
from .engine import DetectionEngine
from .errors import InvalidDatasetError, ModelNotTrainedError, TrainingInProgressError
from .metrics import METRICS
from .models import QueryRecord
from .simulation import QuerySimulator

logger = logging.getLogger(__name__)

TrainingCallback = Callable[[TrainingResult], None]


class MonitoringSession:
    """
    Args:
        trainer: Trainer to use; defaults to one built from settings.
        engine:  DetectionEngine to use; defaults to a fresh one.
        rng:     Random source shared by the demo generator and simulator.
    """

    def __init__(
        self,
        trainer: Trainer | None = None,
        engine: DetectionEngine | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random(settings.RANDOM_SEED)
        self.trainer = trainer or Trainer(rng=self._rng)
        self.engine = engine or DetectionEngine()

        self.dataset: Dataset | None = None
        self.training_result: TrainingResult | None = None
        self._training_task: asyncio.Task | None = None
        self._simulator: QuerySimulator | None = None

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def is_training(self) -> bool:
        return self._training_task is not None and not self._training_task.done()

    @property
    def model_trained(self) -> bool:
        return self.training_result is not None and self.engine.classifier is not None

    @property
    def is_monitoring(self) -> bool:
        return self._simulator is not None and self._simulator.is_running

    def status(self) -> dict:
        return {
            "has_dataset": self.dataset is not None,
            "samples": len(self.dataset) if self.dataset is not None else 0,
            "is_training": self.is_training,
            "model_trained": self.model_trained,
            "is_monitoring": self.is_monitoring,
        }

    # ------------------------------------------------------------------
    # Dataset
    # ------------------------------------------------------------------

    def load_dataset(self, dataset: Dataset) -> int:
        """Validate and store *dataset*; returns its feature count."""
        num_features = dataset.validate()
        self.reset()
        self.dataset = dataset
        logger.info("Dataset loaded — %d sample(s), %d feature(s)", len(dataset), num_features)
        return num_features

    def load_demo_dataset(self, n_samples: int | None = None) -> Dataset:
        n = settings.DEMO_DATASET_SIZE if n_samples is None else n_samples
        dataset = make_demo_dataset(n, rng=self._rng)
        self.load_dataset(dataset)
        return dataset

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    def start_training(self, on_complete: TrainingCallback | None = None) -> asyncio.Task:
        """
        Kick off training in the background.

        Raises InvalidDatasetError if no valid dataset is loaded and
        TrainingInProgressError if a training task is already running.
        Monitoring is stopped and the engine's classifier is cleared, so
        nothing is scored until the new model is installed.
        """
        if self.is_training:
            raise TrainingInProgressError("a training task is already running")
        if self.dataset is None:
            raise InvalidDatasetError("no dataset loaded")
        dataset = self.dataset
        dataset.validate()

        self.stop_monitoring()
        self.training_result = None
        self.engine.clear_classifier()

        task = asyncio.get_running_loop().create_task(
            self._run_training(dataset), name="training"
        )
        self._training_task = task
        if on_complete is not None:
            task.add_done_callback(lambda t: self._notify(t, on_complete))
        logger.info("Training started on %d sample(s)", len(dataset))
        return task

    async def train(self) -> TrainingResult:
        """Start training and wait for it to finish."""
        return await self.start_training()

    def cancel_training(self) -> bool:
        """Cancel an in-flight training task; returns True if one was cancelled."""
        task = self._training_task
        self._training_task = None
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("Training cancelled")
        return True

    async def _run_training(self, dataset: Dataset) -> TrainingResult:
        result = await self.trainer.train(dataset)
        if self._training_task is not asyncio.current_task():
            # session was reset or retrained while we were fitting
            logger.info("Discarding stale training result")
            raise asyncio.CancelledError
        self.training_result = result
        self.engine.install_classifier(result.classifier)
        METRICS.trainings_completed.inc()
        logger.info(
            "Training complete — %d train / %d test sample(s)",
            len(result.train_set),
            len(result.test_set),
        )
        return result

    @staticmethod
    def _notify(task: asyncio.Task, callback: TrainingCallback) -> None:
        if task.cancelled() or task.exception() is not None:
            return
        callback(task.result())

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def start_monitoring(
        self,
        interval: float | None = None,
        attacker_ids: Sequence[str] | None = None,
    ) -> QuerySimulator:
        if self.is_training or not self.model_trained:
            raise ModelNotTrainedError("train a model before starting monitoring")
        if self.is_monitoring:
            return self._simulator
        self._simulator = QuerySimulator(
            self.engine,
            self.training_result.all_data,
            interval=interval,
            attacker_ids=attacker_ids,
            rng=self._rng,
        )
        self._simulator.start()
        return self._simulator

    def stop_monitoring(self) -> None:
        if self._simulator is not None:
            self._simulator.stop()

    async def wait_monitoring_stopped(self) -> None:
        if self._simulator is not None:
            await self._simulator.join()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def ingest(self, user_id: str, features: Sequence[float]) -> QueryRecord:
        return self.engine.ingest(user_id, features)

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Stop everything and clear dataset, model and detection state together."""
        self.stop_monitoring()
        self._simulator = None
        self.cancel_training()
        self.engine.reset()
        self.dataset = None
        self.training_result = None
        logger.info("Session reset")
