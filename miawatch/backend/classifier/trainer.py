"""
classifier/trainer.py

Trainer — fits the single-layer logistic Classifier.

Algorithm (fixed hyperparameters, see config.py):
  - Uniform random shuffle, split at floor(n * TRAIN_SPLIT)
  - Weights ~ U(-WEIGHT_INIT_RANGE, WEIGHT_INIT_RANGE), bias = 0
  - EPOCHS passes of per-sample gradient descent over the training split,
    always in the same (post-shuffle) order

fit() is the synchronous core. train() is what callers await: it sleeps
the simulated training delay, then runs fit() in a worker thread so the
event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time

import numpy as np

from ..config import settings
from .models import Classifier, Dataset, TrainingResult, sigmoid

logger = logging.getLogger(__name__)


class Trainer:
    """
    Args:
        learning_rate: SGD step size.
        epochs:        Full passes over the training split.
        train_split:   Fraction of shuffled samples used for training.
        delay_seconds: Simulated latency before train() starts fitting.
        rng:           Random source for shuffling and weight init.
    """

    def __init__(
        self,
        learning_rate: float | None = None,
        epochs: int | None = None,
        train_split: float | None = None,
        delay_seconds: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.learning_rate = settings.LEARNING_RATE if learning_rate is None else learning_rate
        self.epochs = settings.EPOCHS if epochs is None else epochs
        self.train_split = settings.TRAIN_SPLIT if train_split is None else train_split
        self.delay_seconds = (
            settings.TRAINING_DELAY_SECONDS if delay_seconds is None else delay_seconds
        )
        self.init_range = settings.WEIGHT_INIT_RANGE
        self._rng = rng or random.Random(settings.RANDOM_SEED)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def train(self, dataset: Dataset) -> TrainingResult:
        """Validate, wait out the simulated delay, then fit off the event loop."""
        dataset.validate()
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return await asyncio.to_thread(self.fit, dataset)

    def fit(self, dataset: Dataset) -> TrainingResult:
        num_features = dataset.validate()
        t0 = time.monotonic()

        shuffled = list(dataset.samples)
        self._rng.shuffle(shuffled)
        split = math.floor(len(shuffled) * self.train_split)
        train_set, test_set = shuffled[:split], shuffled[split:]

        weights = np.array(
            [self._rng.uniform(-self.init_range, self.init_range) for _ in range(num_features)]
        )
        bias = 0.0

        X = np.array([s.features for s in train_set], dtype=np.float64).reshape(-1, num_features)
        y = np.array([s.label for s in train_set], dtype=np.float64)

        for _ in range(self.epochs):
            for x, label in zip(X, y):
                bias = self._step(weights, bias, x, label)

        classifier = Classifier(weights=weights, bias=bias, trained=True)
        logger.info(
            "Trained %r on %d sample(s) (%d held out) in %.1fms",
            classifier,
            len(train_set),
            len(test_set),
            (time.monotonic() - t0) * 1000,
        )
        return TrainingResult(
            classifier=classifier,
            train_set=tuple(train_set),
            test_set=tuple(test_set),
            all_data=tuple(shuffled),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _step(self, weights: np.ndarray, bias: float, x: np.ndarray, label: float) -> float:
        """One SGD update on *weights* in place; returns the new bias."""
        error = sigmoid(bias + float(weights @ x)) - label
        weights -= self.learning_rate * error * x
        return bias - self.learning_rate * error
