"""
classifier/models.py

Data models for the target classifier.

Sample         — one labelled feature row
Dataset        — validated collection of Samples
Classifier     — frozen single-layer logistic model
TrainingResult — Classifier plus the train / test / replay splits
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

from ..errors import DimensionMismatchError, InvalidDatasetError, InvalidFeaturesError

# predict() stays strictly inside (0, 1) even when exp() saturates
_PROBABILITY_EPS = 1e-12


def sigmoid(z: float) -> float:
    """Logistic function, evaluated so that large |z| never overflows exp()."""
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


# ---------------------------------------------------------------------------
# Sample / Dataset
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Sample:
    """A feature vector plus its binary label."""

    features: tuple[float, ...]
    label: int
    """0 or 1."""

    @classmethod
    def from_row(cls, row: Sequence[float]) -> "Sample":
        """Build a Sample from a row whose last column is the label."""
        if len(row) < 2:
            raise InvalidDatasetError(
                f"row needs at least one feature and a label, got {len(row)} column(s)"
            )
        *features, label = row
        if label not in (0, 1):
            raise InvalidDatasetError(f"label must be 0 or 1, got {label!r}")
        return cls(features=tuple(float(v) for v in features), label=int(label))


@dataclass(frozen=True)
class Dataset:
    """
    Labelled training data.

    Construction does not validate; call validate() (the Trainer and the
    session do) before relying on feature_count.
    """

    samples: tuple[Sample, ...] = ()
    headers: tuple[str, ...] | None = None
    """Column names including the label column, when known."""

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Sequence[float]],
        headers: Sequence[str] | None = None,
    ) -> "Dataset":
        return cls(
            samples=tuple(Sample.from_row(r) for r in rows),
            headers=tuple(headers) if headers is not None else None,
        )

    @property
    def feature_count(self) -> int:
        if not self.samples:
            raise InvalidDatasetError("dataset is empty")
        return len(self.samples[0].features)

    def validate(self) -> int:
        """
        Check the dataset is trainable and return its feature count.

        Raises InvalidDatasetError on an empty dataset, a featureless
        sample, inconsistent widths, non-binary labels, non-finite values or
        a header list that does not match the columns.
        """
        width = self.feature_count
        if width == 0:
            raise InvalidDatasetError("samples have no features")
        if self.headers is not None and len(self.headers) != width + 1:
            raise InvalidDatasetError(
                f"{len(self.headers)} header(s) for {width} feature(s) plus label"
            )
        for i, sample in enumerate(self.samples):
            if len(sample.features) != width:
                raise InvalidDatasetError(
                    f"sample {i} has {len(sample.features)} feature(s), expected {width}"
                )
            if sample.label not in (0, 1):
                raise InvalidDatasetError(
                    f"sample {i} label must be 0 or 1, got {sample.label!r}"
                )
            if not all(math.isfinite(v) for v in sample.features):
                raise InvalidDatasetError(f"sample {i} contains non-finite values")
        return width

    def __len__(self) -> int:
        return len(self.samples)


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class Classifier:
    """
    Trained logistic model. Immutable, so safe to share across callers.

    weights is stored as a read-only float64 array; any sequence is
    accepted at construction and copied.
    """

    weights: np.ndarray
    bias: float = 0.0
    trained: bool = True

    def __post_init__(self) -> None:
        weights = np.array(self.weights, dtype=np.float64).reshape(-1)
        weights.setflags(write=False)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "bias", float(self.bias))

    @property
    def num_features(self) -> int:
        return int(self.weights.shape[0])

    def predict(self, features: Sequence[float]) -> float:
        """Return the model's confidence for *features*, strictly inside (0, 1)."""
        if len(features) != self.num_features:
            raise DimensionMismatchError(self.num_features, len(features))
        x = np.asarray(features, dtype=np.float64)
        if not np.isfinite(x).all():
            raise InvalidFeaturesError("features must be finite numbers")
        p = sigmoid(self.bias + float(self.weights @ x))
        return min(max(p, _PROBABILITY_EPS), 1.0 - _PROBABILITY_EPS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Classifier):
            return NotImplemented
        return (
            self.bias == other.bias
            and self.trained == other.trained
            and np.array_equal(self.weights, other.weights)
        )

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return (
            f"Classifier(features={self.num_features} "
            f"bias={self.bias:.4f} trained={self.trained})"
        )


@dataclass(frozen=True)
class TrainingResult:
    """Everything a training run produces."""

    classifier: Classifier
    train_set: tuple[Sample, ...] = field(default_factory=tuple)
    test_set: tuple[Sample, ...] = field(default_factory=tuple)
    all_data: tuple[Sample, ...] = field(default_factory=tuple)
    """Full shuffled dataset, kept for simulated replay."""
