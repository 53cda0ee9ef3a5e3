"""
backend/errors.py

Exception types raised by the detection core.

Every error is a precondition failure: it is raised before any session
state is touched, so callers may catch it and carry on with the same
session.
"""

from __future__ import annotations


class MiaWatchError(Exception):
    """Base class for all MIAWatch errors."""


class InvalidDatasetError(MiaWatchError, ValueError):
    """Dataset is empty, ragged, or carries non-binary labels / non-finite values."""


class DimensionMismatchError(MiaWatchError, ValueError):
    """Feature vector length does not match the trained feature count."""

    def __init__(self, expected: int, got: int) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"expected {expected} feature(s), got {got}")


class InvalidFeaturesError(MiaWatchError, ValueError):
    """Feature vector contains NaN or infinite values."""


class ModelNotTrainedError(MiaWatchError, RuntimeError):
    """An operation needs a trained classifier and none is installed."""


class TrainingInProgressError(MiaWatchError, RuntimeError):
    """A training task is already running for this session."""
