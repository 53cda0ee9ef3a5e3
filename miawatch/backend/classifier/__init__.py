"""
classifier/__init__.py

Public API for the classifier sub-package.
"""

from .demo import DEMO_HEADERS, make_demo_dataset
from .models import Classifier, Dataset, Sample, TrainingResult, sigmoid
from .trainer import Trainer

__all__ = [
    "Classifier",
    "Dataset",
    "Sample",
    "TrainingResult",
    "Trainer",
    "sigmoid",
    "make_demo_dataset",
    "DEMO_HEADERS",
]
