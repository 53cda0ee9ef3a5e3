"""
classifier/demo.py

Synthetic medical dataset used for demonstrations and the --demo CLI flag.

Six uniformly drawn vitals per patient; the label marks disease risk when
the patient is both older than 55 and has a BMI above 28.
"""

from __future__ import annotations

import random

from .models import Dataset, Sample

DEMO_HEADERS: tuple[str, ...] = (
    "age",
    "bmi",
    "blood_pressure",
    "cholesterol",
    "glucose",
    "heart_rate",
    "disease_risk",
)

# (low, span) per feature: value = low + U(0, 1) * span
_RANGES: tuple[tuple[float, float], ...] = (
    (30.0, 40.0),    # age
    (20.0, 15.0),    # bmi
    (100.0, 50.0),   # blood_pressure
    (150.0, 100.0),  # cholesterol
    (70.0, 50.0),    # glucose
    (60.0, 40.0),    # heart_rate
)


def make_demo_dataset(n_samples: int = 200, rng: random.Random | None = None) -> Dataset:
    rng = rng or random.Random()
    samples = []
    for _ in range(n_samples):
        features = tuple(low + rng.random() * span for low, span in _RANGES)
        age, bmi = features[0], features[1]
        label = 1 if (age > 55 and bmi > 28) else 0
        samples.append(Sample(features=features, label=label))
    return Dataset(samples=tuple(samples), headers=DEMO_HEADERS)
