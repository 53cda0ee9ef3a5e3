"""
tests/test_classifier.py

Tests for classifier/models.py — Sample / Dataset validation and Classifier.predict().
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from miawatch.backend.classifier.models import Classifier, Dataset, Sample, sigmoid
from miawatch.backend.errors import (
    DimensionMismatchError,
    InvalidDatasetError,
    InvalidFeaturesError,
)


# ---------------------------------------------------------------------------
# sigmoid
# ---------------------------------------------------------------------------

class TestSigmoid:

    def test_zero_is_half(self):
        assert sigmoid(0.0) == 0.5

    def test_symmetry(self):
        assert sigmoid(2.0) + sigmoid(-2.0) == pytest.approx(1.0)

    @pytest.mark.parametrize("z", [-1e6, -800.0, 800.0, 1e6])
    def test_extreme_inputs_do_not_overflow(self, z):
        p = sigmoid(z)
        assert 0.0 <= p <= 1.0


# ---------------------------------------------------------------------------
# Classifier.predict
# ---------------------------------------------------------------------------

class TestClassifierPredict:

    def test_zero_vector_zero_bias_is_exactly_half(self):
        clf = Classifier(weights=(0.0, 0.0, 0.0), bias=0.0)
        assert clf.predict([0.0, 0.0, 0.0]) == 0.5

    def test_zero_vector_with_nonzero_weights_is_half(self):
        clf = Classifier(weights=(3.0, -7.0), bias=0.0)
        assert clf.predict([0, 0]) == 0.5

    def test_matches_logistic_formula(self):
        clf = Classifier(weights=(0.5, -0.25), bias=0.1)
        expected = 1 / (1 + math.exp(-(0.1 + 0.5 * 2 - 0.25 * 4)))
        assert clf.predict([2, 4]) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "features",
        [[1e9, 1e9], [-1e9, -1e9], [500.0, -500.0], [0.001, 0.002]],
    )
    def test_always_strictly_inside_unit_interval(self, features):
        clf = Classifier(weights=(1.0, 2.0), bias=-0.5)
        p = clf.predict(features)
        assert 0.0 < p < 1.0

    def test_dimension_mismatch_raises(self):
        clf = Classifier(weights=(1.0, 2.0, 3.0))
        with pytest.raises(DimensionMismatchError) as exc_info:
            clf.predict([1.0, 2.0])
        assert exc_info.value.expected == 3
        assert exc_info.value.got == 2

    def test_dimension_mismatch_is_value_error(self):
        clf = Classifier(weights=(1.0,))
        with pytest.raises(ValueError):
            clf.predict([])

    def test_non_finite_features_rejected(self):
        clf = Classifier(weights=(1.0, 1.0))
        with pytest.raises(InvalidFeaturesError):
            clf.predict([float("nan"), 1.0])

    def test_classifier_is_immutable(self):
        clf = Classifier(weights=(1.0,))
        with pytest.raises(AttributeError):
            clf.bias = 2.0   # type: ignore[misc]

    def test_num_features(self):
        assert Classifier(weights=(0.1, 0.2, 0.3, 0.4)).num_features == 4

    def test_weights_are_read_only_array(self):
        clf = Classifier(weights=(1.0, 2.0))
        assert isinstance(clf.weights, np.ndarray)
        assert clf.weights.dtype == np.float64
        with pytest.raises(ValueError):
            clf.weights[0] = 5.0

    def test_weights_copied_from_caller(self):
        w = np.array([1.0, -1.0])
        clf = Classifier(weights=w)
        w[0] = 9.0
        assert clf.predict([1.0, 0.0]) == pytest.approx(sigmoid(1.0))

    def test_equal_models_compare_equal(self):
        assert Classifier(weights=(0.5, 0.25), bias=0.1) == Classifier(weights=[0.5, 0.25], bias=0.1)
        assert Classifier(weights=(0.5, 0.25)) != Classifier(weights=(0.5, 0.26))


# ---------------------------------------------------------------------------
# Sample / Dataset
# ---------------------------------------------------------------------------

class TestSampleFromRow:

    def test_last_column_is_label(self):
        s = Sample.from_row([1.5, 2.5, 1])
        assert s.features == (1.5, 2.5)
        assert s.label == 1

    def test_float_label_accepted(self):
        assert Sample.from_row([3.0, 0.0]).label == 0

    def test_non_binary_label_rejected(self):
        with pytest.raises(InvalidDatasetError):
            Sample.from_row([1.0, 2.0, 3])

    def test_row_without_features_rejected(self):
        with pytest.raises(InvalidDatasetError):
            Sample.from_row([1])


class TestDatasetValidate:

    def test_valid_dataset_returns_feature_count(self):
        ds = Dataset.from_rows([[1, 2, 3, 0], [4, 5, 6, 1]])
        assert ds.validate() == 3
        assert ds.feature_count == 3
        assert len(ds) == 2

    def test_empty_dataset_rejected(self):
        with pytest.raises(InvalidDatasetError):
            Dataset().validate()

    def test_inconsistent_widths_rejected(self):
        ds = Dataset(samples=(Sample((1.0, 2.0), 0), Sample((1.0,), 1)))
        with pytest.raises(InvalidDatasetError, match="sample 1"):
            ds.validate()

    def test_non_finite_values_rejected(self):
        ds = Dataset(samples=(Sample((1.0, float("inf")), 0),))
        with pytest.raises(InvalidDatasetError):
            ds.validate()

    def test_bad_label_rejected(self):
        ds = Dataset(samples=(Sample((1.0,), 2),))
        with pytest.raises(InvalidDatasetError):
            ds.validate()

    def test_header_count_must_match_columns(self):
        ds = Dataset.from_rows([[1, 2, 0]], headers=["x", "label"])
        with pytest.raises(InvalidDatasetError, match="header"):
            ds.validate()

    def test_headers_kept(self):
        ds = Dataset.from_rows([[1, 0]], headers=["x", "y"])
        assert ds.headers == ("x", "y")
