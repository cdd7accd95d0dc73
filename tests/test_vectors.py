"""
Tests for vector similarity.
"""

import math

import numpy as np
import pytest

from boat_similarity.core import DimensionMismatch, ValidationError
from boat_similarity.similarity import (
    VectorComparator,
    cosine_similarity,
    euclidean_distance,
    normalize_distance,
)


class TestCosineSimilarity:
    def test_identical_direction(self):
        assert cosine_similarity([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_orthogonal_maps_to_half(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.5)

    def test_opposite_maps_to_zero(self):
        assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(0.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0, 0, 0], [1, 2, 3]) == 0.0

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionMismatch) as exc:
            cosine_similarity(np.ones(512), np.ones(1024))
        assert exc.value.expected == 512
        assert exc.value.actual == 1024
        assert exc.value.to_dict()["error"]["code"] == "DIMENSION_MISMATCH"

    def test_rejects_matrix(self):
        with pytest.raises(ValidationError):
            cosine_similarity([[1, 0]], [[0, 1]])

    def test_symmetric(self):
        a, b = [0.3, -1.2, 4.0], [2.0, 0.1, -0.5]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)


class TestDistance:
    def test_euclidean(self):
        assert euclidean_distance([0, 0], [3, 4]) == pytest.approx(5.0)

    def test_normalize_distance(self):
        assert normalize_distance(0) == 1.0
        assert normalize_distance(100) == pytest.approx(math.exp(-1))

    def test_normalize_distance_custom_decay(self):
        assert normalize_distance(10, 10) == pytest.approx(math.exp(-1))

    def test_bad_decay(self):
        with pytest.raises(ValidationError):
            normalize_distance(1, 0)


class TestVectorComparator:
    def test_first_vector_fixes_dimension(self):
        comparator = VectorComparator()
        comparator.compare([1, 0, 0], [0, 1, 0])
        assert comparator.dimension == 3
        with pytest.raises(DimensionMismatch):
            comparator.compare([1, 0], [0, 1])

    def test_declared_dimension(self):
        comparator = VectorComparator(dimension=4)
        with pytest.raises(DimensionMismatch):
            comparator.compare([1, 0, 0], [0, 1, 0])

    def test_euclidean_metric(self):
        comparator = VectorComparator(metric="euclidean", decay_constant=5)
        assert comparator.compare([0, 0], [3, 4]) == pytest.approx(math.exp(-1))

    def test_unknown_metric(self):
        with pytest.raises(ValidationError, match="Unknown vector metric"):
            VectorComparator(metric="manhattan")


class TestNonFiniteComponents:
    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_cosine_rejects(self, bad):
        with pytest.raises(ValidationError, match="finite"):
            cosine_similarity([bad, 1.0], [0.0, 1.0])

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_euclidean_rejects(self, bad):
        with pytest.raises(ValidationError, match="finite"):
            euclidean_distance([0.0, 1.0], [bad, 1.0])

    @pytest.mark.parametrize("metric", ["cosine", "euclidean"])
    def test_comparator_rejects(self, metric):
        with pytest.raises(ValidationError):
            VectorComparator(metric=metric).compare([math.nan, 1.0], [0.0, 1.0])

    def test_non_numeric_component(self):
        with pytest.raises(ValidationError, match="numeric"):
            cosine_similarity(["a", "b"], [0.0, 1.0])
