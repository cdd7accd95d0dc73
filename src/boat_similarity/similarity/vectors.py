"""
Embedding-vector similarity.

Vectors come from an external image model. Comparisons never truncate or
pad: two vectors of different lengths raise DimensionMismatch.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence, Union

import numpy as np

from ..core.errors import DimensionMismatch, ValidationError
from ..core.types import VectorMetric, parse_vector_metric

logger = logging.getLogger(__name__)

DEFAULT_DECAY_CONSTANT = 100.0

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(vector: VectorLike) -> np.ndarray:
    """Convert a sequence to a finite 1-D float64 array."""
    try:
        array = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError("Embedding must be numeric", str(e)) from e
    if array.ndim != 1:
        raise ValidationError("Embedding must be one-dimensional", f"shape={array.shape}")
    if not np.isfinite(array).all():
        bad = int((~np.isfinite(array)).sum())
        raise ValidationError("Embedding values must be finite", f"{bad} non-finite components")
    return array


def _pair(v1: VectorLike, v2: VectorLike) -> tuple[np.ndarray, np.ndarray]:
    a = as_vector(v1)
    b = as_vector(v2)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0])
    return a, b


def cosine_similarity(v1: VectorLike, v2: VectorLike) -> float:
    """
    Cosine similarity mapped from [-1, 1] to [0, 1] via (x + 1) / 2.

    A zero-magnitude vector has no direction and scores 0.0.

    Raises:
        DimensionMismatch: if the vectors differ in length
    """
    a, b = _pair(v1, v2)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    cosine = float(np.dot(a, b) / (norm_a * norm_b))
    # Clamp float overshoot before mapping
    cosine = max(-1.0, min(1.0, cosine))
    return (cosine + 1.0) / 2.0


def euclidean_distance(v1: VectorLike, v2: VectorLike) -> float:
    """
    L2 distance between two vectors (lower means more similar).

    Raises:
        DimensionMismatch: if the vectors differ in length
    """
    a, b = _pair(v1, v2)
    return float(np.linalg.norm(a - b))


def normalize_distance(distance: float, decay_constant: float = DEFAULT_DECAY_CONSTANT) -> float:
    """Convert a distance to a similarity in (0, 1] via exp(-d / decay_constant)."""
    if decay_constant <= 0:
        raise ValidationError("Decay constant must be positive", repr(decay_constant))
    if distance < 0:
        raise ValidationError("Distance cannot be negative", repr(distance))
    return math.exp(-distance / decay_constant)


class VectorComparator:
    """
    Per-call vector comparator that enforces one dimensionality.

    With a declared dimension every vector is checked against it. Without
    one, the first vector seen fixes the dimension and any later vector of
    a different length raises DimensionMismatch.
    """

    def __init__(
        self,
        dimension: int | None = None,
        metric: VectorMetric | str = VectorMetric.cosine,
        decay_constant: float = DEFAULT_DECAY_CONSTANT,
    ):
        if dimension is not None and dimension < 1:
            raise ValidationError("Vector dimension must be positive", repr(dimension))
        if decay_constant <= 0:
            raise ValidationError("Decay constant must be positive", repr(decay_constant))
        self._dimension = dimension
        self.metric = parse_vector_metric(metric)
        self.decay_constant = decay_constant

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def _validate(self, vector: VectorLike) -> np.ndarray:
        array = as_vector(vector)
        if self._dimension is None:
            self._dimension = array.shape[0]
            logger.debug("Vector dimension fixed at %d", self._dimension)
        elif array.shape[0] != self._dimension:
            raise DimensionMismatch(self._dimension, array.shape[0])
        return array

    def compare(self, v1: VectorLike, v2: VectorLike) -> float:
        a = self._validate(v1)
        b = self._validate(v2)

        if self.metric is VectorMetric.cosine:
            return cosine_similarity(a, b)
        return normalize_distance(euclidean_distance(a, b), self.decay_constant)
