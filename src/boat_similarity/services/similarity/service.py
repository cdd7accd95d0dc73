"""
Similarity Service implementation.

Provides a clean interface over the SimilarityCalculator with a shared,
bounded embedding cache for image comparisons.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import numpy as np

from ...core.config import Settings, get_settings
from ...core.entity import Entity
from ...core.types import VectorMetric, parse_vector_metric
from ...similarity import EmbeddingCache, SimilarityCalculator, VectorComparator
from ...similarity.aggregator import ComparisonResult
from ...similarity.calculator import EntityLike, ProfileLike, as_entity
from ...similarity.explainer import FieldFact
from ...similarity.profiles import PRESET_PROFILES
from ...similarity.ranking import RankedCandidate

logger = logging.getLogger(__name__)

ExtractFn = Callable[[str], Any]
AsyncExtractFn = Callable[[str], Awaitable[Any]]


class SimilarityService:
    """
    Boat similarity service.

    Features:
    - Pairwise comparison and top-K ranking under named or custom profiles
    - Field-level explanations of results
    - Cache-backed image comparison; the embedding model itself is supplied
      by the caller as an extract function (image key -> vector)
    """

    def __init__(
        self,
        calculator: Optional[SimilarityCalculator] = None,
        cache: Optional[EmbeddingCache] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize similarity service.

        Args:
            calculator: Calculator to delegate to (one is created if None)
            cache: Embedding cache (sized from settings if None)
            settings: Settings override
        """
        self._settings = settings or get_settings()
        self._calculator = calculator or SimilarityCalculator(settings=self._settings)
        self._cache = cache or EmbeddingCache(
            capacity=self._settings.embedding_cache_capacity,
            policy=self._settings.embedding_cache_policy,
        )

    @property
    def cache(self) -> EmbeddingCache:
        return self._cache

    @property
    def calculator(self) -> SimilarityCalculator:
        return self._calculator

    def compare(
        self,
        boat_a: EntityLike,
        boat_b: EntityLike,
        profile: ProfileLike | None = None,
    ) -> ComparisonResult:
        return self._calculator.compare(boat_a, boat_b, profile)

    def find_similar(
        self,
        boat: EntityLike,
        pool: Sequence[EntityLike],
        profile: ProfileLike | None = None,
        limit: int | None = None,
        threshold: float | None = None,
        annotate: bool = False,
    ) -> list[RankedCandidate]:
        """
        Find boats similar to a reference boat.

        Args:
            boat: Reference boat
            pool: Candidate boats
            profile: Profile override
            limit: Max number of similar boats to return
            threshold: Minimum similarity score

        Returns:
            List of RankedCandidate objects
        """
        return self._calculator.find_top_k(
            boat, pool, profile=profile, k=limit, threshold=threshold, annotate=annotate
        )

    def explain(self, result: ComparisonResult, view: str = "most_similar") -> list[FieldFact]:
        return self._calculator.explain_difference(result, view)

    # =========================================================================
    # Image Embeddings
    # =========================================================================

    def embedding(self, key: str, extract_fn: ExtractFn) -> np.ndarray:
        """Cached embedding for an image key."""
        return self._cache.get_or_compute(key, lambda: extract_fn(key))

    async def aembedding(self, key: str, extract_fn: AsyncExtractFn) -> np.ndarray:
        return await self._cache.aget_or_compute(key, lambda: extract_fn(key))

    def _image_comparator(self, metric: VectorMetric | str) -> VectorComparator:
        return VectorComparator(
            metric=parse_vector_metric(metric),
            decay_constant=self._settings.distance_decay_constant,
        )

    def compare_images(
        self,
        key_a: str,
        key_b: str,
        extract_fn: ExtractFn,
        metric: VectorMetric | str = VectorMetric.cosine,
    ) -> float:
        """
        Similarity of two images in [0, 1].

        Each image is embedded at most once while it stays in the cache.
        Euclidean comparison decays with settings.distance_decay_constant.
        """
        comparator = self._image_comparator(metric)
        return comparator.compare(self.embedding(key_a, extract_fn), self.embedding(key_b, extract_fn))

    async def acompare_images(
        self,
        key_a: str,
        key_b: str,
        extract_fn: AsyncExtractFn,
        metric: VectorMetric | str = VectorMetric.cosine,
    ) -> float:
        comparator = self._image_comparator(metric)
        vector_a = await self.aembedding(key_a, extract_fn)
        vector_b = await self.aembedding(key_b, extract_fn)
        return comparator.compare(vector_a, vector_b)

    def embed(
        self,
        boat: EntityLike,
        key: str,
        extract_fn: ExtractFn,
        field_name: str = "image_embedding",
    ) -> Entity:
        """Return a copy of boat with its image embedding attached."""
        vector = self.embedding(key, extract_fn)
        return as_entity(boat).with_attribute(field_name, tuple(vector.tolist()))

    async def aembed(
        self,
        boat: EntityLike,
        key: str,
        extract_fn: AsyncExtractFn,
        field_name: str = "image_embedding",
    ) -> Entity:
        vector = await self.aembedding(key, extract_fn)
        return as_entity(boat).with_attribute(field_name, tuple(vector.tolist()))

    def get_status(self) -> dict:
        """Get service status."""
        bound = self._calculator.profile
        return {
            "service": "similarity",
            "calculator": "SimilarityCalculator",
            "profiles": sorted(PRESET_PROFILES),
            "bound_profile": bound.name if bound else None,
            "default_profile": self._settings.default_profile,
            "cache": self._cache.stats(),
            "methodology": {
                "algorithm": "Weighted per-field similarity with uncertainty default for absent fields",
                "vectors": "Cosine similarity mapped to [0, 1]",
                "ranking": "Full scan, score descending, entity id ascending",
            },
        }


# Singleton instance, created on first use
_similarity_service: SimilarityService | None = None


def get_similarity_service() -> SimilarityService:
    """
    Get or create the similarity service.

    Returns:
        SimilarityService instance
    """
    global _similarity_service
    if _similarity_service is None:
        _similarity_service = SimilarityService()
        logger.info(
            "Similarity service created (cache capacity=%d, policy=%s)",
            _similarity_service.cache.capacity,
            _similarity_service.cache.policy.value,
        )
    return _similarity_service
