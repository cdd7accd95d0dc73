"""
Similarity calculation module.

Compares boats field by field, fuses the scores under a weight profile and
ranks candidate pools. Typical use:

    from boat_similarity.similarity import SimilarityCalculator

    calculator = SimilarityCalculator("legacy-a")
    result = calculator.compare(boat_a, boat_b)
    top = calculator.find_top_k(boat_a, pool, k=5)
"""

from .aggregator import ComparisonResult, FieldContribution, WeightedAggregator, aggregate_scores
from .attributes import (
    compare_categorical,
    compare_numeric,
    compare_set,
    compare_text,
    normalize_score,
)
from .cache import EmbeddingCache, content_key
from .calculator import SimilarityCalculator, as_entity
from .explainer import DifferenceExplainer, ExplainView, FieldDelta, FieldFact
from .profiles import (
    HYBRID,
    LEGACY_A,
    LEGACY_B,
    PRESET_PROFILES,
    FieldRule,
    WeightProfile,
    get_preset,
)
from .ranking import RankedCandidate, RankingEngine, TextMatch
from .vectors import (
    VectorComparator,
    cosine_similarity,
    euclidean_distance,
    normalize_distance,
)

__all__ = [
    # Attributes
    "compare_categorical",
    "compare_numeric",
    "compare_set",
    "compare_text",
    "normalize_score",
    # Vectors
    "VectorComparator",
    "cosine_similarity",
    "euclidean_distance",
    "normalize_distance",
    "EmbeddingCache",
    "content_key",
    # Profiles
    "FieldRule",
    "WeightProfile",
    "HYBRID",
    "LEGACY_A",
    "LEGACY_B",
    "PRESET_PROFILES",
    "get_preset",
    # Aggregation
    "ComparisonResult",
    "FieldContribution",
    "WeightedAggregator",
    "aggregate_scores",
    # Ranking
    "RankedCandidate",
    "RankingEngine",
    "TextMatch",
    # Explanation
    "DifferenceExplainer",
    "ExplainView",
    "FieldDelta",
    "FieldFact",
    # Calculator
    "SimilarityCalculator",
    "as_entity",
]
