"""
Boat Similarity Engine

Compares boats across heterogeneous attributes and image embeddings,
fuses per-field scores under configurable weight profiles, ranks
candidate pools and explains results field by field.

Key Features:
- Per-kind comparators (numeric, categorical with families, sets, text, vectors)
- Explicit absence with a flat uncertainty contribution
- Preset profiles (legacy-a, legacy-b, hybrid) and custom profiles
- Deterministic top-K ranking with tie-break by entity id
- Bounded LRU/FIFO embedding cache

Usage:
    from boat_similarity import SimilarityCalculator, BoatRecord

    calculator = SimilarityCalculator("legacy-a")
    a = BoatRecord.model_validate({"id": 1, "type": "Yacht", "length": 42}).to_entity()
    b = BoatRecord.model_validate({"id": 2, "type": "Yacht", "length": 40}).to_entity()
    result = calculator.compare(a, b)
    print(result.percentage)
"""

from .core import (
    ABSENT,
    BoatRecord,
    DimensionMismatch,
    Entity,
    MissingConfiguration,
    Present,
    Settings,
    SimilarityError,
    ValidationError,
    get_settings,
    records_to_entities,
)
from .similarity import (
    HYBRID,
    LEGACY_A,
    LEGACY_B,
    PRESET_PROFILES,
    ComparisonResult,
    EmbeddingCache,
    FieldFact,
    FieldRule,
    RankedCandidate,
    SimilarityCalculator,
    WeightProfile,
    get_preset,
)
from .services import SimilarityService, get_similarity_service

__version__ = "0.1.0"

__all__ = [
    # Core
    "ABSENT",
    "BoatRecord",
    "Entity",
    "Present",
    "Settings",
    "get_settings",
    "records_to_entities",
    # Errors
    "SimilarityError",
    "ValidationError",
    "DimensionMismatch",
    "MissingConfiguration",
    # Profiles
    "FieldRule",
    "WeightProfile",
    "HYBRID",
    "LEGACY_A",
    "LEGACY_B",
    "PRESET_PROFILES",
    "get_preset",
    # Similarity
    "ComparisonResult",
    "EmbeddingCache",
    "FieldFact",
    "RankedCandidate",
    "SimilarityCalculator",
    # Services
    "SimilarityService",
    "get_similarity_service",
]
