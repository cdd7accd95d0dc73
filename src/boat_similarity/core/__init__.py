"""
Core module for boat similarity.

This module provides the foundational components:
- Configuration management (config.py)
- Entities with explicit absence (entity.py)
- Boat record models (models.py)
- Field kinds and the boat field registry (types.py)
- Error taxonomy (errors.py)

Usage:
    from boat_similarity.core import Settings, get_settings
    from boat_similarity.core import Entity, Present, ABSENT, BoatRecord
    from boat_similarity.core import FieldKind, NumericMode, BOAT_FIELDS
"""

# Configuration
from .config import Settings, get_settings

# Errors
from .errors import (
    DimensionMismatch,
    MissingConfiguration,
    SimilarityError,
    ValidationError,
)

# Entities
from .entity import ABSENT, Absent, Entity, FieldValue, Present

# Types
from .types import (
    BOAT_FIELDS,
    BOAT_TYPE_FAMILIES,
    ENGINE_TYPE_FAMILIES,
    CachePolicy,
    FieldKind,
    FieldSpec,
    NumericMode,
    VectorMetric,
    get_field_spec,
    parse_field_kind,
)

# Models
from .models import BoatRecord, records_to_entities

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "SimilarityError",
    "ValidationError",
    "DimensionMismatch",
    "MissingConfiguration",
    # Entities
    "ABSENT",
    "Absent",
    "Entity",
    "FieldValue",
    "Present",
    # Types
    "BOAT_FIELDS",
    "BOAT_TYPE_FAMILIES",
    "ENGINE_TYPE_FAMILIES",
    "CachePolicy",
    "FieldKind",
    "FieldSpec",
    "NumericMode",
    "VectorMetric",
    "get_field_spec",
    "parse_field_kind",
    # Models
    "BoatRecord",
    "records_to_entities",
]
