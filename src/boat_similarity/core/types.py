"""
Core types and constants for boat similarity.

This module provides:
- FieldKind, NumericMode, VectorMetric and CachePolicy enums
- FieldSpec dataclass describing how a boat attribute is compared
- BOAT_FIELDS registry for the attributes upstream collaborators supply
- Family tables used for partial categorical matches
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ValidationError


class FieldKind(str, Enum):
    """Attribute kinds understood by the comparators."""

    numeric = "numeric"
    categorical = "categorical"
    set_of_strings = "set"
    free_text = "text"
    vector = "vector"


class NumericMode(str, Enum):
    """Numeric comparison formulas."""

    tolerance = "tolerance"
    ratio = "ratio"


class VectorMetric(str, Enum):
    """Vector comparison formulas."""

    cosine = "cosine"
    euclidean = "euclidean"


class CachePolicy(str, Enum):
    """Eviction order for the embedding cache."""

    lru = "lru"
    fifo = "fifo"


def _parse_enum(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Unknown {label}", f"{value!r} (expected one of: {allowed})")


def parse_field_kind(value: "str | FieldKind") -> FieldKind:
    """Coerce a kind name to FieldKind, raising ValidationError if unknown."""
    return _parse_enum(FieldKind, value, "field kind")


def parse_numeric_mode(value: "str | NumericMode") -> NumericMode:
    return _parse_enum(NumericMode, value, "numeric mode")


def parse_vector_metric(value: "str | VectorMetric") -> VectorMetric:
    return _parse_enum(VectorMetric, value, "vector metric")


def parse_cache_policy(value: "str | CachePolicy") -> CachePolicy:
    return _parse_enum(CachePolicy, value, "cache policy")


@dataclass(frozen=True)
class FieldSpec:
    """
    Declared comparison semantics for one boat attribute.

    Numeric fields always name their mode here so that a field is never
    compared with tolerance in one place and ratio in another.
    """

    name: str
    kind: FieldKind
    numeric_mode: Optional[NumericMode] = None
    scale: Optional[float] = None
    description: str = ""


# =============================================================================
# BOAT FIELD REGISTRY
# =============================================================================
# length uses tolerance: a few feet either way should only nudge the score.
# Physical dimensions other than length, and price, use ratio: they span
# orders of magnitude across size classes.

BOAT_FIELDS: dict[str, FieldSpec] = {
    spec.name: spec
    for spec in (
        FieldSpec("name", FieldKind.free_text, description="Listing name"),
        FieldSpec("type", FieldKind.categorical, description="Boat type, e.g. sailboat"),
        FieldSpec("manufacturer", FieldKind.free_text, description="Builder"),
        FieldSpec("model", FieldKind.free_text, description="Model designation"),
        FieldSpec(
            "year",
            FieldKind.numeric,
            NumericMode.tolerance,
            scale=5.0,
            description="Model year; boats within 5 years are comparable",
        ),
        FieldSpec(
            "length",
            FieldKind.numeric,
            NumericMode.tolerance,
            scale=100.0,
            description="Length overall in feet",
        ),
        FieldSpec("beam", FieldKind.numeric, NumericMode.ratio, description="Beam in feet"),
        FieldSpec("draft", FieldKind.numeric, NumericMode.ratio, description="Draft in feet"),
        FieldSpec("weight", FieldKind.numeric, NumericMode.ratio, description="Displacement"),
        FieldSpec("price", FieldKind.numeric, NumericMode.ratio, description="Asking price"),
        FieldSpec("engine_type", FieldKind.categorical, description="Propulsion"),
        FieldSpec("hull_material", FieldKind.categorical, description="Hull material"),
        FieldSpec("hull_type", FieldKind.categorical, description="Hull form"),
        FieldSpec("fuel_type", FieldKind.categorical, description="Fuel"),
        FieldSpec("features", FieldKind.set_of_strings, description="Equipment list"),
        FieldSpec("category_tags", FieldKind.set_of_strings, description="Category tags"),
        FieldSpec("description", FieldKind.free_text, description="Free-form description"),
        FieldSpec("image_embedding", FieldKind.vector, description="Primary image embedding"),
    )
}


def get_field_spec(name: str) -> FieldSpec | None:
    """Look up a registered boat field, or None for custom fields."""
    return BOAT_FIELDS.get(name)


# =============================================================================
# FAMILY TABLES
# =============================================================================
# Values in the same family score 0.5 when they are not an exact match.

BOAT_TYPE_FAMILIES: dict[str, tuple[str, ...]] = {
    "power": (
        "power",
        "powerboat",
        "power boat",
        "power catamaran",
        "motorboat",
        "motor yacht",
        "express cruiser",
        "bowrider",
        "center console",
        "sport fishing",
    ),
    "sail": (
        "sail",
        "sailboat",
        "sail boat",
        "sailing yacht",
        "catamaran",
        "sailing catamaran",
        "trimaran",
        "sloop",
        "ketch",
    ),
    "jet": ("jet boat", "jet ski", "jetski", "personal watercraft", "pwc"),
    "cabin": ("cabin cruiser", "cabin boat", "trawler"),
}

ENGINE_TYPE_FAMILIES: dict[str, tuple[str, ...]] = {
    "outboard": ("outboard", "single outboard", "twin outboard", "triple outboard"),
    "inboard": ("inboard", "twin inboard", "sterndrive", "inboard outboard", "v drive"),
    "jet": ("jet", "jet drive", "waterjet"),
}
