"""
Weight profiles.

A WeightProfile is an ordered list of FieldRules plus the uncertainty
fraction applied to absent fields. Field order is the aggregation order,
which keeps floating-point sums identical across runs.

Two presets preserve the weight tables of the earlier matchers for
regression comparison; "hybrid" adds the image embedding and is the
default.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from ..core.errors import MissingConfiguration, ValidationError
from ..core.types import (
    BOAT_TYPE_FAMILIES,
    ENGINE_TYPE_FAMILIES,
    FieldKind,
    NumericMode,
    VectorMetric,
    get_field_spec,
    parse_field_kind,
    parse_numeric_mode,
    parse_vector_metric,
)
from .attributes import normalize_category
from .vectors import DEFAULT_DECAY_CONSTANT

DEFAULT_UNCERTAINTY_FRACTION = 1.0 / 3.0


def _freeze_families(
    field_name: str, family_groups: Mapping[str, Iterable[str]]
) -> Mapping[str, tuple[str, ...]]:
    seen: dict[str, str] = {}
    frozen: dict[str, tuple[str, ...]] = {}
    for family, members in family_groups.items():
        if isinstance(members, str):
            members = (members,)
        members = tuple(members)
        for member in members:
            key = normalize_category(member)
            if key in seen and seen[key] != family:
                raise ValidationError(
                    "Value belongs to more than one family",
                    f"{field_name}: {member!r} in {seen[key]!r} and {family!r}",
                )
            seen[key] = family
        frozen[family] = members
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class FieldRule:
    """
    How one field is compared and how much it counts.

    Numeric rules must resolve a mode, either explicitly or from the boat
    field registry; the same field is never compared two ways.
    """

    field: str
    kind: FieldKind
    weight: float
    mode: Optional[NumericMode] = None
    scale: Optional[float] = None
    family_groups: Optional[Mapping[str, tuple[str, ...]]] = None
    metric: VectorMetric = VectorMetric.cosine
    decay_constant: float = DEFAULT_DECAY_CONSTANT
    dimension: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.field:
            raise ValidationError("Field name must not be empty")

        kind = parse_field_kind(self.kind)
        object.__setattr__(self, "kind", kind)

        try:
            weight = float(self.weight)
        except (TypeError, ValueError):
            raise ValidationError("Weight must be a number", f"{self.field}={self.weight!r}")
        if not math.isfinite(weight) or weight < 0:
            raise ValidationError("Weight must be a non-negative number", f"{self.field}={weight}")
        object.__setattr__(self, "weight", weight)

        if kind is FieldKind.numeric:
            self._resolve_numeric()
        elif self.mode is not None or self.scale is not None:
            raise ValidationError("Only numeric fields take a mode or scale", self.field)

        if self.family_groups is not None:
            if kind is not FieldKind.categorical:
                raise ValidationError("Only categorical fields take family groups", self.field)
            object.__setattr__(
                self, "family_groups", _freeze_families(self.field, self.family_groups)
            )

        object.__setattr__(self, "metric", parse_vector_metric(self.metric))
        if self.decay_constant <= 0:
            raise ValidationError("Decay constant must be positive", f"{self.field}={self.decay_constant}")
        if self.dimension is not None:
            if kind is not FieldKind.vector:
                raise ValidationError("Only vector fields take a dimension", self.field)
            if self.dimension < 1:
                raise ValidationError("Vector dimension must be positive", f"{self.field}={self.dimension}")

    def _resolve_numeric(self) -> None:
        spec = get_field_spec(self.field)
        registered = spec if spec is not None and spec.kind is FieldKind.numeric else None

        mode = self.mode
        if mode is None and registered is not None:
            mode = registered.numeric_mode
        if mode is None:
            raise ValidationError("Numeric field must declare a mode (tolerance or ratio)", self.field)
        mode = parse_numeric_mode(mode)
        if registered is not None and mode is not registered.numeric_mode:
            raise ValidationError(
                "Numeric mode conflicts with the field registry",
                f"{self.field} is compared by {registered.numeric_mode.value}, not {mode.value}",
            )
        object.__setattr__(self, "mode", mode)

        scale = self.scale
        if scale is None and registered is not None and registered.numeric_mode is mode:
            scale = registered.scale
        if mode is NumericMode.tolerance:
            if scale is None or scale <= 0:
                raise ValidationError("Tolerance mode requires a positive scale", self.field)
            object.__setattr__(self, "scale", float(scale))
        else:
            object.__setattr__(self, "scale", None)

    @classmethod
    def for_field(cls, name: str, weight: float, **options: Any) -> "FieldRule":
        """Build a rule whose kind comes from the boat field registry."""
        kind = options.pop("kind", None)
        if kind is None:
            spec = get_field_spec(name)
            if spec is None:
                raise ValidationError("Unknown field kind", f"{name!r} is not a registered boat field")
            kind = spec.kind
        return cls(field=name, kind=kind, weight=weight, **options)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "field": self.field,
            "kind": self.kind.value,
            "weight": self.weight,
        }
        if self.kind is FieldKind.numeric:
            data["mode"] = self.mode.value
            if self.scale is not None:
                data["scale"] = self.scale
        if self.family_groups:
            data["family_groups"] = {k: list(v) for k, v in self.family_groups.items()}
        if self.kind is FieldKind.vector:
            data["metric"] = self.metric.value
            if self.metric is VectorMetric.euclidean:
                data["decay_constant"] = self.decay_constant
            if self.dimension is not None:
                data["dimension"] = self.dimension
        return data


@dataclass(frozen=True)
class WeightProfile:
    """
    Named weight configuration.

    Attributes:
        name: Profile name
        rules: Field rules in aggregation order
        uncertainty_fraction: Share of a field's weight credited when either
            side is absent
    """

    name: str
    rules: tuple[FieldRule, ...] = field(default_factory=tuple)
    uncertainty_fraction: float = DEFAULT_UNCERTAINTY_FRACTION

    def __post_init__(self) -> None:
        rules = tuple(self.rules)
        seen: set[str] = set()
        for rule in rules:
            if not isinstance(rule, FieldRule):
                raise ValidationError("Profile rules must be FieldRule instances", repr(rule))
            if rule.field in seen:
                raise ValidationError("Field configured twice", f"{self.name}: {rule.field}")
            seen.add(rule.field)
        object.__setattr__(self, "rules", rules)

        try:
            fraction = float(self.uncertainty_fraction)
        except (TypeError, ValueError):
            raise ValidationError("Uncertainty fraction must be a number", repr(self.uncertainty_fraction))
        if not 0.0 <= fraction <= 1.0:
            raise ValidationError("Uncertainty fraction must be within [0, 1]", repr(fraction))
        object.__setattr__(self, "uncertainty_fraction", fraction)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(rule.field for rule in self.rules)

    @property
    def weights(self) -> dict[str, float]:
        return {rule.field: rule.weight for rule in self.rules}

    @property
    def total_weight(self) -> float:
        return sum(rule.weight for rule in self.rules)

    def rule(self, field_name: str) -> FieldRule | None:
        for rule in self.rules:
            if rule.field == field_name:
                return rule
        return None

    def with_weights(self, name: str | None = None, **weights: float) -> "WeightProfile":
        """Copy with some weights replaced; unknown field names are rejected."""
        unknown = set(weights) - set(self.fields)
        if unknown:
            raise ValidationError("Cannot reweight fields not in profile", ", ".join(sorted(unknown)))
        rules = tuple(
            replace(rule, weight=weights[rule.field]) if rule.field in weights else rule
            for rule in self.rules
        )
        return replace(self, name=name or self.name, rules=rules)

    @classmethod
    def from_weights(
        cls,
        name: str,
        weights: Mapping[str, float],
        uncertainty_fraction: float = DEFAULT_UNCERTAINTY_FRACTION,
    ) -> "WeightProfile":
        """Build a profile from registered boat fields and their weights."""
        rules = tuple(FieldRule.for_field(field_name, weight) for field_name, weight in weights.items())
        return cls(name=name, rules=rules, uncertainty_fraction=uncertainty_fraction)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeightProfile":
        """
        Build a profile from plain data.

        Accepted shape:
            {
                "name": "custom",
                "uncertainty_fraction": 0.33,
                "fields": [
                    {"field": "length", "weight": 0.3, "mode": "ratio"},
                    {"field": "hull", "kind": "categorical", "weight": 0.1},
                ]
            }

        "fields" may also be a mapping of field name to weight, or to a dict
        of rule options.
        """
        if "fields" not in data:
            raise ValidationError("Profile definition needs a 'fields' entry")

        raw_fields = data["fields"]
        if isinstance(raw_fields, Mapping):
            items = [
                {"field": name, **options} if isinstance(options, Mapping) else {"field": name, "weight": options}
                for name, options in raw_fields.items()
            ]
        else:
            items = list(raw_fields)

        rules = []
        for item in items:
            options = dict(item)
            try:
                field_name = options.pop("field")
                weight = options.pop("weight")
            except KeyError as e:
                raise ValidationError("Field rule is missing a key", str(e))
            rules.append(FieldRule.for_field(field_name, weight, **options))

        return cls(
            name=str(data.get("name", "custom")),
            rules=tuple(rules),
            uncertainty_fraction=data.get("uncertainty_fraction", DEFAULT_UNCERTAINTY_FRACTION),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "uncertainty_fraction": self.uncertainty_fraction,
            "fields": [rule.to_dict() for rule in self.rules],
        }


# =============================================================================
# PRESETS
# =============================================================================

LEGACY_A = WeightProfile(
    name="legacy-a",
    rules=(
        FieldRule("type", FieldKind.categorical, 0.35, family_groups=BOAT_TYPE_FAMILIES),
        FieldRule("length", FieldKind.numeric, 0.25, mode=NumericMode.tolerance, scale=100.0),
        FieldRule("features", FieldKind.set_of_strings, 0.15),
        FieldRule("engine_type", FieldKind.categorical, 0.10, family_groups=ENGINE_TYPE_FAMILIES),
        FieldRule("hull_material", FieldKind.categorical, 0.10),
        FieldRule("name", FieldKind.free_text, 0.05),
    ),
)

# The dimensions weight (0.15) of the second matcher is split evenly
# across its four measurements. Each keeps its registered numeric mode.
LEGACY_B = WeightProfile(
    name="legacy-b",
    rules=(
        FieldRule("manufacturer", FieldKind.free_text, 0.15),
        FieldRule("model", FieldKind.free_text, 0.20),
        FieldRule("year", FieldKind.numeric, 0.05, mode=NumericMode.tolerance, scale=5.0),
        FieldRule("length", FieldKind.numeric, 0.0375, mode=NumericMode.tolerance, scale=100.0),
        FieldRule("beam", FieldKind.numeric, 0.0375, mode=NumericMode.ratio),
        FieldRule("draft", FieldKind.numeric, 0.0375, mode=NumericMode.ratio),
        FieldRule("weight", FieldKind.numeric, 0.0375, mode=NumericMode.ratio),
        FieldRule("features", FieldKind.set_of_strings, 0.25),
        FieldRule("category_tags", FieldKind.set_of_strings, 0.20),
    ),
)

HYBRID = WeightProfile(
    name="hybrid",
    rules=(
        FieldRule("type", FieldKind.categorical, 0.20, family_groups=BOAT_TYPE_FAMILIES),
        FieldRule("length", FieldKind.numeric, 0.15, mode=NumericMode.tolerance, scale=100.0),
        FieldRule("manufacturer", FieldKind.free_text, 0.10),
        FieldRule("model", FieldKind.free_text, 0.05),
        FieldRule("year", FieldKind.numeric, 0.05, mode=NumericMode.tolerance, scale=5.0),
        FieldRule("features", FieldKind.set_of_strings, 0.10),
        FieldRule("engine_type", FieldKind.categorical, 0.05, family_groups=ENGINE_TYPE_FAMILIES),
        FieldRule("hull_material", FieldKind.categorical, 0.05),
        FieldRule("image_embedding", FieldKind.vector, 0.25, metric=VectorMetric.cosine),
    ),
)

PRESET_PROFILES: Mapping[str, WeightProfile] = MappingProxyType(
    {profile.name: profile for profile in (LEGACY_A, LEGACY_B, HYBRID)}
)


def get_preset(name: str) -> WeightProfile:
    """
    Look up a preset profile by name.

    Raises:
        MissingConfiguration: if no preset has that name
    """
    try:
        return PRESET_PROFILES[name]
    except KeyError:
        available = ", ".join(sorted(PRESET_PROFILES))
        raise MissingConfiguration(f"Unknown weight profile {name!r}", f"available: {available}")
