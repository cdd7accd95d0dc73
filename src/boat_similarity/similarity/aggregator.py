"""
Weighted aggregation of per-field scores.

For every field in the profile, in declared order:
- both sides present: contribution = score * weight
- either side absent: contribution = weight * uncertainty_fraction
The applied weight is the full field weight in both cases, so absence
degrades the overall score smoothly instead of removing the field.

overall = sum(contribution) / sum(applied_weight), clamped to [0, 1],
and 0 when no weight is configured.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..core.entity import Entity, FieldValue
from ..core.types import FieldKind
from .attributes import compare_categorical, compare_numeric, compare_set, compare_text
from .profiles import FieldRule, WeightProfile
from .vectors import VectorComparator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldContribution:
    """One field's share of an overall score."""

    field: str
    kind: FieldKind
    value_a: Any
    value_b: Any
    score: Optional[float]  # None when either side is absent
    contribution: float
    applied_weight: float

    @property
    def present(self) -> bool:
        return self.score is not None

    @property
    def normalized(self) -> float:
        """contribution / applied_weight, 0.0 for a zero-weight field."""
        if self.applied_weight == 0:
            return 0.0
        return self.contribution / self.applied_weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "kind": self.kind.value,
            "value_a": to_jsonable(self.value_a),
            "value_b": to_jsonable(self.value_b),
            "score": self.score,
            "contribution": self.contribution,
            "applied_weight": self.applied_weight,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Result of comparing two entities under one profile."""

    entity_a: str
    entity_b: str
    profile: str
    overall_score: float
    breakdown: tuple[FieldContribution, ...] = field(default_factory=tuple)

    @property
    def per_field(self) -> dict[str, float]:
        """Field -> score in [0, 1], absent fields at their uncertainty share."""
        return {item.field: item.normalized for item in self.breakdown}

    @property
    def percentage(self) -> int:
        """Overall score as a whole percentage, halves rounded up."""
        return int(math.floor(self.overall_score * 100 + 0.5))

    def contribution(self, field_name: str) -> FieldContribution | None:
        for item in self.breakdown:
            if item.field == field_name:
                return item
        return None

    def to_dict(self, include_breakdown: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "entity_a": self.entity_a,
            "entity_b": self.entity_b,
            "profile": self.profile,
            "overall_score": self.overall_score,
            "percentage": self.percentage,
        }
        if include_breakdown:
            data["per_field"] = self.per_field
            data["breakdown"] = [item.to_dict() for item in self.breakdown]
        return data


def to_jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    if hasattr(value, "tolist"):
        return value.tolist()
    return value


def aggregate_scores(
    entries: Iterable[tuple[str, Optional[float], float]],
    uncertainty_fraction: float,
) -> tuple[float, list[tuple[str, float, float]]]:
    """
    Fuse (field, score_or_None, weight) entries into one score.

    Returns:
        (overall_score, [(field, contribution, applied_weight), ...])
    """
    total_contribution = 0.0
    total_weight = 0.0
    parts: list[tuple[str, float, float]] = []

    for field_name, score, weight in entries:
        if score is None:
            contribution = weight * uncertainty_fraction
        else:
            contribution = score * weight
        total_contribution += contribution
        total_weight += weight
        parts.append((field_name, contribution, weight))

    if total_weight == 0:
        return 0.0, parts

    overall = total_contribution / total_weight
    return max(0.0, min(1.0, overall)), parts


class WeightedAggregator:
    """
    Compares entities field by field under one WeightProfile.

    Holds one VectorComparator per vector field, so every vector seen by
    this aggregator must share a dimensionality. Create one aggregator per
    comparison call or ranking run.
    """

    def __init__(self, profile: WeightProfile):
        self.profile = profile
        self._vector_comparators: dict[str, VectorComparator] = {
            rule.field: VectorComparator(
                dimension=rule.dimension,
                metric=rule.metric,
                decay_constant=rule.decay_constant,
            )
            for rule in profile.rules
            if rule.kind is FieldKind.vector
        }

    def score_field(self, rule: FieldRule, a: FieldValue, b: FieldValue) -> Optional[float]:
        """Score one field, or None when either side is absent."""
        if not (a.is_present and b.is_present):
            return None

        value_a, value_b = a.value, b.value
        if rule.kind is FieldKind.numeric:
            return compare_numeric(value_a, value_b, rule.mode, rule.scale)
        if rule.kind is FieldKind.categorical:
            return compare_categorical(value_a, value_b, rule.family_groups)
        if rule.kind is FieldKind.set_of_strings:
            return compare_set(value_a, value_b)
        if rule.kind is FieldKind.free_text:
            return compare_text(value_a, value_b)
        return self._vector_comparators[rule.field].compare(value_a, value_b)

    def compare(self, entity_a: Entity, entity_b: Entity) -> ComparisonResult:
        """Compute a fresh ComparisonResult for two entities."""
        evaluated = []
        for rule in self.profile.rules:
            a = entity_a.get(rule.field)
            b = entity_b.get(rule.field)
            evaluated.append((rule, a, b, self.score_field(rule, a, b)))

        overall, parts = aggregate_scores(
            ((rule.field, score, rule.weight) for rule, _, _, score in evaluated),
            self.profile.uncertainty_fraction,
        )

        breakdown = tuple(
            FieldContribution(
                field=rule.field,
                kind=rule.kind,
                value_a=a.value if a.is_present else None,
                value_b=b.value if b.is_present else None,
                score=score,
                contribution=contribution,
                applied_weight=applied_weight,
            )
            for (rule, a, b, score), (_, contribution, applied_weight) in zip(evaluated, parts)
        )

        logger.debug(
            "Compared %s vs %s under %s: %.4f",
            entity_a.id,
            entity_b.id,
            self.profile.name,
            overall,
        )

        return ComparisonResult(
            entity_a=entity_a.id,
            entity_b=entity_b.id,
            profile=self.profile.name,
            overall_score=overall,
            breakdown=breakdown,
        )
