"""
Structured explanations of comparison results.

Emits per-field facts only. Rendering them as prose is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..core.errors import ValidationError
from ..core.types import FieldKind
from .aggregator import ComparisonResult, FieldContribution, to_jsonable


class ExplainView(str, Enum):
    """Ordering of explanation facts."""

    most_similar = "most_similar"
    most_different = "most_different"


@dataclass(frozen=True)
class FieldFact:
    """One field's values and weighted contribution."""

    field: str
    value_a: Any
    value_b: Any
    contribution: float
    applied_weight: float
    score: Optional[float] = None
    common: tuple[str, ...] = ()
    only_a: tuple[str, ...] = ()
    only_b: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "field": self.field,
            "value_a": to_jsonable(self.value_a),
            "value_b": to_jsonable(self.value_b),
            "contribution": self.contribution,
            "applied_weight": self.applied_weight,
            "score": self.score,
        }
        if self.common or self.only_a or self.only_b:
            data["common"] = list(self.common)
            data["only_a"] = list(self.only_a)
            data["only_b"] = list(self.only_b)
        return data


@dataclass(frozen=True)
class FieldDelta:
    """How one field's contribution differs between two results."""

    field: str
    contribution_a: float
    contribution_b: float
    delta: float


def _spellings(values: Any) -> dict[str, str]:
    # Case-folded key -> first spelling in sorted order
    if isinstance(values, str):
        values = (values,)
    index: dict[str, str] = {}
    for value in sorted((str(v) for v in values)):
        index.setdefault(value.strip().casefold(), value)
    return index


def _set_overlap(a: Any, b: Any) -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
    index_a = _spellings(a)
    index_b = _spellings(b)
    common = tuple(index_a[k] for k in sorted(index_a.keys() & index_b.keys()))
    only_a = tuple(index_a[k] for k in sorted(index_a.keys() - index_b.keys()))
    only_b = tuple(index_b[k] for k in sorted(index_b.keys() - index_a.keys()))
    return common, only_a, only_b


def _to_fact(item: FieldContribution) -> FieldFact:
    common: tuple[str, ...] = ()
    only_a: tuple[str, ...] = ()
    only_b: tuple[str, ...] = ()
    if item.kind is FieldKind.set_of_strings and item.present:
        common, only_a, only_b = _set_overlap(item.value_a, item.value_b)

    return FieldFact(
        field=item.field,
        value_a=item.value_a,
        value_b=item.value_b,
        contribution=item.contribution,
        applied_weight=item.applied_weight,
        score=item.score,
        common=common,
        only_a=only_a,
        only_b=only_b,
    )


class DifferenceExplainer:
    """
    Turns a ComparisonResult breakdown into ordered field facts.

    Sorting is stable, so fields with equal contribution keep their
    profile order.
    """

    def explain(
        self,
        result: ComparisonResult,
        view: ExplainView | str = ExplainView.most_similar,
        limit: int | None = None,
    ) -> list[FieldFact]:
        """
        Facts ordered by contribution.

        Args:
            result: Comparison to explain
            view: "most_similar" (descending contribution) or
                "most_different" (ascending)
            limit: Keep only the first N facts
        """
        try:
            view = ExplainView(view)
        except ValueError:
            raise ValidationError("Unknown explanation view", repr(view))
        if limit is not None and limit < 0:
            raise ValidationError("Limit cannot be negative", repr(limit))

        facts = [_to_fact(item) for item in result.breakdown]
        facts.sort(key=lambda f: f.contribution, reverse=view is ExplainView.most_similar)
        return facts if limit is None else facts[:limit]

    def shared_traits(self, result: ComparisonResult, min_score: float = 0.9) -> list[FieldFact]:
        """Present fields scoring at least min_score, highest contribution first."""
        facts = [
            _to_fact(item)
            for item in result.breakdown
            if item.present and item.score >= min_score
        ]
        facts.sort(key=lambda f: f.contribution, reverse=True)
        return facts

    def key_differences(self, result: ComparisonResult, max_score: float = 0.5) -> list[FieldFact]:
        """Present fields scoring at most max_score, lowest score first."""
        facts = [
            _to_fact(item)
            for item in result.breakdown
            if item.present and item.score <= max_score
        ]
        facts.sort(key=lambda f: f.score)
        return facts

    def contrast(self, result_a: ComparisonResult, result_b: ComparisonResult) -> list[FieldDelta]:
        """
        Per-field contribution deltas between two results of one profile.

        Typically result_a and result_b compare the same query with two
        candidates; the largest absolute deltas explain the rank gap.

        Raises:
            ValidationError: if the breakdowns cover different fields
        """
        fields_a = [item.field for item in result_a.breakdown]
        fields_b = [item.field for item in result_b.breakdown]
        if fields_a != fields_b:
            raise ValidationError(
                "Cannot contrast results from different profiles",
                f"{result_a.profile} vs {result_b.profile}",
            )

        deltas = [
            FieldDelta(
                field=a.field,
                contribution_a=a.contribution,
                contribution_b=b.contribution,
                delta=a.contribution - b.contribution,
            )
            for a, b in zip(result_a.breakdown, result_b.breakdown)
        ]
        deltas.sort(key=lambda d: abs(d.delta), reverse=True)
        return deltas
