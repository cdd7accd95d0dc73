"""
Top-K ranking over a candidate pool.

Full scan: every candidate is scored against the query, so a ranking run
is O(n log n) in pool size. There is no index or approximate search.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..core.entity import Entity
from ..core.errors import ValidationError
from .aggregator import ComparisonResult, WeightedAggregator
from .attributes import compare_text
from .profiles import WeightProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedCandidate:
    """A candidate's place in a ranking."""

    entity_id: str
    overall_score: float
    rank: int
    result: Optional[ComparisonResult] = None

    def to_dict(self, include_breakdown: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "entity_id": self.entity_id,
            "overall_score": self.overall_score,
            "rank": self.rank,
        }
        if include_breakdown and self.result is not None:
            data["per_field"] = self.result.per_field
        return data


@dataclass(frozen=True)
class TextMatch:
    """Fuzzy text relevance of one candidate field."""

    entity_id: str
    relevance: float
    value: str


def _validate_ranking_args(k: int, threshold: float) -> None:
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise ValidationError("k must be a positive integer", repr(k))
    if not 0.0 <= threshold <= 1.0:
        raise ValidationError("Threshold must be within [0, 1]", repr(threshold))


class RankingEngine:
    """
    Scores a candidate pool against a query and returns a deterministic top-K.

    Ties are broken by ascending entity id, so repeated runs on the same
    input return identical output.
    """

    def find_top_k(
        self,
        query: Entity,
        candidates: Sequence[Entity],
        profile: WeightProfile,
        k: int,
        threshold: float = 0.0,
        annotate: bool = False,
    ) -> list[RankedCandidate]:
        """
        Find the k candidates most similar to query.

        Args:
            query: Reference entity
            candidates: Pool to search; the query itself is skipped if present
            profile: Weight profile for the comparison
            k: Maximum number of results
            threshold: Minimum overall score to include
            annotate: Attach each candidate's ComparisonResult

        Returns:
            Up to k RankedCandidates, rank 1 first

        Raises:
            ValidationError: empty pool, k < 1 or threshold outside [0, 1]
        """
        if not candidates:
            raise ValidationError("Candidate pool is empty")
        _validate_ranking_args(k, threshold)

        # One aggregator per run: all vectors in the run share a dimension
        aggregator = WeightedAggregator(profile)

        scored: list[ComparisonResult] = []
        excluded = 0
        for candidate in candidates:
            if candidate.id == query.id:
                excluded += 1
                continue
            result = aggregator.compare(query, candidate)
            if result.overall_score >= threshold:
                scored.append(result)

        scored.sort(key=lambda r: (-r.overall_score, r.entity_b))
        top = scored[:k]

        logger.info(
            "Ranked %d candidates for %s under %s (excluded=%d, above threshold=%d, returned=%d)",
            len(candidates),
            query.id,
            profile.name,
            excluded,
            len(scored),
            len(top),
        )

        return [
            RankedCandidate(
                entity_id=result.entity_b,
                overall_score=result.overall_score,
                rank=rank,
                result=result if annotate else None,
            )
            for rank, result in enumerate(top, 1)
        ]

    def search_by_text(
        self,
        text: str,
        field_name: str,
        candidates: Sequence[Entity],
        threshold: float = 0.7,
    ) -> list[TextMatch]:
        """
        Fuzzy-match free text against one field of every candidate.

        Used for model and manufacturer lookups. Candidates without the field
        are skipped.
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError("Threshold must be within [0, 1]", repr(threshold))

        matches = []
        for candidate in candidates:
            value = candidate.get(field_name)
            if not value.is_present:
                continue
            relevance = compare_text(text, str(value.value))
            if relevance >= threshold:
                matches.append(TextMatch(candidate.id, relevance, str(value.value)))

        matches.sort(key=lambda m: (-m.relevance, m.entity_id))
        return matches
