"""
Similarity calculator for boat comparison.

Fuses structured-attribute similarity and image-embedding similarity into
one bounded score under a weight profile, ranks candidate pools and
explains results field by field.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, Union

from ..core.config import Settings, get_settings
from ..core.entity import Entity
from ..core.errors import MissingConfiguration, ValidationError
from ..core.models import BoatRecord
from .aggregator import ComparisonResult, WeightedAggregator
from .explainer import DifferenceExplainer, ExplainView, FieldDelta, FieldFact
from .profiles import WeightProfile, get_preset
from .ranking import RankedCandidate, RankingEngine, TextMatch

logger = logging.getLogger(__name__)

EntityLike = Union[Entity, BoatRecord, Mapping[str, Any]]
ProfileLike = Union[WeightProfile, str]


def as_entity(value: EntityLike) -> Entity:
    """Accept an Entity, a BoatRecord or a plain record dict."""
    if isinstance(value, Entity):
        return value
    if isinstance(value, BoatRecord):
        return value.to_entity()
    if isinstance(value, Mapping):
        return BoatRecord.model_validate(value).to_entity()
    raise ValidationError("Cannot compare value", f"unsupported type {type(value).__name__}")


class SimilarityCalculator:
    """
    Computes boat similarity under a weight profile.

    The profile used by each call is resolved in order: the profile passed
    to the call, the profile bound to this calculator, then the
    settings' default preset. If none resolves, MissingConfiguration is
    raised.

    All operations are pure; results are computed fresh per call.
    """

    def __init__(
        self,
        profile: ProfileLike | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the calculator.

        Args:
            profile: Profile (or preset name) bound to this calculator
            settings: Settings override, mainly for tests
        """
        self.settings = settings or get_settings()
        self._profile = self._coerce_profile(profile) if profile is not None else None
        self.ranking = RankingEngine()
        self.explainer = DifferenceExplainer()

    @staticmethod
    def _coerce_profile(profile: ProfileLike) -> WeightProfile:
        if isinstance(profile, WeightProfile):
            return profile
        if isinstance(profile, str):
            return get_preset(profile)
        raise ValidationError("Profile must be a WeightProfile or preset name", repr(profile))

    @property
    def profile(self) -> WeightProfile | None:
        """Profile bound to this calculator, if any."""
        return self._profile

    def resolve_profile(self, profile: ProfileLike | None = None) -> WeightProfile:
        """
        Resolve the profile for one call.

        Raises:
            MissingConfiguration: no profile supplied, bound or configured
        """
        if profile is not None:
            return self._coerce_profile(profile)
        if self._profile is not None:
            return self._profile
        if self.settings.default_profile:
            logger.debug("Using default profile %s", self.settings.default_profile)
            return get_preset(self.settings.default_profile)
        raise MissingConfiguration(
            "No weight profile configured",
            "pass a profile, bind one to the calculator, or set BOAT_SIMILARITY_DEFAULT_PROFILE",
        )

    # =========================================================================
    # Pairwise Comparison
    # =========================================================================

    def compare(
        self,
        entity_a: EntityLike,
        entity_b: EntityLike,
        profile: ProfileLike | None = None,
    ) -> ComparisonResult:
        """
        Compare two boats.

        Args:
            entity_a: First boat
            entity_b: Second boat
            profile: Profile override for this call

        Returns:
            ComparisonResult with overall score and per-field breakdown
        """
        resolved = self.resolve_profile(profile)
        return WeightedAggregator(resolved).compare(as_entity(entity_a), as_entity(entity_b))

    # =========================================================================
    # Ranking
    # =========================================================================

    def find_top_k(
        self,
        query: EntityLike,
        candidates: Sequence[EntityLike],
        profile: ProfileLike | None = None,
        k: int | None = None,
        threshold: float | None = None,
        annotate: bool = False,
    ) -> list[RankedCandidate]:
        """
        Find the boats most similar to query.

        Args:
            query: Reference boat
            candidates: Pool to search (the query is skipped if present)
            profile: Profile override for this call
            k: Maximum results (settings.default_top_k if None)
            threshold: Minimum score (settings.default_threshold if None)
            annotate: Attach ComparisonResults for explanation

        Returns:
            RankedCandidates in rank order
        """
        resolved = self.resolve_profile(profile)
        return self.ranking.find_top_k(
            as_entity(query),
            [as_entity(c) for c in candidates],
            resolved,
            k=self.settings.default_top_k if k is None else k,
            threshold=self.settings.default_threshold if threshold is None else threshold,
            annotate=annotate,
        )

    def search_by_text(
        self,
        text: str,
        field_name: str,
        candidates: Sequence[EntityLike],
        threshold: float = 0.7,
    ) -> list[TextMatch]:
        """Fuzzy lookup on one text field, e.g. model or manufacturer."""
        return self.ranking.search_by_text(
            text, field_name, [as_entity(c) for c in candidates], threshold
        )

    # =========================================================================
    # Explanation
    # =========================================================================

    def explain_difference(
        self,
        result: ComparisonResult,
        view: ExplainView | str = ExplainView.most_similar,
        limit: int | None = None,
    ) -> list[FieldFact]:
        """Ordered per-field facts for one comparison."""
        return self.explainer.explain(result, view, limit)

    def shared_traits(self, result: ComparisonResult, min_score: float = 0.9) -> list[FieldFact]:
        return self.explainer.shared_traits(result, min_score)

    def key_differences(self, result: ComparisonResult, max_score: float = 0.5) -> list[FieldFact]:
        return self.explainer.key_differences(result, max_score)

    def contrast(self, result_a: ComparisonResult, result_b: ComparisonResult) -> list[FieldDelta]:
        return self.explainer.contrast(result_a, result_b)
