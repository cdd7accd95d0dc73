"""
Tests for weighted aggregation of field scores.
"""

import pytest

from boat_similarity.core import ABSENT, DimensionMismatch, Entity, Present
from boat_similarity.similarity import (
    HYBRID,
    LEGACY_A,
    WeightedAggregator,
    WeightProfile,
    aggregate_scores,
)

from conftest import make_boat


class TestWorkedExample:
    def test_overall_score(self, yacht_42, yacht_40, three_field_profile):
        result = WeightedAggregator(three_field_profile).compare(yacht_42, yacht_40)

        # (0.35 * 1 + 0.25 * 0.98 + 0.15 * 1/3) / 0.75
        assert result.overall_score == pytest.approx(0.86, abs=1e-9)
        assert result.percentage == 86

    def test_breakdown(self, yacht_42, yacht_40, three_field_profile):
        result = WeightedAggregator(three_field_profile).compare(yacht_42, yacht_40)

        assert [item.field for item in result.breakdown] == ["type", "length", "features"]
        assert result.contribution("type").contribution == pytest.approx(0.35)
        assert result.contribution("length").contribution == pytest.approx(0.245)
        assert result.contribution("features").contribution == pytest.approx(0.05)
        assert result.per_field["length"] == pytest.approx(0.98)
        assert result.contribution("price") is None

    def test_symmetry(self, yacht_42, yacht_40, three_field_profile):
        aggregator = WeightedAggregator(three_field_profile)
        forward = aggregator.compare(yacht_42, yacht_40)
        backward = aggregator.compare(yacht_40, yacht_42)
        assert forward.overall_score == backward.overall_score

    def test_to_dict(self, yacht_42, yacht_40, three_field_profile):
        data = WeightedAggregator(three_field_profile).compare(yacht_42, yacht_40).to_dict()
        assert data["entity_a"] == "boat-1"
        assert data["profile"] == "three-field"
        assert data["breakdown"][2]["value_a"] == ["GPS", "Radar"]

        summary = WeightedAggregator(three_field_profile).compare(yacht_42, yacht_40).to_dict(
            include_breakdown=False
        )
        assert "breakdown" not in summary


class TestIdentityAndRange:
    def test_self_identity(self, full_sailboat):
        result = WeightedAggregator(LEGACY_A).compare(full_sailboat, full_sailboat)
        assert result.overall_score == pytest.approx(1.0)

    def test_range(self):
        a = make_boat("a", type="Sailboat", length=20, features=["GPS"], name="Alpha")
        b = make_boat("b", type="Bowrider", length=300, features=["Radar"], name="Zulu")
        result = WeightedAggregator(LEGACY_A).compare(a, b)
        assert 0.0 <= result.overall_score <= 1.0
        assert all(0.0 <= score <= 1.0 for score in result.per_field.values())

    def test_zero_total_weight(self, yacht_42, yacht_40):
        profile = WeightProfile.from_weights("zero", {"type": 0.0, "length": 0.0})
        assert WeightedAggregator(profile).compare(yacht_42, yacht_40).overall_score == 0.0

    def test_present_falsy_values_are_compared(self):
        profile = WeightProfile.from_weights("p", {"features": 1.0})
        a = Entity("a", {"features": Present(frozenset())})
        b = Entity("b", {"features": Present(frozenset())})
        result = WeightedAggregator(profile).compare(a, b)
        assert result.overall_score == 1.0
        assert result.breakdown[0].present


class TestAbsence:
    def test_one_side_and_both_sides_missing_are_equal(self, three_field_profile):
        aggregator = WeightedAggregator(three_field_profile)
        with_length = make_boat("a", type="Yacht", length=42, features=["GPS"])
        without_length = make_boat("b", type="Yacht", features=["GPS"])
        also_without = make_boat("c", type="Yacht", features=["GPS"])

        one_missing = aggregator.compare(with_length, without_length)
        both_missing = aggregator.compare(without_length, also_without)

        assert one_missing.overall_score == pytest.approx(both_missing.overall_score)

    def test_absence_independent_of_value(self, three_field_profile):
        aggregator = WeightedAggregator(three_field_profile)
        missing = make_boat("m", type="Yacht", features=["GPS"])
        short = make_boat("s", type="Yacht", length=10, features=["GPS"])
        long = make_boat("l", type="Yacht", length=400, features=["GPS"])

        assert aggregator.compare(missing, short).overall_score == pytest.approx(
            aggregator.compare(missing, long).overall_score
        )

    def test_absence_scores_below_close_match(self, three_field_profile):
        aggregator = WeightedAggregator(three_field_profile)
        a = make_boat("a", type="Yacht", length=42, features=["GPS"])
        close = make_boat("b", type="Yacht", length=41, features=["GPS"])
        missing = make_boat("c", type="Yacht", features=["GPS"])

        assert aggregator.compare(a, missing).overall_score < aggregator.compare(a, close).overall_score

    def test_absent_contribution_uses_uncertainty_fraction(self, three_field_profile):
        a = make_boat("a", type="Yacht")
        b = make_boat("b", type="Yacht")
        result = WeightedAggregator(three_field_profile).compare(a, b)

        length = result.contribution("length")
        assert length.score is None
        assert length.contribution == pytest.approx(0.25 / 3)
        assert length.applied_weight == 0.25

    def test_explicit_absent_marker(self, three_field_profile):
        a = Entity("a", {"type": Present("Yacht"), "length": ABSENT})
        assert not a.has("length")
        result = WeightedAggregator(three_field_profile).compare(a, a)
        assert result.contribution("length").score is None


class TestAggregateScores:
    def test_mixed_entries(self):
        overall, parts = aggregate_scores([("x", 1.0, 0.5), ("y", None, 0.5)], 0.5)
        assert overall == pytest.approx(0.75)
        assert parts == [("x", 0.5, 0.5), ("y", 0.25, 0.5)]

    def test_empty(self):
        assert aggregate_scores([], 1 / 3) == (0.0, [])


class TestVectors:
    def test_embeddings_contribute(self):
        a = make_boat("a", type="Sailboat", imageEmbedding=[1.0, 0.0])
        b = make_boat("b", type="Sailboat", imageEmbedding=[1.0, 0.0])
        result = WeightedAggregator(HYBRID).compare(a, b)
        assert result.contribution("image_embedding").score == pytest.approx(1.0)

    def test_dimension_mismatch(self):
        a = make_boat("a", imageEmbedding=[0.1] * 512)
        b = make_boat("b", imageEmbedding=[0.1] * 1024)
        with pytest.raises(DimensionMismatch):
            WeightedAggregator(HYBRID).compare(a, b)


class TestCorruptEmbeddings:
    def test_nan_embedding_is_an_error_not_a_match(self):
        from boat_similarity.core import ValidationError

        corrupt = Entity(
            "sail",
            {"type": Present("Sailboat"), "image_embedding": Present((float("nan"), 1.0))},
        )
        trawler = Entity(
            "trawler",
            {"type": Present("Trawler"), "image_embedding": Present((0.0, 1.0))},
        )
        with pytest.raises(ValidationError):
            WeightedAggregator(HYBRID).compare(corrupt, trawler)

    def test_non_numeric_value_on_numeric_field(self, three_field_profile):
        from boat_similarity.core import ValidationError

        a = Entity("a", {"length": Present("forty")})
        b = Entity("b", {"length": Present(40.0)})
        with pytest.raises(ValidationError):
            WeightedAggregator(three_field_profile).compare(a, b)
