"""
Tests for the SimilarityCalculator facade and the SimilarityService.
"""

import asyncio

import pytest

from boat_similarity import (
    BoatRecord,
    LEGACY_A,
    MissingConfiguration,
    Settings,
    SimilarityCalculator,
    SimilarityService,
    ValidationError,
    get_similarity_service,
)
from boat_similarity.similarity import EmbeddingCache

from conftest import make_boat


# =========================================================================
# Profile resolution
# =========================================================================


class TestProfileResolution:
    def test_no_profile_anywhere(self, yacht_42, yacht_40):
        calculator = SimilarityCalculator(settings=Settings(default_profile=""))
        with pytest.raises(MissingConfiguration) as exc:
            calculator.compare(yacht_42, yacht_40)
        assert exc.value.to_dict()["error"]["code"] == "MISSING_CONFIGURATION"

    def test_settings_default(self, yacht_42, yacht_40):
        calculator = SimilarityCalculator(settings=Settings(default_profile="legacy-a"))
        assert calculator.compare(yacht_42, yacht_40).profile == "legacy-a"

    def test_default_profile_from_environment(self, monkeypatch, yacht_42, yacht_40):
        monkeypatch.setenv("BOAT_SIMILARITY_DEFAULT_PROFILE", "legacy-b")
        assert SimilarityCalculator().compare(yacht_42, yacht_40).profile == "legacy-b"

    def test_bound_profile_beats_settings(self, yacht_42, yacht_40):
        calculator = SimilarityCalculator("legacy-b", settings=Settings(default_profile="hybrid"))
        assert calculator.compare(yacht_42, yacht_40).profile == "legacy-b"

    def test_call_profile_beats_bound(self, yacht_42, yacht_40, three_field_profile):
        calculator = SimilarityCalculator(LEGACY_A)
        result = calculator.compare(yacht_42, yacht_40, profile=three_field_profile)
        assert result.overall_score == pytest.approx(0.86)

    def test_unknown_preset(self):
        with pytest.raises(MissingConfiguration):
            SimilarityCalculator("legacy-z")

    def test_bad_profile_type(self):
        with pytest.raises(ValidationError):
            SimilarityCalculator(42)


# =========================================================================
# Operations
# =========================================================================


class TestCalculator:
    def test_accepts_records_and_dicts(self, three_field_profile):
        calculator = SimilarityCalculator(three_field_profile)
        record = BoatRecord(id="r1", type="Yacht", length=42, features=["GPS", "Radar"])
        raw = {"id": "r2", "type": "Yacht", "length": 40, "features": ["GPS", "Sonar"]}

        assert calculator.compare(record, raw).overall_score == pytest.approx(0.86)

    def test_rejects_other_inputs(self, yacht_42):
        with pytest.raises(ValidationError):
            SimilarityCalculator(LEGACY_A).compare(yacht_42, "boat-2")

    def test_find_top_k_uses_settings_defaults(self, yacht_42):
        calculator = SimilarityCalculator(
            LEGACY_A, settings=Settings(default_top_k=2, default_threshold=0.0)
        )
        pool = [make_boat(str(i), type="Yacht", length=40 + i) for i in range(5)]
        ranked = calculator.find_top_k(yacht_42, pool)
        assert [c.entity_id for c in ranked] == ["2", "1"]

    def test_explain_difference(self, yacht_42, yacht_40, three_field_profile):
        calculator = SimilarityCalculator(three_field_profile)
        result = calculator.compare(yacht_42, yacht_40)
        facts = calculator.explain_difference(result, "most_different", limit=1)
        assert facts[0].field == "features"

    def test_search_by_text(self):
        calculator = SimilarityCalculator(LEGACY_A)
        pool = [{"id": 1, "manufacturer": "Beneteau"}, {"id": 2, "manufacturer": "Bavaria"}]
        matches = calculator.search_by_text("beneteau", "manufacturer", pool)
        assert [m.entity_id for m in matches] == ["1"]


# =========================================================================
# Service
# =========================================================================


@pytest.fixture
def embeddings():
    return {"bow.jpg": [1.0, 0.0], "side.jpg": [0.0, 1.0], "stern.jpg": [1.0, 0.0]}


class TestSimilarityService:
    def test_compare_images_uses_cache(self, embeddings):
        service = SimilarityService(cache=EmbeddingCache(capacity=8))
        calls = []

        def extract(key):
            calls.append(key)
            return embeddings[key]

        assert service.compare_images("bow.jpg", "side.jpg", extract) == pytest.approx(0.5)
        assert service.compare_images("bow.jpg", "stern.jpg", extract) == pytest.approx(1.0)
        assert calls == ["bow.jpg", "side.jpg", "stern.jpg"]

    def test_compare_images_euclidean(self, embeddings):
        service = SimilarityService(
            cache=EmbeddingCache(capacity=8), settings=Settings(distance_decay_constant=1.0)
        )
        score = service.compare_images("bow.jpg", "stern.jpg", embeddings.get, metric="euclidean")
        assert score == pytest.approx(1.0)

    def test_async_compare_images(self, embeddings):
        service = SimilarityService(cache=EmbeddingCache(capacity=8))

        async def extract(key):
            return embeddings[key]

        score = asyncio.run(service.acompare_images("bow.jpg", "side.jpg", extract))
        assert score == pytest.approx(0.5)
        assert service.cache.size() == 2

    def test_extract_failure_propagates(self):
        service = SimilarityService(cache=EmbeddingCache(capacity=8))

        def extract(key):
            raise RuntimeError("model unavailable")

        with pytest.raises(RuntimeError):
            service.compare_images("a.jpg", "b.jpg", extract)
        assert service.cache.size() == 0

    def test_embed_attaches_vector(self, yacht_42, embeddings):
        service = SimilarityService(cache=EmbeddingCache(capacity=8))
        boat = service.embed(yacht_42, "bow.jpg", embeddings.get)
        assert boat.value("image_embedding") == (1.0, 0.0)
        assert not yacht_42.has("image_embedding")

    def test_aembed(self, yacht_42, embeddings):
        service = SimilarityService(cache=EmbeddingCache(capacity=8))

        async def extract(key):
            return embeddings[key]

        boat = asyncio.run(service.aembed(yacht_42, "side.jpg", extract))
        assert boat.value("image_embedding") == (0.0, 1.0)

    def test_find_similar(self, yacht_42, yacht_40):
        service = SimilarityService(calculator=SimilarityCalculator(LEGACY_A))
        ranked = service.find_similar(yacht_42, [yacht_40], limit=1)
        assert ranked[0].entity_id == "boat-2"

    def test_get_status(self):
        status = SimilarityService(cache=EmbeddingCache(capacity=8)).get_status()
        assert status["service"] == "similarity"
        assert status["profiles"] == ["hybrid", "legacy-a", "legacy-b"]
        assert status["default_profile"] == "hybrid"
        assert status["cache"]["capacity"] == 8

    def test_singleton(self):
        assert get_similarity_service() is get_similarity_service()
