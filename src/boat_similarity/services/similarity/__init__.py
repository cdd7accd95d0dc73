"""
Similarity service.

Wraps SimilarityCalculator with a shared embedding cache.
"""

from .service import SimilarityService, get_similarity_service

__all__ = ["SimilarityService", "get_similarity_service"]
