"""
Services module for boat similarity.

This module provides application-facing services:
- similarity: Comparison, ranking and cache-backed image similarity

Usage:
    from boat_similarity.services import get_similarity_service

    service = get_similarity_service()
    top = service.find_similar(boat, pool, limit=5)
"""

from .similarity import SimilarityService, get_similarity_service

__all__ = [
    # Similarity
    "SimilarityService",
    "get_similarity_service",
]
