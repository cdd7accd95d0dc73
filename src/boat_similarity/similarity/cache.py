"""Bounded in-memory embedding cache with LRU or FIFO eviction."""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional

import numpy as np

from ..core.config import get_settings
from ..core.errors import ValidationError
from ..core.types import CachePolicy, parse_cache_policy
from .vectors import as_vector

logger = logging.getLogger(__name__)

ComputeFn = Callable[[], Any]
AsyncComputeFn = Callable[[], Awaitable[Any]]


def content_key(data: bytes) -> str:
    """Stable cache key for raw image bytes."""
    return hashlib.sha256(data).hexdigest()


class EmbeddingCache:
    """
    Thread-safe, size-limited key -> vector store.

    Keys are stable content identifiers supplied by the caller (image URL
    or content hash). Values are stored as read-only float64 arrays.

    The compute function runs outside the lock. Two threads missing on the
    same key may both compute; the last insert wins, which is harmless
    because a key always maps to the same vector.
    """

    def __init__(
        self,
        capacity: int | None = None,
        policy: CachePolicy | str | None = None,
    ):
        """
        Initialize cache.

        Args:
            capacity: Maximum number of vectors held (settings default if None)
            policy: Eviction order, "lru" or "fifo" (settings default if None)
        """
        settings = get_settings()
        capacity = settings.embedding_cache_capacity if capacity is None else capacity
        if capacity < 1:
            raise ValidationError("Cache capacity must be at least 1", repr(capacity))

        self.capacity = capacity
        self.policy = parse_cache_policy(policy or settings.embedding_cache_policy)
        self._cache: OrderedDict[str, np.ndarray] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def _freeze(vector: Any) -> np.ndarray:
        array = np.array(as_vector(vector))
        array.setflags(write=False)
        return array

    def get(self, key: str) -> Optional[np.ndarray]:
        """
        Get a cached vector.

        Args:
            key: Content identifier

        Returns:
            Cached vector if present, None otherwise
        """
        with self._lock:
            vector = self._cache.get(key)
            if vector is None:
                self._misses += 1
                return None
            self._hits += 1
            if self.policy is CachePolicy.lru:
                self._cache.move_to_end(key)
            return vector

    def put(self, key: str, vector: Any) -> np.ndarray:
        """Insert or replace a vector, evicting the oldest entries past capacity."""
        frozen = self._freeze(vector)
        with self._lock:
            self._cache[key] = frozen
            if self.policy is CachePolicy.lru:
                self._cache.move_to_end(key)
            while len(self._cache) > self.capacity:
                evicted, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted embedding %s (%s)", evicted, self.policy.value)
        return frozen

    def get_or_compute(self, key: str, compute_fn: ComputeFn) -> np.ndarray:
        """
        Return the cached vector for key, computing and storing it on a miss.

        Errors from compute_fn propagate unchanged and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        vector = compute_fn()
        return self.put(key, vector)

    async def aget_or_compute(self, key: str, compute_fn: AsyncComputeFn) -> np.ndarray:
        """Async variant of get_or_compute; awaits compute_fn on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached

        vector = await compute_fn()
        return self.put(key, vector)

    def evict(self, key: str) -> bool:
        """Remove one entry. Returns True if it was present."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self):
        """Clear all cached vectors."""
        with self._lock:
            self._cache.clear()

    def size(self) -> int:
        """Get number of cached entries."""
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def keys(self) -> list[str]:
        """Keys in eviction order, next to be evicted first."""
        with self._lock:
            return list(self._cache.keys())

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._cache),
                "capacity": self.capacity,
                "policy": self.policy.value,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }
