"""
Feature vector cache.

Maps item id -> feature vector, computed once per item per process by the
external embedder and memoized. Embedder calls run on the default thread pool
so a slow extraction never blocks the event loop, and concurrent requests for
the same item share one in-flight call.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from .models.item import Item
from .protocols import Embedder

logger = logging.getLogger(__name__)


class FeatureVectorStore:
    """Append-only, per-process embedding cache keyed by item id."""

    def __init__(self, embedder: Embedder, dimensions: int, concurrency: int = 4):
        self._embedder = embedder
        self.dimensions = dimensions
        self._vectors: Dict[int, np.ndarray] = {}
        self._in_flight: Dict[int, "asyncio.Task[np.ndarray]"] = {}
        self._concurrency = concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None
        self.fallback_count = 0

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._vectors

    def __len__(self) -> int:
        return len(self._vectors)

    def zero_vector(self) -> np.ndarray:
        return np.zeros(self.dimensions, dtype=np.float64)

    async def get(self, item: Item) -> np.ndarray:
        """
        Cached vector for item, computing it on first request.

        The computation runs in its own task; a cancelled caller stops waiting
        but the vector is still cached for everyone else waiting on it.
        """
        cached = self._vectors.get(item.id)
        if cached is not None:
            return cached
        task = self._in_flight.get(item.id)
        if task is None:
            task = asyncio.create_task(self._compute_and_store(item))
            self._in_flight[item.id] = task
        return await asyncio.shield(task)

    async def get_many(self, items: Sequence[Item]) -> List[np.ndarray]:
        """Vectors for items, in order. Extraction runs concurrently up to the limit."""
        if not items:
            return []
        vectors = await asyncio.gather(*(self.get(item) for item in items))
        return list(vectors)

    def discard(self, item_ids) -> None:
        for item_id in item_ids:
            self._vectors.pop(item_id, None)

    def clear(self) -> None:
        self._vectors.clear()

    async def _compute_and_store(self, item: Item) -> np.ndarray:
        try:
            vector = await self._compute(item)
        finally:
            self._in_flight.pop(item.id, None)
        self._vectors[item.id] = vector
        return vector

    async def _compute(self, item: Item) -> np.ndarray:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._concurrency)
        async with self._semaphore:
            try:
                raw = await asyncio.to_thread(self._embedder.embed, item.embed_key)
            except Exception as e:
                return self._fallback(item, f"embedder raised {type(e).__name__}: {e}")
        if raw is None:
            return self._fallback(item, "embedder returned no vector")
        try:
            vector = np.asarray(raw, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as e:
            return self._fallback(item, f"vector not numeric: {e}")
        if vector.shape[0] != self.dimensions:
            return self._fallback(
                item, f"expected {self.dimensions} dimensions, got {vector.shape[0]}"
            )
        return vector

    def _fallback(self, item: Item, reason: str) -> np.ndarray:
        self.fallback_count += 1
        logger.warning(
            "[embed_fallback] ZERO_VECTOR item_id=%s handle=%s reason=%s",
            item.id, item.handle, reason,
        )
        return self.zero_vector()
