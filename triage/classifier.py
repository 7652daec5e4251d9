"""
Online k-nearest-neighbor delete scorer.

Every decision becomes a labeled sample (vector, deleted). predict() ranks all
samples by cosine similarity to the query and returns the fraction of the k
nearest that were deleted. Samples are never evicted; a corrected decision
adds a second sample rather than replacing the first.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .utils.similarity import cosine_similarities

# Score for any vector when no samples exist yet.
NEUTRAL_SCORE = 0.5


def _fit(vector: np.ndarray, dimensions: int) -> np.ndarray:
    """Zero-pad or truncate a 1-d vector to the given length."""
    if vector.shape[0] == dimensions:
        return vector
    out = np.zeros(dimensions, dtype=np.float64)
    n = min(dimensions, vector.shape[0])
    out[:n] = vector[:n]
    return out


@dataclass(frozen=True)
class LabeledSample:
    vector: np.ndarray
    deleted: bool


class SimilarityClassifier:
    """
    k-NN over labeled feature vectors.

    add_sample and predict may run on different threads: predict ranks a copy
    of the sample list taken under the lock, so it never sees a half-appended
    state, and scoring itself runs outside the lock.
    """

    def __init__(self, k: int = 7):
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")
        self.k = k
        self._samples: List[LabeledSample] = []
        # Pinned by the first sample; later vectors are zero-padded or truncated to it.
        self._dimensions: Optional[int] = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def dimensions(self) -> Optional[int]:
        return self._dimensions

    def add_sample(self, vector: Sequence[float], deleted: bool) -> None:
        v = np.asarray(vector, dtype=np.float64).reshape(-1)
        with self._lock:
            if self._dimensions is None:
                self._dimensions = v.shape[0]
            self._samples.append(LabeledSample(_fit(v, self._dimensions), bool(deleted)))

    def snapshot(self) -> Tuple[LabeledSample, ...]:
        with self._lock:
            return tuple(self._samples)

    def label_counts(self) -> Tuple[int, int]:
        """(kept, deleted) sample counts, duplicates included."""
        samples = self.snapshot()
        deleted = sum(1 for s in samples if s.deleted)
        return len(samples) - deleted, deleted

    def predict(self, vector: Sequence[float]) -> float:
        return self.predict_many([vector])[0]

    def predict_many(self, vectors: Sequence[Sequence[float]]) -> List[float]:
        """Score a batch against one consistent snapshot of the sample set."""
        samples = self.snapshot()
        if not samples:
            return [NEUTRAL_SCORE] * len(vectors)
        matrix = np.vstack([s.vector for s in samples])
        labels = np.fromiter((s.deleted for s in samples), dtype=bool, count=len(samples))
        return [self._score(v, matrix, labels) for v in vectors]

    def _score(self, vector: Sequence[float], matrix: np.ndarray, labels: np.ndarray) -> float:
        query = _fit(np.asarray(vector, dtype=np.float64).reshape(-1), matrix.shape[1])
        sims = cosine_similarities(query, matrix)
        # Stable sort: equal similarity keeps insertion order, first inserted wins.
        nearest = np.argsort(-sims, kind="stable")[: self.k]
        deleted_count = int(labels[nearest].sum())
        return deleted_count / self.k
