"""
Queue scoring: turn candidate items into QueueEntries ordered by delete-probability.

Ordering is a stable descending sort on score, so equal scores keep the order
they arrived in (random sample order for fresh builds, pending-before-new for
refill merges).
"""

from typing import List, Sequence

import numpy as np

from ..classifier import SimilarityClassifier
from ..models.item import Item
from ..models.queue import UNSCORED, QueueEntry


def _sort_by_score(entries: List[QueueEntry]) -> List[QueueEntry]:
    """Descending by score; Python's sort is stable with reverse=True."""
    return sorted(entries, key=lambda e: e.score, reverse=True)


def unscored_entries(items: Sequence[Item]) -> List[QueueEntry]:
    """Training-phase entries, order untouched."""
    return [QueueEntry(item=item, score=UNSCORED) for item in items]


def score_candidates(
    items: Sequence[Item],
    vectors: Sequence[np.ndarray],
    classifier: SimilarityClassifier,
) -> List[QueueEntry]:
    """Score each item against one classifier snapshot and sort highest first."""
    if len(items) != len(vectors):
        raise ValueError(f"{len(items)} items but {len(vectors)} vectors")
    scores = classifier.predict_many(vectors)
    entries = [QueueEntry(item=item, score=score) for item, score in zip(items, scores)]
    return _sort_by_score(entries)


def merge_pending(
    pending: Sequence[QueueEntry],
    fresh: Sequence[QueueEntry],
) -> List[QueueEntry]:
    """
    Concatenate still-pending entries with newly scored ones and re-sort.

    Fresh entries whose item is already pending are dropped.
    """
    pending_ids = {e.item.id for e in pending}
    merged = list(pending) + [e for e in fresh if e.item.id not in pending_ids]
    return _sort_by_score(merged)
