"""
Candidate pool — unseen items eligible for the next queue build.

Filters: no current decision, not already pending, not served and awaiting a
decision. Sampling is uniform without replacement, in random order.

The public entry points are get_candidate_pool and sample_candidates.
"""

import random
from typing import AbstractSet, List, Sequence

from ..models.item import Item


def _not_excluded(item: Item, excluded_ids: AbstractSet[int]) -> bool:
    """True if the item id is not in any exclusion set."""
    return item.id not in excluded_ids


def get_candidate_pool(
    library: Sequence[Item],
    *excluded: AbstractSet[int],
) -> List[Item]:
    """Library items (in library order) whose id is in none of the exclusion sets."""
    candidates = []
    for item in library:
        if any(not _not_excluded(item, ids) for ids in excluded):
            continue
        candidates.append(item)
    return candidates


def sample_candidates(
    pool: Sequence[Item],
    limit: int,
    rng: random.Random,
) -> List[Item]:
    """Up to limit items drawn at random from the pool, in random order."""
    if limit <= 0 or not pool:
        return []
    return rng.sample(list(pool), min(limit, len(pool)))
