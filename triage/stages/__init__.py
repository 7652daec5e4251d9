"""
Queue-building stages.

- candidate_pool: unseen items eligible for a build, random sampling.
- scoring: classifier scores, stable descending order, refill merge.
"""

from .candidate_pool import get_candidate_pool, sample_candidates
from .scoring import merge_pending, score_candidates, unscored_entries

__all__ = [
    "get_candidate_pool",
    "merge_pending",
    "sample_candidates",
    "score_candidates",
    "unscored_entries",
]
