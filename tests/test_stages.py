"""
Queue-building stage tests: candidate pool filtering, sampling, scoring order, refill merge.
"""

import random

import numpy as np

from triage.classifier import SimilarityClassifier
from triage.models.queue import UNSCORED, QueueEntry
from triage.stages import (
    get_candidate_pool,
    merge_pending,
    sample_candidates,
    score_candidates,
    unscored_entries,
)

from conftest import make_items


def _entry(item_id: int, score: float) -> QueueEntry:
    return QueueEntry(item=make_items(1, start=item_id)[0], score=score)


class TestCandidatePool:
    def test_excludes_every_set(self):
        library = make_items(10)
        pool = get_candidate_pool(library, {1, 2}, {5}, set())
        assert [i.id for i in pool] == [3, 4, 6, 7, 8, 9, 10]

    def test_no_exclusions(self):
        library = make_items(3)
        assert get_candidate_pool(library) == library

    def test_sample_respects_limit(self):
        pool = make_items(10)
        picked = sample_candidates(pool, 4, random.Random(1))
        assert len(picked) == 4
        assert len({i.id for i in picked}) == 4
        assert set(i.id for i in picked) <= set(i.id for i in pool)

    def test_sample_takes_all_when_pool_small(self):
        pool = make_items(3)
        picked = sample_candidates(pool, 50, random.Random(1))
        assert sorted(i.id for i in picked) == [1, 2, 3]

    def test_sample_is_seeded(self):
        pool = make_items(30)
        a = sample_candidates(pool, 10, random.Random(99))
        b = sample_candidates(pool, 10, random.Random(99))
        assert a == b

    def test_sample_empty(self):
        assert sample_candidates([], 5, random.Random(1)) == []
        assert sample_candidates(make_items(3), 0, random.Random(1)) == []


class TestScoring:
    def test_unscored_entries_keep_order(self):
        items = make_items(4)
        entries = unscored_entries(items)
        assert [e.item.id for e in entries] == [1, 2, 3, 4]
        assert all(e.score == UNSCORED for e in entries)

    def test_score_candidates_sorted_descending(self):
        clf = SimilarityClassifier(k=1)
        clf.add_sample([1.0, 0.0], True)
        clf.add_sample([0.0, 1.0], False)
        items = make_items(3)
        vectors = [np.array([0.0, 1.0]), np.array([1.0, 0.0]), np.array([0.1, 1.0])]

        entries = score_candidates(items, vectors, clf)

        assert [e.item.id for e in entries] == [2, 1, 3]
        assert [e.score for e in entries] == [1.0, 0.0, 0.0]

    def test_equal_scores_keep_arrival_order(self):
        clf = SimilarityClassifier()
        items = make_items(5)
        entries = score_candidates(items, [np.ones(2)] * 5, clf)
        assert [e.item.id for e in entries] == [1, 2, 3, 4, 5]
        assert all(e.score == 0.5 for e in entries)

    def test_merge_pending_resorts(self):
        pending = [_entry(1, 0.9), _entry(2, 0.3)]
        fresh = [_entry(3, 0.6), _entry(4, 0.1)]
        merged = merge_pending(pending, fresh)
        assert [e.item.id for e in merged] == [1, 3, 2, 4]

    def test_merge_pending_ties_favor_pending(self):
        pending = [_entry(1, 0.5)]
        fresh = [_entry(2, 0.5)]
        assert [e.item.id for e in merge_pending(pending, fresh)] == [1, 2]

    def test_merge_pending_drops_duplicates(self):
        pending = [_entry(1, 0.2)]
        fresh = [_entry(1, 0.8), _entry(2, 0.4)]
        merged = merge_pending(pending, fresh)
        assert [(e.item.id, e.score) for e in merged] == [(2, 0.4), (1, 0.2)]
