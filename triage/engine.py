"""
Review queue engine: phase state machine, queue builds, background refill, saturation reset.

Phases:
- TRAINING: random unseen items, unscored, until min KEEP/DELETE counts are met.
- SORTING: queue being rebuilt from a fresh random sample; pending_snapshot() is empty.
- SORTED: descending delete-probability, topped up by a single-flight background
  refill and rebuilt from scratch after a run of consecutive KEEPs.

One foreground caller drives record_decision/next_item sequentially; the
background refill scores its batch without touching queue state and hands the
result to _apply_refill, which swaps queue and cursor under the same lock as
every other multi-field mutation. All methods must run on one event loop.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .classifier import SimilarityClassifier
from .errors import EngineNotInitializedError
from .feature_cache import FeatureVectorStore
from .models.config import QueueConfig, resolve_config
from .models.decision import Decision, Outcome
from .models.item import Item, ensure_items
from .models.queue import Phase, QueueEntry, QueueStats
from .protocols import DecisionLedger, Embedder
from .stages.candidate_pool import get_candidate_pool, sample_candidates
from .stages.scoring import merge_pending, score_candidates, unscored_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefillBatch:
    """Newly scored entries plus the queue generation they were drawn against."""

    generation: int
    entries: List[QueueEntry]


class ReviewQueueEngine:
    """Owns the working queue, cursor, phase and counters for one library."""

    def __init__(
        self,
        ledger: DecisionLedger,
        embedder: Embedder,
        config: Optional[QueueConfig] = None,
    ):
        self.config = resolve_config(config)
        self._ledger = ledger
        self._features = FeatureVectorStore(
            embedder,
            dimensions=self.config.embedding_dimensions,
            concurrency=self.config.embed_concurrency,
        )
        self._classifier = SimilarityClassifier(k=self.config.knn_k)
        self._rng = random.Random(self.config.seed)
        self._lock = asyncio.Lock()

        self._library: Dict[int, Item] = {}
        self._decisions: Dict[int, Outcome] = {}
        # Served by next_item but not decided yet; kept out of every rebuild.
        self._outstanding: Set[int] = set()

        self._queue: List[QueueEntry] = []
        self._cursor = 0
        # Bumped on every wholesale queue replacement; stale refills compare against it.
        self._generation = 0
        self._phase = Phase.TRAINING

        self._keep_count = 0
        self._delete_count = 0
        self._consecutive_keeps = 0

        self._refill_task: Optional["asyncio.Task[None]"] = None
        self._initialized = False

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def current_index(self) -> int:
        return self._cursor

    @property
    def remaining(self) -> int:
        return max(0, len(self._queue) - self._cursor)

    @property
    def consecutive_keeps(self) -> int:
        return self._consecutive_keeps

    @property
    def is_refilling(self) -> bool:
        return self._refill_task is not None and not self._refill_task.done()

    @property
    def classifier(self) -> SimilarityClassifier:
        return self._classifier

    @property
    def features(self) -> FeatureVectorStore:
        return self._features

    @property
    def seen_ids(self) -> Set[int]:
        return set(self._decisions)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def training_stats(self) -> Tuple[int, int]:
        """(keep_count, delete_count) as tracked for the training thresholds."""
        return self._keep_count, self._delete_count

    def get_item(self, item_id: int) -> Optional[Item]:
        return self._library.get(item_id)

    def library(self) -> List[Item]:
        return list(self._library.values())

    def pending_snapshot(self) -> List[QueueEntry]:
        """Unconsumed entries in serving order. Empty while SORTING."""
        if self._phase == Phase.SORTING:
            return []
        return list(self._queue[self._cursor:])

    def trash_item_ids(self) -> Set[int]:
        """Ids whose current decision is DELETE."""
        return {item_id for item_id, o in self._decisions.items() if o == Outcome.DELETE}

    def stats(self) -> QueueStats:
        pending = self.pending_snapshot()
        keep_samples, delete_samples = self._classifier.label_counts()
        return QueueStats(
            phase=self._phase,
            current_index=self._cursor,
            queue_length=len(self._queue),
            remaining=self.remaining,
            keep_count=self._keep_count,
            delete_count=self._delete_count,
            min_keep_samples=self.config.min_keep_samples,
            min_delete_samples=self.config.min_delete_samples,
            consecutive_keeps=self._consecutive_keeps,
            saturation_threshold=self.config.saturation_threshold,
            is_refilling=self.is_refilling,
            seen_count=len(self._decisions),
            library_size=len(self._library),
            samples=keep_samples + delete_samples,
            status=self._status_line(),
            top_score=pending[0].score if pending and self._phase == Phase.SORTED else None,
        )

    def _status_line(self) -> str:
        cfg = self.config
        if self._phase == Phase.TRAINING:
            return (
                f"Training: {self._keep_count} KEEP, {self._delete_count} DELETE "
                f"(need {cfg.min_keep_samples}/{cfg.min_delete_samples})"
            )
        if self._phase == Phase.SORTING:
            return "Scoring photos... Please wait"
        refilling = " | Loading more..." if self.is_refilling else ""
        return (
            f"AI Queue: {self.remaining} left | "
            f"Keeps: {self._consecutive_keeps}/{cfg.saturation_threshold}{refilling}"
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self, all_items: Sequence[Union[Dict, Item]]) -> None:
        """
        Load the library and rebuild state from the ledger.

        Replays every persisted decision: counts KEEP/DELETE, marks items seen,
        and feeds one labeled sample per decided library item to a fresh
        classifier. Then builds a SORTED queue if the training thresholds are
        already met, else a TRAINING queue. Safe to call again; state is rebuilt.
        """
        async with self._lock:
            logger.info("[queue] INITIALIZE start items=%s", len(all_items))
            library: Dict[int, Item] = {}
            for item in ensure_items(list(all_items)):
                library.setdefault(item.id, item)
            decisions = await asyncio.to_thread(self._ledger.get_all)

            self._library = library
            self._decisions = {}
            self._outstanding = set()
            self._classifier = SimilarityClassifier(k=self.config.knn_k)
            self._keep_count = 0
            self._delete_count = 0
            self._consecutive_keeps = 0
            for d in decisions:
                self._decisions[d.item_id] = d.outcome
            for outcome in self._decisions.values():
                if outcome == Outcome.KEEP:
                    self._keep_count += 1
                else:
                    self._delete_count += 1
            logger.info(
                "[queue] restored decisions=%s keeps=%s deletes=%s",
                len(self._decisions), self._keep_count, self._delete_count,
            )

            await self._replay_samples()
            self._initialized = True
            await self._build_initial_queue()
            logger.info("[queue] INITIALIZE complete phase=%s queue=%s", self._phase.value, len(self._queue))

    async def _replay_samples(self) -> None:
        decided = [
            (self._library[item_id], outcome)
            for item_id, outcome in self._decisions.items()
            if item_id in self._library
        ]
        if not decided:
            return
        vectors = await self._features.get_many([item for item, _ in decided])
        for (_, outcome), vector in zip(decided, vectors):
            self._classifier.add_sample(vector, outcome == Outcome.DELETE)
        logger.info("[queue] replayed %s labeled samples into classifier", len(decided))

    async def reset(self) -> None:
        """Forget every decision (ledger included) and start training again."""
        self._require_initialized("reset")
        await asyncio.to_thread(self._ledger.delete_all)
        async with self._lock:
            self._decisions.clear()
            self._outstanding.clear()
            self._classifier = SimilarityClassifier(k=self.config.knn_k)
            self._keep_count = 0
            self._delete_count = 0
            self._consecutive_keeps = 0
            logger.info("[queue] RESET ledger cleared, restarting training")
            await self._build_initial_queue()

    async def wait_for_refill(self) -> None:
        """Block until the in-flight background refill (if any) has been applied."""
        task = self._refill_task
        if task is not None:
            await task

    async def close(self) -> None:
        """Let any in-flight refill finish, then drop cached vectors."""
        await self.wait_for_refill()
        self._features.clear()
        logger.info("[queue] closed, feature cache cleared")

    # -------------------------------------------------------------------------
    # Foreground operations
    # -------------------------------------------------------------------------

    async def next_item(self) -> Optional[QueueEntry]:
        """
        Serve the entry at the cursor and advance, or None when nothing is queued.

        The training -> sorted check runs first so a stale training item is never
        served once both thresholds are met.
        """
        self._require_initialized("next_item")
        async with self._lock:
            if self._phase == Phase.TRAINING and self._thresholds_met():
                logger.info(
                    "[queue] TRAINING_COMPLETE keeps=%s deletes=%s, switching to sorted queue",
                    self._keep_count, self._delete_count,
                )
                await self._build_sorted_queue()

            if self._phase == Phase.SORTED and self._cursor >= len(self._queue):
                await self._refill_exhausted_queue()

            if self._cursor >= len(self._queue):
                logger.debug("[queue] EMPTY phase=%s", self._phase.value)
                return None

            entry = self._queue[self._cursor]
            self._cursor += 1
            self._outstanding.add(entry.item.id)
            logger.debug(
                "[queue] serve %s/%s item_id=%s score=%.3f",
                self._cursor, len(self._queue), entry.item.id, entry.score,
            )

            if self._phase == Phase.TRAINING and self._cursor >= len(self._queue):
                logger.info(
                    "[queue] training queue exhausted keeps=%s/%s deletes=%s/%s, adding more",
                    self._keep_count, self.config.min_keep_samples,
                    self._delete_count, self.config.min_delete_samples,
                )
                if not await self._append_training_items():
                    logger.info("[queue] no unseen items left, training incomplete")

            if self._phase == Phase.SORTED:
                self._maybe_start_refill()

            return entry

    async def record_decision(self, item: Item, outcome: Union[Outcome, str]) -> Decision:
        """
        Persist a decision and learn from it.

        The ledger write comes first; a LedgerError propagates before any
        in-memory state changes. A DELETE resets the consecutive-KEEP streak;
        reaching saturation_threshold while SORTED rebuilds the queue.
        """
        self._require_initialized("record_decision")
        outcome = Outcome(outcome)
        decision = await asyncio.to_thread(self._ledger.upsert, item.id, outcome)

        vector = await self._features.get(item)
        self._classifier.add_sample(vector, outcome == Outcome.DELETE)

        async with self._lock:
            self._library.setdefault(item.id, item)
            previous = self._decisions.get(item.id)
            self._mark_decided(item.id, outcome)

            if self._phase == Phase.TRAINING:
                self._uncount(previous)
                self._count(outcome)
                logger.info(
                    "[queue] training keeps=%s deletes=%s (need %s/%s)",
                    self._keep_count, self._delete_count,
                    self.config.min_keep_samples, self.config.min_delete_samples,
                )

            if outcome == Outcome.KEEP:
                self._consecutive_keeps += 1
            else:
                self._consecutive_keeps = 0
            logger.debug(
                "[queue] recorded item_id=%s outcome=%s consecutive_keeps=%s",
                item.id, outcome.value, self._consecutive_keeps,
            )

            if (
                self._phase == Phase.SORTED
                and self._consecutive_keeps >= self.config.saturation_threshold
            ):
                logger.info(
                    "[queue] SATURATION %s consecutive KEEPs, rebuilding queue",
                    self._consecutive_keeps,
                )
                await self._build_sorted_queue()
        return decision

    async def restore_decision(self, item: Item) -> Decision:
        """
        Correct a DELETE to KEEP (restore from trash).

        Adds a deleted=False sample; the earlier deleted=True sample for the same
        vector stays in the classifier.
        """
        self._require_initialized("restore_decision")
        decision = await asyncio.to_thread(self._ledger.upsert, item.id, Outcome.KEEP)

        vector = await self._features.get(item)
        self._classifier.add_sample(vector, False)

        async with self._lock:
            self._library.setdefault(item.id, item)
            previous = self._decisions.get(item.id)
            self._mark_decided(item.id, Outcome.KEEP)
            if self._phase == Phase.TRAINING:
                self._uncount(previous)
                self._count(Outcome.KEEP)
        logger.info("[queue] restored item_id=%s from trash (was %s)", item.id, previous and previous.value)
        return decision

    async def purge_items(self, item_ids: Iterable[int]) -> int:
        """
        Forget items whose content was permanently deleted.

        Removes ledger rows, seen-set entries, library entries and cached vectors.
        While TRAINING, each purged DELETE lowers the delete count (floored at 0).
        Returns the number of ledger rows removed.
        """
        self._require_initialized("purge_items")
        removed = 0
        for item_id in list(item_ids):
            if await asyncio.to_thread(self._ledger.delete_by_item_id, item_id):
                removed += 1
            async with self._lock:
                previous = self._decisions.pop(item_id, None)
                if self._phase == Phase.TRAINING and previous == Outcome.DELETE:
                    self._delete_count = max(0, self._delete_count - 1)
                self._outstanding.discard(item_id)
                self._library.pop(item_id, None)
                self._drop_pending(item_id)
                self._features.discard([item_id])
        logger.info("[queue] purged %s ledger rows", removed)
        return removed

    async def trash(self) -> List[Decision]:
        """DELETE decisions still flagged as pending trash."""
        return await asyncio.to_thread(self._ledger.list_trash)

    async def empty_trash(self) -> int:
        """Clear the pending-trash flag on every decision."""
        cleared = await asyncio.to_thread(self._ledger.empty_trash)
        logger.info("[queue] emptied trash flags=%s", cleared)
        return cleared

    # -------------------------------------------------------------------------
    # Queue builds (caller holds self._lock)
    # -------------------------------------------------------------------------

    def _thresholds_met(self) -> bool:
        return (
            self._keep_count >= self.config.min_keep_samples
            and self._delete_count >= self.config.min_delete_samples
        )

    async def _build_initial_queue(self) -> None:
        if self._thresholds_met():
            await self._build_sorted_queue()
        else:
            await self._build_training_queue()

    def _candidate_pool(self, exclude_queued: bool) -> List[Item]:
        excluded = [set(self._decisions), self._outstanding]
        if exclude_queued:
            excluded.append({e.item.id for e in self._queue[self._cursor:]})
        return get_candidate_pool(list(self._library.values()), *excluded)

    def _replace_queue(self, entries: List[QueueEntry]) -> None:
        self._queue = entries
        self._cursor = 0
        self._generation += 1

    async def _build_training_queue(self) -> None:
        self._phase = Phase.TRAINING
        self._replace_queue([])
        pool = self._candidate_pool(exclude_queued=False)
        picked = sample_candidates(pool, self.config.training_batch_size, self._rng)
        logger.info(
            "[queue] TRAINING start, loading %s of %s unseen items (need %s KEEP / %s DELETE)",
            len(picked), len(pool), self.config.min_keep_samples, self.config.min_delete_samples,
        )
        await self._features.get_many(picked)
        self._replace_queue(unscored_entries(picked))
        logger.info("[queue] training queue ready size=%s", len(self._queue))

    async def _append_training_items(self) -> bool:
        pool = self._candidate_pool(exclude_queued=True)
        if not pool:
            return False
        more = sample_candidates(pool, self.config.training_refill_size, self._rng)
        await self._features.get_many(more)
        self._queue = self._queue + unscored_entries(more)
        logger.info("[queue] added %s training items, queue=%s", len(more), len(self._queue))
        return True

    async def _build_sorted_queue(self) -> None:
        """Replace the queue with a freshly scored random sample. SORTING until done."""
        self._phase = Phase.SORTING
        self._replace_queue([])
        pool = self._candidate_pool(exclude_queued=False)
        picked = sample_candidates(pool, self.config.sorted_queue_size, self._rng)
        logger.info("[queue] SORTING scoring %s of %s unseen items", len(picked), len(pool))
        try:
            vectors = await self._features.get_many(picked)
            entries = score_candidates(picked, vectors, self._classifier)
        finally:
            self._phase = Phase.SORTED
        self._replace_queue(entries)
        self._consecutive_keeps = 0
        if entries:
            avg = sum(e.score for e in entries) / len(entries)
            logger.info(
                "[queue] SORTED ready size=%s top=%.3f avg=%.3f",
                len(entries), entries[0].score, avg,
            )
        else:
            logger.info("[queue] SORTED ready, no unseen items left")

    # -------------------------------------------------------------------------
    # Refill
    # -------------------------------------------------------------------------

    def _maybe_start_refill(self) -> None:
        """Start the background refill when pending is low. Single-flight."""
        remaining = len(self._queue) - self._cursor
        if remaining > self.config.refill_threshold or self.is_refilling:
            return
        # Unseen counts pending entries too; the batch is drawn from what lies beyond them.
        unseen = len(self._candidate_pool(exclude_queued=False))
        if unseen < self.config.refill_size or unseen <= remaining:
            return
        logger.info("[queue] queue low (%s left, %s unseen), starting background refill", remaining, unseen)
        self._refill_task = asyncio.create_task(self._run_refill())
        self._refill_task.add_done_callback(self._log_refill_failure)

    @staticmethod
    def _log_refill_failure(task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[queue] background refill failed: %s", exc, exc_info=exc)

    async def _run_refill(self) -> None:
        batch = await self._score_refill()
        await self._apply_refill(batch)

    async def _score_refill(self) -> RefillBatch:
        """Pick and score new items. Reads state, mutates nothing but the feature cache."""
        generation = self._generation
        pool = self._candidate_pool(exclude_queued=True)
        picked = sample_candidates(pool, self.config.refill_size, self._rng)
        if not picked:
            return RefillBatch(generation, [])
        vectors = await self._features.get_many(picked)
        return RefillBatch(generation, score_candidates(picked, vectors, self._classifier))

    async def _apply_refill(self, batch: RefillBatch) -> None:
        async with self._lock:
            self._merge_refill(batch)

    def _merge_refill(self, batch: RefillBatch) -> bool:
        if batch.generation != self._generation or self._phase != Phase.SORTED:
            logger.info("[queue] refill discarded, queue was rebuilt meanwhile")
            return False
        if not batch.entries:
            logger.info("[queue] refill found no unseen items")
            return False
        blocked = set(self._decisions) | self._outstanding
        fresh = [e for e in batch.entries if e.item.id not in blocked and e.item.id in self._library]
        pending = self._queue[self._cursor:]
        merged = merge_pending(pending, fresh)
        self._replace_queue(merged)
        logger.info(
            "[queue] refill complete: %s new + %s pending = %s total",
            len(merged) - len(pending), len(pending), len(merged),
        )
        return True

    async def _refill_exhausted_queue(self) -> None:
        """Foreground refill when SORTED and nothing is pending but unseen items remain."""
        if not self._candidate_pool(exclude_queued=True):
            return
        logger.info("[queue] sorted queue exhausted, refilling in foreground")
        batch = await self._score_refill()
        self._merge_refill(batch)

    # -------------------------------------------------------------------------
    # Helpers (caller holds self._lock)
    # -------------------------------------------------------------------------

    def _mark_decided(self, item_id: int, outcome: Outcome) -> None:
        self._decisions[item_id] = outcome
        self._outstanding.discard(item_id)
        self._drop_pending(item_id)

    def _drop_pending(self, item_id: int) -> None:
        pending = self._queue[self._cursor:]
        if any(e.item.id == item_id for e in pending):
            self._queue = self._queue[: self._cursor] + [e for e in pending if e.item.id != item_id]

    def _count(self, outcome: Outcome) -> None:
        if outcome == Outcome.KEEP:
            self._keep_count += 1
        else:
            self._delete_count += 1

    def _uncount(self, outcome: Optional[Outcome]) -> None:
        if outcome == Outcome.KEEP:
            self._keep_count = max(0, self._keep_count - 1)
        elif outcome == Outcome.DELETE:
            self._delete_count = max(0, self._delete_count - 1)

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise EngineNotInitializedError(operation)
