"""
Photo triage — adaptive keep/delete review queue.

Single entry point for the core package:
- models/: QueueConfig, Item, Decision, QueueEntry, Phase
- stages/: candidate_pool (random unseen selection), scoring (k-NN order, refill merge)
- classifier: online k-nearest-neighbor delete scorer
- feature_cache: per-process embedding memo
- engine: ReviewQueueEngine (phase state machine, refill, saturation reset)
"""

from .classifier import NEUTRAL_SCORE, LabeledSample, SimilarityClassifier
from .engine import ReviewQueueEngine
from .errors import EngineNotInitializedError, LedgerError, TriageError
from .feature_cache import FeatureVectorStore
from .models import (
    DEFAULT_CONFIG,
    Decision,
    Item,
    Outcome,
    Phase,
    QueueConfig,
    QueueEntry,
    QueueStats,
    ensure_items,
    resolve_config,
)
from .protocols import DecisionLedger, Embedder, ItemProvider

__all__ = [
    "DEFAULT_CONFIG",
    "Decision",
    "DecisionLedger",
    "Embedder",
    "EngineNotInitializedError",
    "FeatureVectorStore",
    "Item",
    "ItemProvider",
    "LabeledSample",
    "LedgerError",
    "NEUTRAL_SCORE",
    "Outcome",
    "Phase",
    "QueueConfig",
    "QueueEntry",
    "QueueStats",
    "ReviewQueueEngine",
    "SimilarityClassifier",
    "TriageError",
    "ensure_items",
    "resolve_config",
]
