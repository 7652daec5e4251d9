"""Shared fixtures: small libraries, a deterministic embedder, ledgers, engines."""

import threading
from typing import Dict, List, Optional, Sequence, Set

import pytest

from triage import Item, LedgerError, QueueConfig, ReviewQueueEngine
from triage_server.services import InMemoryDecisionLedger

DIMENSIONS = 4

# Items whose id is divisible by 3 look "deletable" (cluster around the first axis).
DELETE_DIRECTION = [1.0, 0.0, 0.0, 0.0]
KEEP_DIRECTION = [0.0, 1.0, 0.0, 0.0]


def looks_deletable(item_id: int) -> bool:
    return item_id % 3 == 0


def vector_for(item_id: int) -> List[float]:
    base = DELETE_DIRECTION if looks_deletable(item_id) else KEEP_DIRECTION
    jitter = (item_id % 7) / 100.0
    return [base[0] + jitter, base[1] + jitter, jitter, 0.0]


def make_items(n: int, start: int = 1) -> List[Item]:
    return [
        Item(id=i, handle=f"photo_{i}.jpg", timestamp=1_700_000_000 + i, display_name=f"IMG_{i:04d}")
        for i in range(start, start + n)
    ]


class FakeEmbedder:
    """
    Deterministic embedder keyed by handle "photo_<id>.jpg".

    failing: handles that raise. gate: when set, every call waits for it first.
    """

    def __init__(self, failing: Optional[Set[str]] = None, dimensions: int = DIMENSIONS):
        self.failing = failing or set()
        self.dimensions = dimensions
        self.calls: Dict[str, int] = {}
        self.gate: Optional[threading.Event] = None
        self._lock = threading.Lock()

    def embed(self, handle: str) -> Sequence[float]:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.calls[handle] = self.calls.get(handle, 0) + 1
        if handle in self.failing:
            raise RuntimeError(f"cannot decode {handle}")
        item_id = int(handle.split("_")[1].split(".")[0])
        return vector_for(item_id)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


class FailingLedger(InMemoryDecisionLedger):
    """Ledger whose writes fail while fail is set."""

    def __init__(self, decisions=None):
        super().__init__(decisions)
        self.fail = False

    def upsert(self, item_id, outcome):
        if self.fail:
            raise LedgerError("disk full")
        return super().upsert(item_id, outcome)

    def delete_all(self):
        if self.fail:
            raise LedgerError("disk full")
        super().delete_all()


def small_config(**overrides) -> QueueConfig:
    values = dict(
        min_keep_samples=2,
        min_delete_samples=2,
        training_batch_size=70,
        training_refill_size=20,
        sorted_queue_size=200,
        refill_threshold=150,
        refill_size=100,
        saturation_threshold=15,
        knn_k=7,
        embedding_dimensions=DIMENSIONS,
        seed=1234,
    )
    values.update(overrides)
    return QueueConfig(**values)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def ledger() -> InMemoryDecisionLedger:
    return InMemoryDecisionLedger()


@pytest.fixture
def make_engine(ledger, embedder):
    """Factory: make_engine(**config_overrides) -> uninitialized engine on the shared ledger/embedder."""

    def _make(**overrides) -> ReviewQueueEngine:
        return ReviewQueueEngine(ledger, embedder, small_config(**overrides))

    return _make
