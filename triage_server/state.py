"""Application state: ledger, item provider, embedder, and the review queue engine."""

from typing import Optional

from triage import ReviewQueueEngine
from triage.models.config import QueueConfig
from triage.protocols import DecisionLedger, Embedder, ItemProvider

from .config import ServerConfig, get_config
from .services import (
    InMemoryDecisionLedger,
    JsonDecisionLedger,
    JsonItemProvider,
    PrecomputedEmbedder,
)


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServerConfig,
        ledger: Optional[DecisionLedger] = None,
        item_provider: Optional[ItemProvider] = None,
        embedder: Optional[Embedder] = None,
        queue_config: Optional[QueueConfig] = None,
    ):
        self.config = config

        # Ledger: JSON file when configured, else in-memory
        self.ledger = ledger if ledger is not None else self._create_ledger(config)
        print(f"[startup] Decision ledger: {type(self.ledger).__name__}")

        self.item_provider = item_provider
        self.embedder = embedder
        self.queue_config = queue_config
        self.engine: Optional[ReviewQueueEngine] = None

    def _create_ledger(self, config: ServerConfig) -> DecisionLedger:
        if config.ledger_path:
            return JsonDecisionLedger(config.ledger_path)
        return InMemoryDecisionLedger()

    def _resolve_queue_config(self) -> QueueConfig:
        queue_config = self.queue_config or self.config.load_queue_config()
        dims = getattr(self.embedder, "dimensions", None)
        if dims and dims != queue_config.embedding_dimensions:
            queue_config = queue_config.model_copy(update={"embedding_dimensions": dims})
        return queue_config

    @property
    def is_loaded(self) -> bool:
        return self.engine is not None and self.engine.initialized

    async def load(self) -> ReviewQueueEngine:
        """Build the engine from the configured sources and initialize it."""
        if self.item_provider is None:
            self.item_provider = JsonItemProvider(self.config.items_json_path)
            print(f"[startup] Item provider: JSON ({self.config.items_json_path})")
        if self.embedder is None:
            self.embedder = PrecomputedEmbedder.from_file(self.config.embeddings_json_path)
            print(f"[startup] Embedder: precomputed ({self.config.embeddings_json_path})")
        items = self.item_provider.list_all()
        engine = ReviewQueueEngine(self.ledger, self.embedder, self._resolve_queue_config())
        await engine.initialize(items)
        self.engine = engine
        print(f"[startup] Loaded {len(items)} items, phase={engine.phase.value}")
        return engine

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.close()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Install a prebuilt state (tests, embedding callers)."""
    global _state
    _state = state
