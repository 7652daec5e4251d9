"""
Queue configuration — training thresholds, batch sizes, refill and saturation policy.

QueueConfig defaults are defined here. The server may pass a dict
(e.g. from a queue_config.json if present); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator


class QueueConfig(BaseModel):
    """Configuration for the review queue engine."""

    # -------------------------------------------------------------------------
    # Training phase (cold start)
    # -------------------------------------------------------------------------

    # KEEP decisions required before the queue switches to classifier ordering.
    min_keep_samples: int = 20
    # DELETE decisions required before the queue switches to classifier ordering.
    min_delete_samples: int = 20

    # Random unseen items loaded when training starts. Embeddings are computed eagerly.
    training_batch_size: int = 70
    # Items appended each time the training queue runs dry before thresholds are met.
    training_refill_size: int = 20

    # -------------------------------------------------------------------------
    # Sorted phase
    # -------------------------------------------------------------------------

    # Random unseen items scored on every full rebuild (transition or saturation).
    sorted_queue_size: int = 200

    # Background refill starts once pending items drop to this count or below.
    refill_threshold: int = 150
    # New items scored and merged into the pending portion per refill.
    refill_size: int = 100

    # Consecutive KEEPs that mark the ranking as saturated and force a rebuild.
    saturation_threshold: int = 15

    # -------------------------------------------------------------------------
    # Classifier / embeddings
    # -------------------------------------------------------------------------

    # Neighbors voting in the k-NN delete score.
    knn_k: int = 7

    # Length of the zero vector substituted when the embedder fails.
    embedding_dimensions: int = 1280

    # Max embedder calls in flight at once.
    embed_concurrency: int = 4

    # Seed for candidate sampling. None = nondeterministic.
    seed: Optional[int] = None

    @model_validator(mode="after")
    def sizes_are_positive(self):
        for name in (
            "training_batch_size",
            "training_refill_size",
            "sorted_queue_size",
            "refill_size",
            "saturation_threshold",
            "knn_k",
            "embedding_dimensions",
            "embed_concurrency",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.min_keep_samples < 0 or self.min_delete_samples < 0:
            raise ValueError("Training thresholds cannot be negative")
        if self.refill_threshold < 0:
            raise ValueError(f"refill_threshold cannot be negative, got {self.refill_threshold}")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "QueueConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {k: v for k, v in config_dict.items() if not isinstance(v, dict)}
        if "training" in config_dict:
            tr = config_dict["training"]
            if "min_keep" in tr:
                flat["min_keep_samples"] = tr["min_keep"]
            if "min_delete" in tr:
                flat["min_delete_samples"] = tr["min_delete"]
            if "batch_size" in tr:
                flat["training_batch_size"] = tr["batch_size"]
            if "refill_size" in tr:
                flat["training_refill_size"] = tr["refill_size"]
        if "sorted" in config_dict:
            so = config_dict["sorted"]
            if "queue_size" in so:
                flat["sorted_queue_size"] = so["queue_size"]
            for key in ("refill_threshold", "refill_size", "saturation_threshold"):
                if key in so:
                    flat[key] = so[key]
        if "classifier" in config_dict:
            cl = config_dict["classifier"]
            if "k" in cl:
                flat["knn_k"] = cl["k"]
            if "embedding_dimensions" in cl:
                flat["embedding_dimensions"] = cl["embedding_dimensions"]
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = QueueConfig()


def resolve_config(config: Optional["QueueConfig"]) -> "QueueConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
