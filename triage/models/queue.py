"""
Queue models — scored entries, the phase state machine, and progress stats.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .item import Item

# Placeholder score for training-phase entries (no classifier ordering yet).
UNSCORED = 0.0


class Phase(str, Enum):
    TRAINING = "TRAINING"  # cold start, random order
    SORTING = "SORTING"  # queue being rebuilt; never served from
    SORTED = "SORTED"  # descending delete-probability


class QueueEntry(BaseModel):
    """An item with its delete-probability (UNSCORED while training)."""

    item: Item
    score: float = UNSCORED


class QueueStats(BaseModel):
    """Read-only snapshot for progress display."""

    phase: Phase
    current_index: int
    queue_length: int
    remaining: int
    keep_count: int
    delete_count: int
    min_keep_samples: int
    min_delete_samples: int
    consecutive_keeps: int
    saturation_threshold: int
    is_refilling: bool
    seen_count: int
    library_size: int
    samples: int
    status: str
    top_score: Optional[float] = None
