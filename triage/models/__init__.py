"""Data models for the review queue."""

from .config import DEFAULT_CONFIG, QueueConfig, resolve_config
from .decision import Decision, Outcome, ensure_decisions, make_decision
from .item import Item, ensure_items
from .queue import UNSCORED, Phase, QueueEntry, QueueStats

__all__ = [
    "DEFAULT_CONFIG",
    "Decision",
    "Item",
    "Outcome",
    "Phase",
    "QueueConfig",
    "QueueEntry",
    "QueueStats",
    "UNSCORED",
    "ensure_decisions",
    "ensure_items",
    "make_decision",
    "resolve_config",
]
