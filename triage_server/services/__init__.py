"""Backing logic: ledgers, item providers, embedders."""

from .decision_ledger import InMemoryDecisionLedger, JsonDecisionLedger
from .embedder import PrecomputedEmbedder
from .item_provider import JsonItemProvider, StaticItemProvider

__all__ = [
    "InMemoryDecisionLedger",
    "JsonDecisionLedger",
    "JsonItemProvider",
    "PrecomputedEmbedder",
    "StaticItemProvider",
]
