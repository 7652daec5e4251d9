"""Pydantic request/response models for the API."""

from .common import DecisionCard, ItemCard
from .queue import (
    DecisionRequest,
    DecisionResponse,
    NextItemResponse,
    PendingResponse,
    PurgeRequest,
    TrashResponse,
)

__all__ = [
    "DecisionCard",
    "ItemCard",
    "DecisionRequest",
    "DecisionResponse",
    "NextItemResponse",
    "PendingResponse",
    "PurgeRequest",
    "TrashResponse",
]
