"""Queue, decision and trash request/response models."""

from typing import List, Optional

from pydantic import BaseModel

from triage.models.decision import Outcome

from .common import DecisionCard, ItemCard


class NextItemResponse(BaseModel):
    item: Optional[ItemCard] = None
    phase: str
    remaining_count: int


class PendingResponse(BaseModel):
    items: List[ItemCard]
    phase: str
    total_pending: int


class DecisionRequest(BaseModel):
    item_id: int
    outcome: Outcome


class DecisionResponse(BaseModel):
    decision: DecisionCard
    phase: str
    keep_count: int
    delete_count: int
    consecutive_keeps: int


class PurgeRequest(BaseModel):
    item_ids: List[int]


class TrashResponse(BaseModel):
    items: List[DecisionCard]
    deleted_item_ids: List[int]
