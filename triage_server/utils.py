"""Pure helpers: item/decision card formatting, engine lookup."""

from typing import Optional

from fastapi import HTTPException

from triage import ReviewQueueEngine
from triage.models.decision import Decision
from triage.models.item import Item
from triage.models.queue import QueueEntry

from .models import DecisionCard, ItemCard
from .state import get_state

# Pending listing page sizes (used by routes/queue)
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 200


def require_engine() -> ReviewQueueEngine:
    """Loaded engine, or 400 when startup has not loaded a library yet."""
    state = get_state()
    if not state.is_loaded:
        raise HTTPException(
            status_code=400,
            detail="No library loaded. Check ITEMS_JSON_PATH and EMBEDDINGS_JSON_PATH.",
        )
    return state.engine


def require_item(engine: ReviewQueueEngine, item_id: int) -> Item:
    item = engine.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return item


def to_item_card(entry: QueueEntry, position: Optional[int] = None, scored: bool = True) -> ItemCard:
    item = entry.item
    return ItemCard(
        id=item.id,
        handle=item.handle,
        display_name=item.display_name,
        timestamp=item.timestamp,
        score=round(entry.score, 4) if scored else None,
        queue_position=position,
    )


def to_decision_card(decision: Decision) -> DecisionCard:
    return DecisionCard(
        item_id=decision.item_id,
        outcome=decision.outcome.value,
        timestamp=decision.timestamp,
        in_trash=decision.in_trash,
    )
