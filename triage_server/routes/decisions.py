"""Decision endpoints: record a keep/delete, restore a delete."""

from fastapi import APIRouter

from ..models import DecisionRequest, DecisionResponse
from ..utils import require_engine, require_item, to_decision_card

router = APIRouter()


def _response(engine, decision) -> DecisionResponse:
    keep_count, delete_count = engine.training_stats()
    return DecisionResponse(
        decision=to_decision_card(decision),
        phase=engine.phase.value,
        keep_count=keep_count,
        delete_count=delete_count,
        consecutive_keeps=engine.consecutive_keeps,
    )


@router.post("", response_model=DecisionResponse)
async def record_decision(request: DecisionRequest):
    """Record KEEP or DELETE for an item and train the scorer on it."""
    engine = require_engine()
    item = require_item(engine, request.item_id)
    decision = await engine.record_decision(item, request.outcome)
    return _response(engine, decision)


@router.post("/{item_id}/restore", response_model=DecisionResponse)
async def restore_decision(item_id: int):
    """Turn a DELETE back into KEEP (restore from trash)."""
    engine = require_engine()
    item = require_item(engine, item_id)
    decision = await engine.restore_decision(item)
    return _response(engine, decision)
