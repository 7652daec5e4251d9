"""Queue endpoints: serve the next item, list what is pending."""

from fastapi import APIRouter, Query

from triage.models.queue import Phase

from ..models import NextItemResponse, PendingResponse
from ..utils import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, require_engine, to_item_card

router = APIRouter()


@router.get("/next", response_model=NextItemResponse)
async def next_item():
    """Serve the next item and advance the cursor. item is null when nothing is queued."""
    engine = require_engine()
    entry = await engine.next_item()
    scored = engine.phase == Phase.SORTED
    return NextItemResponse(
        item=to_item_card(entry, position=engine.current_index - 1, scored=scored) if entry else None,
        phase=engine.phase.value,
        remaining_count=engine.remaining,
    )


@router.get("/pending", response_model=PendingResponse)
def pending(limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)):
    """Unconsumed queue in serving order (empty while the queue is being rebuilt)."""
    engine = require_engine()
    snapshot = engine.pending_snapshot()
    scored = engine.phase == Phase.SORTED
    start = engine.current_index
    return PendingResponse(
        items=[to_item_card(e, position=start + i, scored=scored) for i, e in enumerate(snapshot[:limit])],
        phase=engine.phase.value,
        total_pending=len(snapshot),
    )
