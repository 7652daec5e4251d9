"""Trash endpoints: list pending deletions, clear flags, purge deleted content."""

from fastapi import APIRouter

from ..models import PurgeRequest, TrashResponse
from ..utils import require_engine, to_decision_card

router = APIRouter()


@router.get("", response_model=TrashResponse)
async def list_trash():
    engine = require_engine()
    decisions = await engine.trash()
    return TrashResponse(
        items=[to_decision_card(d) for d in decisions],
        deleted_item_ids=sorted(engine.trash_item_ids()),
    )


@router.post("/empty")
async def empty_trash():
    """Clear the pending-trash flag on every decision."""
    engine = require_engine()
    cleared = await engine.empty_trash()
    return {"cleared": cleared}


@router.post("/purge")
async def purge(request: PurgeRequest):
    """Forget items whose files were permanently deleted by the caller."""
    engine = require_engine()
    removed = await engine.purge_items(request.item_ids)
    return {"removed": removed, "requested": len(request.item_ids)}
